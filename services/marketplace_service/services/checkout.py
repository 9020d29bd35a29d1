"""Checkout: price a cart against the catalog and persist order snapshots.

Prices are stored in NLe and converted into the order currency per unit
(2 dp) before multiplying by quantity, so ``subtotal == sum(unit * qty)``
holds exactly for what is stored.
"""

import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from libs.common.config import get_settings
from libs.common.currency import Currency, quantize_money, to_decimal, to_order_currency
from libs.common.errors import PersistenceError, ProductNotFoundError, ValidationError
from libs.common.logging import get_logger
from services.marketplace_service.models import Order, OrderItem, OrderStatus, Product
from services.marketplace_service.schemas import CheckoutRequest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# Flat fee for now; hook for per-region pricing
SHIPPING_FEE = Decimal("0.00")


@dataclass(frozen=True)
class PricedLine:
    product: Product
    quantity: int
    unit_price: Decimal  # order currency

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


def calculate_shipping_fee(lines: list[PricedLine], currency: Currency) -> Decimal:
    return SHIPPING_FEE


def calculate_subtotal(lines: list[PricedLine]) -> Decimal:
    return quantize_money(sum((line.line_total for line in lines), Decimal("0")))


async def _resolve_products(
    db: AsyncSession, product_ids: list[uuid.UUID]
) -> dict[uuid.UUID, Product]:
    """Active products by id. The first unknown id (in cart order) aborts checkout."""
    result = await db.execute(
        select(Product).where(
            Product.id.in_(set(product_ids)), Product.is_active.is_(True)
        )
    )
    products = {product.id: product for product in result.scalars().all()}
    for product_id in product_ids:
        if product_id not in products:
            raise ProductNotFoundError(product_id)
    return products


def group_by_vendor(
    lines: list[PricedLine], *, split: bool
) -> list[tuple[uuid.UUID, list[PricedLine]]]:
    """Vendor attribution for the order(s) a cart produces.

    Without ``split`` the whole cart goes to the first line's vendor. With it,
    one group per vendor in first-seen order.
    """
    if not split:
        return [(lines[0].product.vendor_id, lines)]

    groups: dict[uuid.UUID, list[PricedLine]] = {}
    for line in lines:
        groups.setdefault(line.product.vendor_id, []).append(line)
    return list(groups.items())


def _ship_address(request: CheckoutRequest) -> dict:
    return request.shipping_address.model_dump(exclude_none=True)


async def place_order(
    db: AsyncSession,
    request: CheckoutRequest,
    *,
    customer_id: Optional[uuid.UUID] = None,
) -> list[Order]:
    """Create the order(s) for a cart in one transaction.

    Raises ProductNotFoundError before any write when a line cannot be
    resolved, and PersistenceError (after rolling back) when the write fails.
    Returned orders have their items loaded.
    """
    settings = get_settings()
    if not request.items:
        raise ValidationError("Cart is empty")

    currency = Currency(request.currency or settings.DEFAULT_CURRENCY)
    rate = to_decimal(request.rate if request.rate is not None else settings.USD_RATE)
    if rate <= 0:
        raise ValidationError("Exchange rate must be positive")

    products = await _resolve_products(db, [item.product_id for item in request.items])
    lines = [
        PricedLine(
            product=products[item.product_id],
            quantity=item.quantity,
            unit_price=to_order_currency(
                products[item.product_id].price, currency, rate
            ),
        )
        for item in request.items
    ]

    split = settings.SPLIT_MULTI_VENDOR_ORDERS
    groups = group_by_vendor(lines, split=split)
    vendor_count = len({line.product.vendor_id for line in lines})
    if vendor_count > 1 and not split:
        logger.warning(
            "Cart spans %d vendors; attributing the order to vendor %s",
            vendor_count,
            groups[0][0],
        )

    orders = []
    try:
        for vendor_id, group in groups:
            subtotal = calculate_subtotal(group)
            shipping_fee = calculate_shipping_fee(group, currency)
            order = Order(
                vendor_id=vendor_id,
                customer_id=customer_id,
                customer_name=request.customer_name.strip(),
                customer_email=str(request.customer_email),
                customer_phone=request.customer_phone,
                currency=currency.value,
                rate=rate,
                subtotal=subtotal,
                shipping_fee=shipping_fee,
                total=quantize_money(subtotal + shipping_fee),
                payment_method=request.payment_method.value,
                notes=request.notes,
                shipping_address=_ship_address(request),
                status=OrderStatus.PENDING,
            )
            db.add(order)
            await db.flush()

            for position, line in enumerate(group):
                db.add(
                    OrderItem(
                        order_id=order.id,
                        product_id=line.product.id,
                        vendor_id=line.product.vendor_id,
                        name=line.product.name,
                        image_url=line.product.image_url,
                        price=line.unit_price,
                        quantity=line.quantity,
                        position=position,
                    )
                )
            orders.append(order)

        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Checkout failed, rolled back: %s", exc)
        raise PersistenceError("Could not save the order") from exc

    for order in orders:
        await db.refresh(order, attribute_names=["items"])
        logger.info(
            "Order %s created for vendor %s: %s %s (%d items)",
            order.reference,
            order.vendor_id,
            order.total,
            order.currency,
            len(order.items),
        )
    return orders
