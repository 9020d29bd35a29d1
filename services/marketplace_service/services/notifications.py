"""Order notification fan-out: buyer/admin email and WhatsApp.

Best-effort and at-most-once. Runs after the checkout response has been sent
(FastAPI background task) on a detached ``OrderReceipt`` so it never touches
the request's database session. Each channel is independent and bounded by
``NOTIFICATION_TIMEOUT_SECONDS``; failures are logged, never raised.
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Awaitable, Callable, Optional

from libs.common.config import get_settings
from libs.common.currency import format_money
from libs.common.emails.orders import send_admin_order_email, send_order_receipt_email
from libs.common.logging import get_logger
from libs.common.whatsapp import send_whatsapp

logger = get_logger(__name__)

SENT = "sent"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass(frozen=True)
class ReceiptLine:
    name: str
    quantity: int
    price: Decimal


@dataclass(frozen=True)
class OrderReceipt:
    """Everything the notifications need, copied out of a committed order."""

    order_id: uuid.UUID
    reference: str
    customer_name: str
    customer_email: str
    customer_phone: Optional[str]
    currency: str
    rate: Decimal
    subtotal: Decimal
    shipping_fee: Decimal
    total: Decimal
    payment_method: str
    ship_to: str
    items: tuple[ReceiptLine, ...] = field(default_factory=tuple)

    @classmethod
    def from_order(cls, order) -> "OrderReceipt":
        address = order.shipping_address or {}
        ship_to = ", ".join(
            str(address[key])
            for key in ("line1", "line2", "city", "region", "country")
            if address.get(key)
        )
        return cls(
            order_id=order.id,
            reference=order.reference,
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            customer_phone=order.customer_phone,
            currency=order.currency,
            rate=order.rate,
            subtotal=order.subtotal,
            shipping_fee=order.shipping_fee,
            total=order.total,
            payment_method=order.payment_method,
            ship_to=ship_to,
            items=tuple(
                ReceiptLine(name=item.name, quantity=item.quantity, price=item.price)
                for item in order.items
            ),
        )

    def item_dicts(self) -> list[dict]:
        return [
            {"name": line.name, "quantity": line.quantity, "price": line.price}
            for line in self.items
        ]


def customer_whatsapp_text(receipt: OrderReceipt) -> str:
    settings = get_settings()
    return (
        f"Hi {receipt.customer_name}, thanks for shopping with {settings.APP_NAME}! "
        f"Order {receipt.reference} received. "
        f"Total: {format_money(receipt.total, receipt.currency)}. "
        "We'll contact you shortly to arrange delivery."
    )


def admin_whatsapp_text(receipt: OrderReceipt) -> str:
    return (
        f"New order {receipt.reference} from {receipt.customer_name} "
        f"({receipt.customer_phone or receipt.customer_email}). "
        f"Total: {format_money(receipt.total, receipt.currency)}. "
        f"Ship to: {receipt.ship_to}"
    )


async def _run_channel(
    name: str,
    order_ref: str,
    send: Callable[[], Awaitable[bool]],
    timeout: float,
) -> str:
    try:
        # Abandons, but cannot cancel, an SMTP send running in a worker thread;
        # the SMTP socket timeout bounds that thread.
        sent = await asyncio.wait_for(send(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(
            "Notification %s for order %s timed out after %ss", name, order_ref, timeout
        )
        return FAILED
    except Exception:
        logger.exception("Notification %s for order %s failed", name, order_ref)
        return FAILED
    return SENT if sent else SKIPPED


async def dispatch_order_notifications(receipt: OrderReceipt) -> dict[str, str]:
    """Send every order notification. Returns channel -> sent/skipped/failed."""
    settings = get_settings()
    timeout = settings.NOTIFICATION_TIMEOUT_SECONDS
    items = receipt.item_dicts()
    admin_email = settings.ADMIN_EMAIL or settings.SUPPORT_EMAIL

    async def customer_email() -> bool:
        return await send_order_receipt_email(
            to_email=receipt.customer_email,
            customer_name=receipt.customer_name,
            order_ref=receipt.reference,
            items=items,
            subtotal=receipt.subtotal,
            shipping_fee=receipt.shipping_fee,
            total=receipt.total,
            currency=receipt.currency,
            rate=receipt.rate,
            payment_method=receipt.payment_method,
            ship_to=receipt.ship_to,
        )

    async def admin_email_send() -> bool:
        return await send_admin_order_email(
            to_email=admin_email,
            order_ref=receipt.reference,
            customer_name=receipt.customer_name,
            customer_email=receipt.customer_email,
            customer_phone=receipt.customer_phone,
            items=items,
            total=receipt.total,
            currency=receipt.currency,
            rate=receipt.rate,
            payment_method=receipt.payment_method,
            ship_to=receipt.ship_to,
        )

    async def customer_whatsapp() -> bool:
        if not receipt.customer_phone:
            return False
        return await send_whatsapp(receipt.customer_phone, customer_whatsapp_text(receipt))

    async def admin_whatsapp() -> bool:
        if not settings.TWILIO_ADMIN_WHATSAPP_TO:
            return False
        return await send_whatsapp(
            settings.TWILIO_ADMIN_WHATSAPP_TO, admin_whatsapp_text(receipt)
        )

    channels = {
        "customer_email": customer_email,
        "admin_email": admin_email_send,
        "customer_whatsapp": customer_whatsapp,
        "admin_whatsapp": admin_whatsapp,
    }
    results = await asyncio.gather(
        *(
            _run_channel(name, receipt.reference, send, timeout)
            for name, send in channels.items()
        )
    )
    outcome = dict(zip(channels, results))
    logger.info("Order %s notifications: %s", receipt.reference, outcome)
    return outcome
