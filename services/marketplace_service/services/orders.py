"""Order queries and the two mutable order fields (status, notes)."""

import uuid
from typing import Optional

from libs.auth.models import AuthUser
from libs.common.errors import NotFoundError, PermissionDeniedError
from libs.common.logging import get_logger
from services.marketplace_service.models import Order, OrderStatus, Vendor
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)


async def list_orders(
    db: AsyncSession,
    *,
    vendor_id: Optional[uuid.UUID] = None,
    customer_id: Optional[uuid.UUID] = None,
    status: Optional[OrderStatus] = None,
    limit: int = 100,
    offset: int = 0,
) -> list[Order]:
    query = (
        select(Order)
        .options(selectinload(Order.items))
        .order_by(Order.created_at.desc())
    )
    if vendor_id is not None:
        query = query.where(Order.vendor_id == vendor_id)
    if customer_id is not None:
        query = query.where(Order.customer_id == customer_id)
    if status is not None:
        query = query.where(Order.status == status)
    result = await db.execute(query.limit(limit).offset(offset))
    return list(result.scalars().all())


async def get_order(db: AsyncSession, order_id: uuid.UUID) -> Order:
    result = await db.execute(
        select(Order).options(selectinload(Order.items)).where(Order.id == order_id)
    )
    order = result.scalar_one_or_none()
    if order is None:
        raise NotFoundError("Order not found")
    return order


async def caller_vendor_id(
    db: AsyncSession, current_user: AuthUser
) -> Optional[uuid.UUID]:
    result = await db.execute(
        select(Vendor.id).where(Vendor.user_id == uuid.UUID(current_user.user_id))
    )
    return result.scalar_one_or_none()


async def ensure_can_view(
    db: AsyncSession, current_user: AuthUser, order: Order
) -> None:
    """Admins see everything; vendors their orders; customers their own."""
    if current_user.is_admin:
        return
    if order.customer_id is not None and str(order.customer_id) == current_user.user_id:
        return
    if await caller_vendor_id(db, current_user) == order.vendor_id:
        return
    raise PermissionDeniedError("Not allowed to view this order")


async def _managed_order(
    db: AsyncSession, current_user: AuthUser, order_id: uuid.UUID
) -> Order:
    order = await get_order(db, order_id)
    if current_user.is_admin:
        return order
    if await caller_vendor_id(db, current_user) != order.vendor_id:
        raise PermissionDeniedError("Only the selling vendor can change this order")
    return order


async def update_status(
    db: AsyncSession,
    current_user: AuthUser,
    order_id: uuid.UUID,
    status: OrderStatus,
) -> Order:
    order = await _managed_order(db, current_user, order_id)
    previous = order.status
    order.status = status
    await db.commit()
    logger.info("Order %s status %s -> %s", order.reference, previous, status)
    return await get_order(db, order_id)


async def update_notes(
    db: AsyncSession,
    current_user: AuthUser,
    order_id: uuid.UUID,
    notes: Optional[str],
) -> Order:
    order = await _managed_order(db, current_user, order_id)
    order.notes = notes
    await db.commit()
    return await get_order(db, order_id)
