"""Orders router: checkout, order listings and order updates."""

import uuid
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, status
from libs.auth.dependencies import get_current_user, get_optional_user, require_admin
from libs.auth.models import AuthUser
from libs.common.errors import PermissionDeniedError
from libs.common.rate_limit import CHECKOUT_LIMIT, limiter
from libs.db.session import get_async_db
from services.marketplace_service.models import OrderStatus
from services.marketplace_service.schemas import (
    CheckoutRequest,
    CheckoutResponse,
    OrderNotesUpdate,
    OrderResponse,
    OrderStatusUpdate,
)
from services.marketplace_service.services import checkout, orders
from services.marketplace_service.services.notifications import (
    OrderReceipt,
    dispatch_order_notifications,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["orders"])


# ============================================================================
# CHECKOUT
# ============================================================================


@router.post(
    "/orders", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED
)
@router.post(
    "/checkout", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED
)
@limiter.limit(CHECKOUT_LIMIT)
async def create_order(
    request: Request,
    payload: CheckoutRequest,
    background_tasks: BackgroundTasks,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Place an order. Guests allowed; notifications go out after the response."""
    created = await checkout.place_order(
        db,
        payload,
        customer_id=uuid.UUID(current_user.user_id) if current_user else None,
    )
    for order in created:
        background_tasks.add_task(
            dispatch_order_notifications, OrderReceipt.from_order(order)
        )
    return CheckoutResponse(
        order_id=created[0].id,
        orders=[OrderResponse.model_validate(order) for order in created],
    )


# ============================================================================
# LISTINGS
# ============================================================================


@router.get("/orders", response_model=list[OrderResponse])
async def list_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await orders.list_orders(
        db, status=status_filter, limit=limit, offset=offset
    )


@router.get("/orders/vendor/{vendor_id}", response_model=list[OrderResponse])
async def list_vendor_orders(
    vendor_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    if not current_user.is_admin:
        if await orders.caller_vendor_id(db, current_user) != vendor_id:
            raise PermissionDeniedError("Not allowed to view these orders")
    return await orders.list_orders(db, vendor_id=vendor_id)


@router.get("/orders/customer/{customer_id}", response_model=list[OrderResponse])
async def list_customer_orders(
    customer_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    if not current_user.is_admin and current_user.user_id != str(customer_id):
        raise PermissionDeniedError("Not allowed to view these orders")
    return await orders.list_orders(db, customer_id=customer_id)


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    order = await orders.get_order(db, order_id)
    await orders.ensure_can_view(db, current_user, order)
    return order


# ============================================================================
# UPDATES
# ============================================================================


@router.put("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await orders.update_status(db, current_user, order_id, payload.status)


@router.patch("/orders/{order_id}/notes", response_model=OrderResponse)
async def update_order_notes(
    order_id: uuid.UUID,
    payload: OrderNotesUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await orders.update_notes(db, current_user, order_id, payload.notes)
