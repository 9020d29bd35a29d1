"""Platform numbers for the admin dashboard."""

from decimal import Decimal

from libs.common.datetime_utils import start_of_utc_day
from services.marketplace_service.models import (
    ApplicationStatus,
    Order,
    OrderStatus,
    Product,
    User,
    UserRole,
    VendorApplication,
)
from services.marketplace_service.services.approval_column import get_vendor_schema
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession


async def _count(db: AsyncSession, query) -> int:
    return (await db.execute(query)).scalar_one()


async def admin_stats(db: AsyncSession) -> dict:
    schema = await get_vendor_schema(db)
    vendors = schema.table

    total_vendors = await _count(db, select(func.count()).select_from(vendors))
    approved_vendors = await _count(
        db, select(func.count()).select_from(vendors).where(schema.approved_clause(True))
    )
    pending_applications = await _count(
        db,
        select(func.count())
        .select_from(VendorApplication)
        .where(VendorApplication.status == ApplicationStatus.PENDING),
    )
    total_customers = await _count(
        db, select(func.count()).select_from(User).where(User.role == UserRole.CUSTOMER)
    )
    active_products = await _count(
        db, select(func.count()).select_from(Product).where(Product.is_active.is_(True))
    )
    total_orders = await _count(db, select(func.count()).select_from(Order))
    orders_today = await _count(
        db,
        select(func.count())
        .select_from(Order)
        .where(Order.created_at >= start_of_utc_day()),
    )

    # Amounts are stored in the order currency, so revenue is per currency
    revenue_rows = await db.execute(
        select(Order.currency, func.coalesce(func.sum(Order.total), 0))
        .where(Order.status != OrderStatus.CANCELLED)
        .group_by(Order.currency)
    )
    revenue = {currency: Decimal(str(total)) for currency, total in revenue_rows.all()}

    return {
        "total_vendors": total_vendors,
        "approved_vendors": approved_vendors,
        "pending_vendors": total_vendors - approved_vendors,
        "pending_applications": pending_applications,
        "total_customers": total_customers,
        "active_products": active_products,
        "total_orders": total_orders,
        "orders_today": orders_today,
        "revenue": revenue,
    }
