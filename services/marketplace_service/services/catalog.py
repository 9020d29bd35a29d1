"""Catalog reads and vendor-owned product writes."""

import uuid
from typing import Any, Optional

from libs.auth.models import AuthUser
from libs.common.errors import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from libs.common.logging import get_logger
from services.marketplace_service.models import Category, Product
from services.marketplace_service.services import vendor_lifecycle
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

PRODUCT_FIELDS = (
    "name",
    "description",
    "price",
    "stock",
    "image_url",
    "category_id",
    "is_active",
)


async def list_categories(db: AsyncSession) -> list[Category]:
    result = await db.execute(select(Category).order_by(Category.name))
    return list(result.scalars().all())


async def list_products(
    db: AsyncSession,
    *,
    category_id: Optional[uuid.UUID] = None,
    vendor_id: Optional[uuid.UUID] = None,
    search: Optional[str] = None,
    include_inactive: bool = False,
    limit: int = 100,
    offset: int = 0,
) -> list[Product]:
    """Products newest first. Soft-deleted products are hidden unless asked for."""
    query = select(Product).order_by(Product.created_at.desc())
    if not include_inactive:
        query = query.where(Product.is_active.is_(True))
    if category_id is not None:
        query = query.where(Product.category_id == category_id)
    if vendor_id is not None:
        query = query.where(Product.vendor_id == vendor_id)
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.where(
            or_(
                func.lower(Product.name).like(pattern),
                func.lower(Product.description).like(pattern),
            )
        )
    result = await db.execute(query.limit(limit).offset(offset))
    return list(result.scalars().all())


async def get_product(db: AsyncSession, product_id: uuid.UUID) -> Product:
    """Fetch a product, including soft-deleted ones (order history links to them)."""
    product = await db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


async def _owning_vendor_id(
    db: AsyncSession, current_user: AuthUser, vendor_id: Optional[uuid.UUID]
) -> uuid.UUID:
    """Vendor a write acts for. Admins may act for any vendor."""
    if current_user.is_admin and vendor_id is not None:
        await vendor_lifecycle.get_vendor(db, vendor_id)
        return vendor_id

    try:
        vendor = await vendor_lifecycle.get_vendor_by_user(
            db, uuid.UUID(current_user.user_id)
        )
    except NotFoundError:
        raise PermissionDeniedError("Only vendors can manage products")
    if not vendor.is_approved:
        raise PermissionDeniedError("Vendor account is not approved")
    return vendor.id


async def _check_category(db: AsyncSession, category_id: Any) -> None:
    if category_id is not None and await db.get(Category, category_id) is None:
        raise ValidationError("Unknown category")


async def create_product(
    db: AsyncSession,
    current_user: AuthUser,
    data: dict[str, Any],
    *,
    vendor_id: Optional[uuid.UUID] = None,
) -> Product:
    """Create a product for the caller's (approved) vendor account."""
    owner_id = await _owning_vendor_id(db, current_user, vendor_id)
    await _check_category(db, data.get("category_id"))

    product = Product(
        vendor_id=owner_id,
        **{key: value for key, value in data.items() if key in PRODUCT_FIELDS},
    )
    db.add(product)
    await db.commit()
    await db.refresh(product)
    logger.info("Vendor %s created product %s", owner_id, product.id)
    return product


async def _editable_product(
    db: AsyncSession, current_user: AuthUser, product_id: uuid.UUID
) -> Product:
    product = await get_product(db, product_id)
    if current_user.is_admin:
        return product
    owner_id = await _owning_vendor_id(db, current_user, None)
    if product.vendor_id != owner_id:
        raise PermissionDeniedError("Product belongs to another vendor")
    return product


async def update_product(
    db: AsyncSession,
    current_user: AuthUser,
    product_id: uuid.UUID,
    changes: dict[str, Any],
) -> Product:
    product = await _editable_product(db, current_user, product_id)
    if "category_id" in changes:
        await _check_category(db, changes["category_id"])

    for key, value in changes.items():
        if key in PRODUCT_FIELDS:
            setattr(product, key, value)

    await db.commit()
    await db.refresh(product)
    return product


async def deactivate_product(
    db: AsyncSession, current_user: AuthUser, product_id: uuid.UUID
) -> Product:
    """Soft delete: hide from the catalog, keep for order history."""
    product = await _editable_product(db, current_user, product_id)
    product.is_active = False
    await db.commit()
    await db.refresh(product)
    logger.info("Product %s deactivated", product_id)
    return product
