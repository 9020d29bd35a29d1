"""Catalog router: categories and products."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import require_admin, require_vendor
from libs.auth.models import AuthUser
from libs.common.errors import ConflictError
from libs.db.session import get_async_db
from services.marketplace_service.models import Category
from services.marketplace_service.schemas import (
    CategoryCreate,
    CategoryResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from services.marketplace_service.services import catalog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["catalog"])


# ============================================================================
# CATEGORIES
# ============================================================================


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_async_db)):
    return await catalog.list_categories(db)


@router.post(
    "/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_category(
    payload: CategoryCreate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    category = Category(**payload.model_dump())
    db.add(category)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Category '{payload.name}' already exists")
    await db.refresh(category)
    return category


# ============================================================================
# PRODUCTS
# ============================================================================


@router.get("/products", response_model=list[ProductResponse])
async def list_products(
    category_id: Optional[uuid.UUID] = Query(None, alias="categoryId"),
    vendor_id: Optional[uuid.UUID] = Query(None, alias="vendorId"),
    search: Optional[str] = Query(None, alias="q"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_async_db),
):
    """Active products only."""
    return await catalog.list_products(
        db,
        category_id=category_id,
        vendor_id=vendor_id,
        search=search,
        limit=limit,
        offset=offset,
    )


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(product_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)):
    """Resolves soft-deleted products too, for order history links."""
    return await catalog.get_product(db, product_id)


@router.post(
    "/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED
)
async def create_product(
    payload: ProductCreate,
    current_user: AuthUser = Depends(require_vendor),
    db: AsyncSession = Depends(get_async_db),
):
    data = payload.model_dump(exclude={"vendor_id"})
    return await catalog.create_product(
        db, current_user, data, vendor_id=payload.vendor_id
    )


@router.put("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    current_user: AuthUser = Depends(require_vendor),
    db: AsyncSession = Depends(get_async_db),
):
    changes = payload.model_dump(exclude_unset=True)
    return await catalog.update_product(db, current_user, product_id, changes)


@router.delete("/products/{product_id}", response_model=ProductResponse)
async def delete_product(
    product_id: uuid.UUID,
    current_user: AuthUser = Depends(require_vendor),
    db: AsyncSession = Depends(get_async_db),
):
    """Soft delete."""
    return await catalog.deactivate_product(db, current_user, product_id)
