"""Admin console router: vendor moderation and platform stats."""

import uuid

from fastapi import APIRouter, Depends
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.marketplace_service.models import VendorStatus
from services.marketplace_service.routers._helpers import (
    apply_approval_update,
    delete_vendor_response,
    vendor_response,
)
from services.marketplace_service.schemas import (
    AdminStats,
    AdminVendorUpdate,
    ApprovalUpdate,
    VendorDeleteResponse,
    VendorResponse,
)
from services.marketplace_service.services import stats, vendor_lifecycle
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=AdminStats)
async def get_stats(db: AsyncSession = Depends(get_async_db)):
    return await stats.admin_stats(db)


@router.get("/vendors", response_model=list[VendorResponse])
async def list_vendors(db: AsyncSession = Depends(get_async_db)):
    """Every vendor with its derived status, newest first."""
    records = await vendor_lifecycle.list_vendors(db)
    return [vendor_response(record) for record in records]


@router.patch("/vendors/{vendor_id}", response_model=VendorResponse)
async def update_vendor(
    vendor_id: uuid.UUID,
    payload: AdminVendorUpdate,
    db: AsyncSession = Depends(get_async_db),
):
    """``{isApproved: bool}`` or ``{action: approve|reject|disable}``."""
    if payload.action == "disable":
        record = await vendor_lifecycle.disable_vendor(db, vendor_id)
    elif payload.action == "reject":
        record = await vendor_lifecycle.set_vendor_approval(
            db, vendor_id, False, reason=VendorStatus.REJECTED
        )
    elif payload.action == "approve":
        record = await vendor_lifecycle.set_vendor_approval(db, vendor_id, True)
    else:
        record = await vendor_lifecycle.set_vendor_approval(
            db, vendor_id, payload.is_approved
        )
    return vendor_response(record)


@router.patch("/vendors/{vendor_id}/approval", response_model=VendorResponse)
@router.put("/vendors/{vendor_id}/approval", response_model=VendorResponse)
@router.post("/vendors/{vendor_id}/approval", response_model=VendorResponse)
async def set_vendor_approval(
    vendor_id: uuid.UUID,
    payload: ApprovalUpdate,
    db: AsyncSession = Depends(get_async_db),
):
    return await apply_approval_update(db, vendor_id, payload)


@router.post("/vendors/{vendor_id}/approve", response_model=VendorResponse)
async def approve_vendor(vendor_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)):
    record = await vendor_lifecycle.set_vendor_approval(db, vendor_id, True)
    return vendor_response(record)


@router.post("/vendors/{vendor_id}/reject", response_model=VendorResponse)
async def reject_vendor(vendor_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)):
    record = await vendor_lifecycle.set_vendor_approval(
        db, vendor_id, False, reason=VendorStatus.REJECTED
    )
    return vendor_response(record)


@router.post("/vendors/{vendor_id}/disable", response_model=VendorResponse)
async def disable_vendor(vendor_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)):
    """Switch off an approved vendor. Their products and orders stay."""
    return vendor_response(await vendor_lifecycle.disable_vendor(db, vendor_id))


@router.delete("/vendors/{vendor_id}", response_model=VendorDeleteResponse)
async def delete_vendor(vendor_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)):
    return await delete_vendor_response(db, vendor_id)
