"""Shared helpers for the vendor and admin routers."""

import uuid

from services.marketplace_service.models import VendorStatus
from services.marketplace_service.schemas import (
    ApprovalUpdate,
    VendorDeleteResponse,
    VendorResponse,
)
from services.marketplace_service.services import vendor_lifecycle
from services.marketplace_service.services.approval_column import VendorRecord
from sqlalchemy.ext.asyncio import AsyncSession


def vendor_response(record: VendorRecord) -> VendorResponse:
    return VendorResponse.model_validate(record)


async def apply_approval_update(
    db: AsyncSession, vendor_id: uuid.UUID, payload: ApprovalUpdate
) -> VendorResponse:
    """Apply ``{isApproved}`` / ``{approved}`` / ``{status}`` to a vendor row."""
    if payload.status == "disabled":
        record = await vendor_lifecycle.disable_vendor(db, vendor_id)
    elif payload.status == "rejected":
        record = await vendor_lifecycle.set_vendor_approval(
            db, vendor_id, False, reason=VendorStatus.REJECTED
        )
    else:
        record = await vendor_lifecycle.set_vendor_approval(
            db, vendor_id, payload.value
        )
    return vendor_response(record)


async def delete_vendor_response(
    db: AsyncSession, vendor_id: uuid.UUID
) -> VendorDeleteResponse:
    result = await vendor_lifecycle.delete_vendor(db, vendor_id)
    return VendorDeleteResponse(
        vendor_id=result.vendor_id, hard=result.hard, soft_deleted=not result.hard
    )
