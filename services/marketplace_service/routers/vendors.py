"""Vendor router: applications, vendor lookups and approval endpoints.

Several paths are aliases kept for older admin consoles; they all end in the
same lifecycle operations.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from libs.auth.dependencies import get_optional_user, require_admin
from libs.auth.models import AuthUser
from libs.common.errors import PermissionDeniedError
from libs.common.rate_limit import APPLICATION_LIMIT, limiter
from libs.db.session import get_async_db
from services.marketplace_service.models import ApplicationStatus, VendorStatus
from services.marketplace_service.routers._helpers import (
    apply_approval_update,
    delete_vendor_response,
    vendor_response,
)
from services.marketplace_service.schemas import (
    ApplicationDecisionResponse,
    ApplicationSubmitResponse,
    ApprovalUpdate,
    VendorApplicationCreate,
    VendorApplicationResponse,
    VendorDeleteResponse,
    VendorResponse,
)
from services.marketplace_service.services import vendor_lifecycle
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["vendors"])


# ============================================================================
# APPLICATIONS
# ============================================================================


@router.post(
    "/vendors/apply",
    response_model=ApplicationSubmitResponse,
    status_code=status.HTTP_201_CREATED,
)
@router.post(
    "/vendor-requests",
    response_model=ApplicationSubmitResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(APPLICATION_LIMIT)
async def submit_application(
    request: Request,
    payload: VendorApplicationCreate,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Apply to become a vendor. Re-applying updates the existing application."""
    result = await vendor_lifecycle.submit_application(
        db,
        store_name=payload.store_name,
        email=payload.email or (current_user.email if current_user else None),
        phone=payload.phone,
        address=payload.address,
        description=payload.description,
        user_id=uuid.UUID(current_user.user_id) if current_user else None,
    )
    return ApplicationSubmitResponse(
        id=result.application.id,
        status=result.application.status,
        created=result.created,
    )


@router.get("/vendor-requests", response_model=list[VendorApplicationResponse])
async def list_applications(
    status_filter: Optional[ApplicationStatus] = Query(
        ApplicationStatus.PENDING, alias="status"
    ),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Pending applications by default, newest first."""
    return await vendor_lifecycle.list_applications(db, status=status_filter)


@router.get(
    "/vendor-requests/{application_id}", response_model=VendorApplicationResponse
)
async def get_application(
    application_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await vendor_lifecycle.get_application(db, application_id)


@router.patch(
    "/vendor-requests/{application_id}/approve",
    response_model=ApplicationDecisionResponse,
)
async def approve_application(
    application_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    result = await vendor_lifecycle.approve(db, application_id)
    return ApplicationDecisionResponse(
        application=VendorApplicationResponse.model_validate(result.application),
        vendor_id=result.vendor_id,
        user_id=result.user_id,
        promoted=result.promoted,
    )


@router.patch(
    "/vendor-requests/{application_id}/reject",
    response_model=ApplicationDecisionResponse,
)
async def reject_application(
    application_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    application = await vendor_lifecycle.reject(db, application_id)
    return ApplicationDecisionResponse(
        application=VendorApplicationResponse.model_validate(application),
        vendor_id=application.vendor_id,
        user_id=application.user_id,
    )


# ============================================================================
# VENDORS
# ============================================================================


@router.get("/vendors", response_model=list[VendorResponse])
async def list_vendors(
    include_all: bool = Query(False, alias="all"),
    current_user: Optional[AuthUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Approved vendors. ``?all=1`` lists every vendor (admins only)."""
    if include_all:
        if current_user is None or not current_user.is_admin:
            raise PermissionDeniedError("Admin privileges required")
        records = await vendor_lifecycle.list_vendors(db)
    else:
        records = await vendor_lifecycle.list_vendors(db, approved=True)
    return [vendor_response(record) for record in records]


@router.get("/vendors/pending", response_model=list[VendorResponse])
async def list_pending_vendors(
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    records = await vendor_lifecycle.list_pending_vendors(db)
    return [vendor_response(record) for record in records]


@router.get("/vendors/user/{user_id}", response_model=VendorResponse)
async def get_vendor_by_user(
    user_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)
):
    return vendor_response(await vendor_lifecycle.get_vendor_by_user(db, user_id))


@router.get("/vendors/{vendor_id}", response_model=VendorResponse)
async def get_vendor(vendor_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)):
    return vendor_response(await vendor_lifecycle.get_vendor(db, vendor_id))


@router.patch("/vendors/{vendor_id}/approval", response_model=VendorResponse)
@router.put("/vendors/{vendor_id}/approval", response_model=VendorResponse)
@router.post("/vendors/{vendor_id}/approval", response_model=VendorResponse)
async def set_vendor_approval(
    vendor_id: uuid.UUID,
    payload: ApprovalUpdate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await apply_approval_update(db, vendor_id, payload)


@router.post("/vendors/{vendor_id}/approve", response_model=VendorResponse)
@router.patch("/vendors/{vendor_id}/approve", response_model=VendorResponse)
async def approve_vendor(
    vendor_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    record = await vendor_lifecycle.set_vendor_approval(db, vendor_id, True)
    return vendor_response(record)


@router.post("/vendors/{vendor_id}/reject", response_model=VendorResponse)
@router.patch("/vendors/{vendor_id}/reject", response_model=VendorResponse)
async def reject_vendor(
    vendor_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    record = await vendor_lifecycle.set_vendor_approval(
        db, vendor_id, False, reason=VendorStatus.REJECTED
    )
    return vendor_response(record)


@router.delete("/vendors/{vendor_id}", response_model=VendorDeleteResponse)
async def delete_vendor(
    vendor_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Hard delete, falling back to disabling when the database refuses."""
    return await delete_vendor_response(db, vendor_id)
