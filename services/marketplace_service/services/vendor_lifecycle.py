"""Vendor lifecycle: applications, approval, rejection, disabling and deletion.

Every approval read or write on ``vendors`` goes through
``approval_column.get_vendor_schema`` so both storage conventions work.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

import sqlalchemy as sa
from libs.common.datetime_utils import utc_now
from libs.common.errors import NotFoundError, ValidationError
from libs.common.logging import get_logger
from services.marketplace_service.models import (
    ApplicationStatus,
    User,
    UserRole,
    VendorApplication,
    VendorStatus,
)
from services.marketplace_service.services.approval_column import (
    VendorRecord,
    VendorSchema,
    get_vendor_schema,
)
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

MIN_STORE_NAME_LENGTH = 2


@dataclass
class SubmitResult:
    application: VendorApplication
    created: bool


@dataclass
class ApprovalResult:
    application: VendorApplication
    vendor_id: Optional[uuid.UUID]
    user_id: Optional[uuid.UUID]

    @property
    def promoted(self) -> bool:
        """False when no account matched yet; promotion waits for registration."""
        return self.vendor_id is not None


@dataclass
class DeleteResult:
    vendor_id: uuid.UUID
    hard: bool


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


async def _find_user(
    db: AsyncSession,
    *,
    user_id: Optional[uuid.UUID] = None,
    email: Optional[str] = None,
) -> Optional[User]:
    """Resolve a user by id, falling back to a case-insensitive email match."""
    if user_id is not None:
        user = await db.get(User, user_id)
        if user is not None:
            return user
    if email:
        result = await db.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()
    return None


async def _promote(db: AsyncSession, user_id: uuid.UUID) -> None:
    user = await db.get(User, user_id)
    if user is None:
        return
    # Admins keep their role when they also sell
    if user.role == UserRole.CUSTOMER:
        user.role = UserRole.VENDOR
        logger.info("Promoted user %s to vendor", user_id)


async def _vendor_row(
    db: AsyncSession, schema: VendorSchema, vendor_id: uuid.UUID
) -> Optional[VendorRecord]:
    table = schema.table
    result = await db.execute(select(table).where(table.c.id == vendor_id))
    row = result.mappings().first()
    return schema.to_record(row) if row else None


async def _write_approval(
    db: AsyncSession,
    schema: VendorSchema,
    vendor_id: uuid.UUID,
    approved: bool,
    reason: VendorStatus,
) -> bool:
    table = schema.table
    result = await db.execute(
        sa.update(table)
        .where(table.c.id == vendor_id)
        .values({schema.approval.value: schema.approval_value(approved, reason)})
    )
    return result.rowcount > 0


async def _upsert_vendor(
    db: AsyncSession,
    schema: VendorSchema,
    *,
    user_id: uuid.UUID,
    application: VendorApplication,
) -> uuid.UUID:
    """Create or refresh the user's vendors row from an application, approved."""
    table = schema.table
    values = {
        "store_name": application.store_name,
        "description": application.description,
        schema.approval.value: schema.approval_value(True),
    }
    for column in schema.contact_columns:
        values[column] = getattr(application, column)

    existing = await db.execute(select(table.c.id).where(table.c.user_id == user_id))
    vendor_id = existing.scalar_one_or_none()
    if vendor_id is not None:
        await db.execute(sa.update(table).where(table.c.id == vendor_id).values(values))
        return vendor_id

    vendor_id = uuid.uuid4()
    await db.execute(
        sa.insert(table).values(
            id=vendor_id,
            user_id=user_id,
            created_at=utc_now(),
            **values,
        )
    )
    return vendor_id


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------


async def submit_application(
    db: AsyncSession,
    *,
    store_name: str,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    address: Optional[str] = None,
    description: Optional[str] = None,
    user_id: Optional[uuid.UUID] = None,
) -> SubmitResult:
    """Record a "become a vendor" application.

    Signed-in applicants (``user_id``) have at most one application: a new
    submission updates it and sends it back to pending. Anonymous applicants
    must give an email; their latest user-less application with that email
    is updated the same way. A signed-in applicant with no application of
    their own adopts the one they sent anonymously from their account email.
    """
    store_name = (store_name or "").strip()
    if len(store_name) < MIN_STORE_NAME_LENGTH:
        raise ValidationError(
            f"Store name must be at least {MIN_STORE_NAME_LENGTH} characters"
        )

    email = _clean(email)
    account_email = None
    if user_id is not None:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        account_email = user.email
        email = email or account_email
    if email is None:
        raise ValidationError("Email is required")

    fields = {
        "store_name": store_name,
        "email": email,
        "phone": _clean(phone),
        "address": _clean(address),
        "description": _clean(description),
        "status": ApplicationStatus.PENDING,
    }

    application = await _existing_application(
        db, user_id=user_id, email=account_email or email
    )
    if application is None:
        application = VendorApplication(user_id=user_id, **fields)
        db.add(application)
        try:
            await db.commit()
            await db.refresh(application)
            logger.info(
                "Vendor application %s submitted (%s)", application.id, store_name
            )
            return SubmitResult(application=application, created=True)
        except IntegrityError:
            # Concurrent submit for the same user won the insert
            await db.rollback()
            application = await _existing_application(
                db, user_id=user_id, email=account_email or email
            )
            if application is None:
                raise

    for key, value in fields.items():
        setattr(application, key, value)
    if application.user_id is None and user_id is not None:
        application.user_id = user_id
        logger.info("Application %s linked to user %s", application.id, user_id)

    if application.vendor_id is not None:
        schema = await get_vendor_schema(db)
        await _write_approval(
            db, schema, application.vendor_id, False, VendorStatus.PENDING
        )
        logger.info(
            "Vendor %s returned to pending by re-application", application.vendor_id
        )

    await db.commit()
    await db.refresh(application)
    logger.info("Vendor application %s resubmitted", application.id)
    return SubmitResult(application=application, created=False)


async def _existing_application(
    db: AsyncSession, *, user_id: Optional[uuid.UUID], email: str
) -> Optional[VendorApplication]:
    """The user's own application, else the latest user-less one sent from ``email``."""
    if user_id is not None:
        result = await db.execute(
            select(VendorApplication).where(VendorApplication.user_id == user_id)
        )
        application = result.scalar_one_or_none()
        if application is not None:
            return application

    result = await db.execute(
        select(VendorApplication)
        .where(
            VendorApplication.user_id.is_(None),
            func.lower(VendorApplication.email) == email.lower(),
        )
        .order_by(VendorApplication.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _has_application(db: AsyncSession, user_id: uuid.UUID) -> bool:
    result = await db.execute(
        select(VendorApplication.id).where(VendorApplication.user_id == user_id)
    )
    return result.first() is not None


async def list_applications(
    db: AsyncSession, *, status: Optional[ApplicationStatus] = None
) -> list[VendorApplication]:
    query = select(VendorApplication).order_by(VendorApplication.created_at.desc())
    if status is not None:
        query = query.where(VendorApplication.status == status)
    result = await db.execute(query)
    return list(result.scalars().all())


async def list_pending(db: AsyncSession) -> list[VendorApplication]:
    """Pending applications, newest first."""
    return await list_applications(db, status=ApplicationStatus.PENDING)


async def get_application(
    db: AsyncSession, application_id: uuid.UUID
) -> VendorApplication:
    application = await db.get(VendorApplication, application_id)
    if application is None:
        raise NotFoundError("Vendor application not found")
    return application


async def approve(db: AsyncSession, application_id: uuid.UUID) -> ApprovalResult:
    """Approve an application.

    When an account matches (by the application's user, else by email) the
    account's vendors row is created or updated as approved and the user is
    promoted to vendor. Otherwise the application is approved but unlinked;
    ``claim_approved_application`` finishes the job once the applicant
    registers.
    """
    application = await get_application(db, application_id)
    application.status = ApplicationStatus.APPROVED

    user = await _find_user(db, user_id=application.user_id, email=application.email)
    vendor_id = None
    if user is not None:
        if application.user_id is None and not await _has_application(db, user.id):
            application.user_id = user.id
        schema = await get_vendor_schema(db)
        vendor_id = await _upsert_vendor(
            db, schema, user_id=user.id, application=application
        )
        application.vendor_id = vendor_id
        await _promote(db, user.id)
    else:
        logger.info(
            "Application %s approved without a matching account; "
            "promotion deferred until %s registers",
            application.id,
            application.email,
        )

    await db.commit()
    await db.refresh(application)
    logger.info("Approved vendor application %s", application.id)
    return ApprovalResult(
        application=application,
        vendor_id=vendor_id,
        user_id=user.id if user is not None else None,
    )


async def reject(db: AsyncSession, application_id: uuid.UUID) -> VendorApplication:
    """Reject an application. The applicant's role is left alone.

    A vendors row created by an earlier approval stops being approved.
    """
    application = await get_application(db, application_id)
    application.status = ApplicationStatus.REJECTED

    if application.vendor_id is not None:
        schema = await get_vendor_schema(db)
        await _write_approval(
            db, schema, application.vendor_id, False, VendorStatus.REJECTED
        )

    await db.commit()
    await db.refresh(application)
    logger.info("Rejected vendor application %s", application.id)
    return application


async def claim_approved_application(
    db: AsyncSession, user: User
) -> Optional[uuid.UUID]:
    """Link a newly registered user to an application approved before they signed up.

    Returns the vendor id created, or None when nothing was waiting.
    Flushes but does not commit.
    """
    result = await db.execute(
        select(VendorApplication)
        .where(
            VendorApplication.status == ApplicationStatus.APPROVED,
            VendorApplication.vendor_id.is_(None),
            VendorApplication.user_id.is_(None),
            func.lower(VendorApplication.email) == user.email.lower(),
        )
        .order_by(VendorApplication.updated_at.desc())
        .limit(1)
    )
    application = result.scalar_one_or_none()
    if application is None:
        return None

    schema = await get_vendor_schema(db)
    vendor_id = await _upsert_vendor(db, schema, user_id=user.id, application=application)
    application.user_id = user.id
    application.vendor_id = vendor_id
    if user.role == UserRole.CUSTOMER:
        user.role = UserRole.VENDOR
    await db.flush()
    logger.info(
        "User %s claimed approved application %s as vendor %s",
        user.id,
        application.id,
        vendor_id,
    )
    return vendor_id


# ---------------------------------------------------------------------------
# Vendors
# ---------------------------------------------------------------------------


async def list_vendors(
    db: AsyncSession, *, approved: Optional[bool] = None
) -> list[VendorRecord]:
    """Vendors newest first, optionally filtered by approval."""
    schema = await get_vendor_schema(db)
    table = schema.table
    query = select(table).order_by(table.c.created_at.desc())
    if approved is not None:
        query = query.where(schema.approved_clause(approved))
    result = await db.execute(query)
    return [schema.to_record(row) for row in result.mappings().all()]


async def list_pending_vendors(db: AsyncSession) -> list[VendorRecord]:
    return await list_vendors(db, approved=False)


async def get_vendor(db: AsyncSession, vendor_id: uuid.UUID) -> VendorRecord:
    schema = await get_vendor_schema(db)
    record = await _vendor_row(db, schema, vendor_id)
    if record is None:
        raise NotFoundError("Vendor not found")
    return record


async def get_vendor_by_user(db: AsyncSession, user_id: uuid.UUID) -> VendorRecord:
    schema = await get_vendor_schema(db)
    table = schema.table
    result = await db.execute(select(table).where(table.c.user_id == user_id))
    row = result.mappings().first()
    if row is None:
        raise NotFoundError("Vendor not found")
    return schema.to_record(row)


async def set_vendor_approval(
    db: AsyncSession,
    vendor_id: uuid.UUID,
    approved: bool,
    *,
    reason: VendorStatus = VendorStatus.PENDING,
) -> VendorRecord:
    """Write approval on a vendors row. Approving also promotes the owner.

    ``reason`` is what a status-column schema stores when ``approved`` is False.
    """
    schema = await get_vendor_schema(db)
    if not await _write_approval(db, schema, vendor_id, approved, reason):
        raise NotFoundError("Vendor not found")

    record = await _vendor_row(db, schema, vendor_id)
    if approved and record.user_id is not None:
        await _promote(db, record.user_id)

    await db.commit()
    logger.info("Vendor %s approval set to %s", vendor_id, approved)
    return record


async def disable_vendor(db: AsyncSession, vendor_id: uuid.UUID) -> VendorRecord:
    """Turn off an approved vendor without touching their data."""
    return await set_vendor_approval(
        db, vendor_id, False, reason=VendorStatus.DISABLED
    )


async def delete_vendor(db: AsyncSession, vendor_id: uuid.UUID) -> DeleteResult:
    """Delete a vendor, falling back to disabling it.

    Products, orders and order items go with the vendor through the
    ``ON DELETE CASCADE`` foreign keys. If the database refuses the delete
    (a constraint without cascade), the vendor is disabled instead and the
    result reports ``hard=False``.
    """
    schema = await get_vendor_schema(db)
    if await _vendor_row(db, schema, vendor_id) is None:
        raise NotFoundError("Vendor not found")

    table = schema.table
    try:
        await db.execute(sa.delete(table).where(table.c.id == vendor_id))
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning(
            "Hard delete of vendor %s refused (%s); disabling instead",
            vendor_id,
            exc.orig,
        )
        await disable_vendor(db, vendor_id)
        return DeleteResult(vendor_id=vendor_id, hard=False)

    logger.info("Deleted vendor %s", vendor_id)
    return DeleteResult(vendor_id=vendor_id, hard=True)
