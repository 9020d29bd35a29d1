"""Unit tests for vendor approval storage on both schema conventions.

The legacy fixture rebuilds ``vendors`` with a string ``status`` column and
no contact columns, the way older deployments have it.
"""

import uuid
from datetime import datetime, timezone

import pytest
import pytest_asyncio
import sqlalchemy as sa
from services.marketplace_service.models import UserRole
from services.marketplace_service.services import vendor_lifecycle
from services.marketplace_service.services.approval_column import (
    ApprovalColumn,
    get_vendor_schema,
    reset_vendor_schema_cache,
)
from sqlalchemy import text
from tests.factories import UserFactory, VendorApplicationFactory

LEGACY_VENDORS_DDL = """
CREATE TABLE vendors (
    id CHAR(32) PRIMARY KEY,
    user_id CHAR(32),
    store_name VARCHAR(255) NOT NULL,
    description TEXT,
    status VARCHAR(20) DEFAULT 'pending',
    created_at DATETIME
)
"""

_legacy_vendors = sa.table(
    "vendors",
    sa.column("id", sa.Uuid),
    sa.column("user_id", sa.Uuid),
    sa.column("store_name", sa.String),
    sa.column("status", sa.String),
    sa.column("created_at", sa.DateTime(timezone=True)),
)


@pytest_asyncio.fixture
async def legacy_db(db_session):
    """The test database with ``vendors`` swapped for the status-column shape."""
    await db_session.execute(text("PRAGMA foreign_keys=OFF"))
    await db_session.execute(text("DROP TABLE vendors"))
    await db_session.execute(text(LEGACY_VENDORS_DDL))
    await db_session.commit()
    reset_vendor_schema_cache()
    yield db_session
    reset_vendor_schema_cache()


async def _insert_legacy_vendor(db, status, *, user_id=None, store_name="Legacy Store"):
    vendor_id = uuid.uuid4()
    await db.execute(
        sa.insert(_legacy_vendors).values(
            id=vendor_id,
            user_id=user_id or uuid.uuid4(),
            store_name=store_name,
            status=status,
            created_at=datetime.now(timezone.utc),
        )
    )
    await db.commit()
    return vendor_id


async def _raw_status(db, vendor_id):
    result = await db.execute(
        sa.select(_legacy_vendors.c.status).where(_legacy_vendors.c.id == vendor_id)
    )
    return result.scalar_one()


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_detects_boolean_column(db_session):
    schema = await get_vendor_schema(db_session)

    assert schema.approval is ApprovalColumn.IS_APPROVED
    assert schema.contact_columns == ("email", "phone", "address")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_detects_status_column(legacy_db):
    schema = await get_vendor_schema(legacy_db)

    assert schema.approval is ApprovalColumn.STATUS
    assert schema.contact_columns == ()


@pytest.mark.asyncio
@pytest.mark.unit
async def test_detection_is_cached(db_session):
    first = await get_vendor_schema(db_session)
    second = await get_vendor_schema(db_session)

    assert first is second


# ---------------------------------------------------------------------------
# Reads and writes on the status convention
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_only_approved_status_reads_as_approved(legacy_db):
    approved = await _insert_legacy_vendor(legacy_db, "approved")
    for status in ("pending", "rejected", "disabled", None):
        await _insert_legacy_vendor(legacy_db, status)

    approved_rows = await vendor_lifecycle.list_vendors(legacy_db, approved=True)
    pending_rows = await vendor_lifecycle.list_pending_vendors(legacy_db)

    assert [row.id for row in approved_rows] == [approved]
    assert len(pending_rows) == 4
    assert all(row.is_approved is False for row in pending_rows)
    assert {row.status for row in pending_rows} == {
        "pending",
        "rejected",
        "disabled",
    }


@pytest.mark.asyncio
@pytest.mark.unit
async def test_toggles_write_status_strings(legacy_db):
    vendor_id = await _insert_legacy_vendor(legacy_db, "pending")

    record = await vendor_lifecycle.set_vendor_approval(legacy_db, vendor_id, True)
    assert record.is_approved is True
    assert await _raw_status(legacy_db, vendor_id) == "approved"

    await vendor_lifecycle.disable_vendor(legacy_db, vendor_id)
    assert await _raw_status(legacy_db, vendor_id) == "disabled"

    from services.marketplace_service.models import VendorStatus

    await vendor_lifecycle.set_vendor_approval(
        legacy_db, vendor_id, False, reason=VendorStatus.REJECTED
    )
    assert await _raw_status(legacy_db, vendor_id) == "rejected"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_approve_application_upserts_legacy_vendor(legacy_db):
    user = UserFactory.create()
    legacy_db.add(user)
    await legacy_db.commit()
    application = VendorApplicationFactory.create(user_id=user.id, email=user.email)
    legacy_db.add(application)
    await legacy_db.commit()

    result = await vendor_lifecycle.approve(legacy_db, application.id)

    assert result.promoted is True
    assert user.role == UserRole.VENDOR
    assert await _raw_status(legacy_db, result.vendor_id) == "approved"
    record = await vendor_lifecycle.get_vendor_by_user(legacy_db, user.id)
    assert record.store_name == application.store_name
    assert record.email is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_on_legacy_schema(legacy_db):
    vendor_id = await _insert_legacy_vendor(legacy_db, "approved")

    result = await vendor_lifecycle.delete_vendor(legacy_db, vendor_id)

    assert result.hard is True
    assert await vendor_lifecycle.list_vendors(legacy_db) == []
