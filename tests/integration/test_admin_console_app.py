"""The admin console client driven against the marketplace app itself."""

import pytest
from libs.auth.security import create_access_token
from services.marketplace_service.clients.admin_console import (
    APPROVAL_ATTEMPTS,
    AdminConsoleClient,
    AdminConsoleError,
)
from services.marketplace_service.services import vendor_lifecycle
from tests.factories import UserFactory, VendorFactory


def _token(user) -> str:
    return create_access_token(
        user_id=str(user.id), email=user.email, role=user.role.value
    )


async def _pending_vendor(db):
    user = UserFactory.create()
    vendor = VendorFactory.create(user_id=user.id, is_approved=False)
    db.add_all([user, vendor])
    await db.commit()
    return vendor


@pytest.mark.asyncio
@pytest.mark.integration
async def test_console_approves_on_first_route(client, db_session, admin_user):
    vendor = await _pending_vendor(db_session)
    console = AdminConsoleClient(token=_token(admin_user), client=client)

    outcome = await console.set_approval(vendor.id, True)

    assert outcome.attempt is APPROVAL_ATTEMPTS[0]
    assert outcome.data["isApproved"] is True
    record = await vendor_lifecycle.get_vendor(db_session, vendor.id)
    assert record.is_approved is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_console_hard_deletes(client, db_session, admin_user):
    vendor = await _pending_vendor(db_session)
    console = AdminConsoleClient(token=_token(admin_user), client=client)

    outcome = await console.delete_vendor(vendor.id)

    assert outcome.hard is True
    assert await vendor_lifecycle.list_vendors(db_session) == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_console_without_admin_role_fails_everywhere(client, db_session):
    vendor = await _pending_vendor(db_session)
    customer = UserFactory.create()
    db_session.add(customer)
    await db_session.commit()
    console = AdminConsoleClient(token=_token(customer), client=client)

    with pytest.raises(AdminConsoleError) as excinfo:
        await console.set_approval(vendor.id, True)

    assert excinfo.value.status_code == 403
    assert len(excinfo.value.failures) == len(APPROVAL_ATTEMPTS)
