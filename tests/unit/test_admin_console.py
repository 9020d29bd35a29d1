"""Unit tests for the admin console fallback client."""

import json
import uuid

import httpx
import pytest
from services.marketplace_service.clients.admin_console import (
    APPROVAL_ATTEMPTS,
    AdminConsoleClient,
    AdminConsoleError,
)

VENDOR_ID = uuid.UUID("7b0e4c7a-5d6f-4f3a-9d6e-0a1b2c3d4e5f")


def _recording_client(responder):
    """Client whose transport records (method, path, json body) per request."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        calls.append((request.method, request.url.path, body))
        return responder(request, len(calls))

    http = httpx.AsyncClient(
        base_url="http://console", transport=httpx.MockTransport(handler)
    )
    return AdminConsoleClient(token="admin-token", client=http), http, calls


def _fail_until(n, status=404):
    def responder(request, call_number):
        if call_number < n:
            return httpx.Response(status, json={"detail": "Not Found"})
        return httpx.Response(200, json={"ok": True})

    return responder


@pytest.mark.asyncio
@pytest.mark.unit
async def test_first_success_stops_the_chain():
    console, http, calls = _recording_client(_fail_until(1))
    async with http:
        outcome = await console.set_approval(VENDOR_ID, True)

    assert calls == [("PATCH", f"/api/admin/vendors/{VENDOR_ID}", {"isApproved": True})]
    assert outcome.status_code == 200
    assert outcome.data == {"ok": True}


@pytest.mark.asyncio
@pytest.mark.unit
async def test_attempts_run_in_order_with_their_bodies():
    console, http, calls = _recording_client(_fail_until(6, status=405))
    async with http:
        outcome = await console.set_approval(VENDOR_ID, False)

    assert calls == [
        ("PATCH", f"/api/admin/vendors/{VENDOR_ID}", {"isApproved": False}),
        ("PUT", f"/api/vendors/{VENDOR_ID}/approval", {"isApproved": False}),
        ("PATCH", f"/api/vendors/{VENDOR_ID}/approval", {"approved": False}),
        ("POST", f"/api/vendors/{VENDOR_ID}/approval", {"status": "rejected"}),
        ("POST", f"/api/admin/vendors/{VENDOR_ID}/reject", None),
        ("PATCH", f"/api/vendors/{VENDOR_ID}/reject", None),
    ]
    assert outcome.attempt is APPROVAL_ATTEMPTS[-1]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_all_attempts_failing_raises_last_error():
    def responder(request, call_number):
        return httpx.Response(403, json={"detail": f"denied {call_number}"})

    console, http, calls = _recording_client(responder)
    async with http:
        with pytest.raises(AdminConsoleError) as excinfo:
            await console.set_approval(VENDOR_ID, True)

    error = excinfo.value
    assert len(calls) == len(APPROVAL_ATTEMPTS)
    assert error.status_code == 403
    assert len(error.failures) == 6
    assert "denied 6" in error.message


@pytest.mark.asyncio
@pytest.mark.unit
async def test_network_errors_fall_through_to_next_attempt():
    def responder(request, call_number):
        if call_number == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(204)

    console, http, calls = _recording_client(responder)
    async with http:
        outcome = await console.set_approval(VENDOR_ID, True)

    assert len(calls) == 2
    assert outcome.status_code == 204
    assert outcome.data is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_bearer_token_is_sent():
    seen = []

    def handler(request):
        seen.append(request.headers.get("authorization"))
        return httpx.Response(200, json={})

    async with httpx.AsyncClient(
        base_url="http://console", transport=httpx.MockTransport(handler)
    ) as http:
        console = AdminConsoleClient(token="abc", client=http)
        await console.set_approval(VENDOR_ID, True)

    assert seen == ["Bearer abc"]


# ---------------------------------------------------------------------------
# delete_vendor
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_reports_hard_delete():
    console, http, calls = _recording_client(
        lambda request, n: httpx.Response(200, json={"ok": True, "softDeleted": False})
    )
    async with http:
        outcome = await console.delete_vendor(VENDOR_ID)

    assert calls == [("DELETE", f"/api/admin/vendors/{VENDOR_ID}", None)]
    assert outcome.hard is True
    assert outcome.vendor_id == str(VENDOR_ID)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_reports_server_soft_delete():
    def responder(request, call_number):
        if call_number == 1:
            return httpx.Response(404)
        return httpx.Response(200, json={"ok": True, "softDeleted": True})

    console, http, calls = _recording_client(responder)
    async with http:
        outcome = await console.delete_vendor(VENDOR_ID)

    assert [c[:2] for c in calls] == [
        ("DELETE", f"/api/admin/vendors/{VENDOR_ID}"),
        ("DELETE", f"/api/vendors/{VENDOR_ID}"),
    ]
    assert outcome.soft_deleted is True


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_falls_back_to_unapprove():
    def responder(request, call_number):
        if request.method == "DELETE":
            return httpx.Response(500, text="boom")
        return httpx.Response(200, json={"isApproved": False})

    console, http, calls = _recording_client(responder)
    async with http:
        outcome = await console.delete_vendor(VENDOR_ID)

    assert [c[0] for c in calls] == ["DELETE", "DELETE", "PATCH"]
    assert calls[-1][2] == {"isApproved": False}
    assert outcome.hard is False
    assert len(outcome.failures) == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_raises_when_fallback_also_fails():
    console, http, calls = _recording_client(
        lambda request, n: httpx.Response(503, json={"message": "maintenance"})
    )
    async with http:
        with pytest.raises(AdminConsoleError) as excinfo:
            await console.delete_vendor(VENDOR_ID)

    assert len(calls) == 2 + len(APPROVAL_ATTEMPTS)
    assert "maintenance" in excinfo.value.message
