"""Admin console client for vendor moderation.

Marketplace deployments expose vendor approval and deletion under a few
different routes and body shapes. The client tries an ordered list of
attempts and stops at the first 2xx, so one console works against any of
them. Only when every attempt fails does it raise, with the last error.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

import httpx
from libs.common.logging import get_logger, get_request_id

logger = get_logger(__name__)

_DEFAULT_TIMEOUT = 10.0

VendorId = Union[str, uuid.UUID]


@dataclass(frozen=True)
class Attempt:
    """One way of asking the server to do something.

    ``path`` may use ``{vendor_id}`` and ``{action}`` (approve/reject).
    ``body`` builds the JSON payload from the requested approval; None sends
    no body.
    """

    method: str
    path: str
    body: Optional[Callable[[bool], dict]] = None

    def render(self, vendor_id: VendorId, approved: bool) -> tuple[str, Optional[dict]]:
        action = "approve" if approved else "reject"
        path = self.path.format(vendor_id=vendor_id, action=action)
        return path, self.body(approved) if self.body else None

    @property
    def label(self) -> str:
        return f"{self.method} {self.path}"


APPROVAL_ATTEMPTS: tuple[Attempt, ...] = (
    Attempt("PATCH", "/api/admin/vendors/{vendor_id}", lambda ok: {"isApproved": ok}),
    Attempt("PUT", "/api/vendors/{vendor_id}/approval", lambda ok: {"isApproved": ok}),
    Attempt("PATCH", "/api/vendors/{vendor_id}/approval", lambda ok: {"approved": ok}),
    Attempt(
        "POST",
        "/api/vendors/{vendor_id}/approval",
        lambda ok: {"status": "approved" if ok else "rejected"},
    ),
    Attempt("POST", "/api/admin/vendors/{vendor_id}/{action}"),
    Attempt("PATCH", "/api/vendors/{vendor_id}/{action}"),
)

DELETE_ATTEMPTS: tuple[Attempt, ...] = (
    Attempt("DELETE", "/api/admin/vendors/{vendor_id}"),
    Attempt("DELETE", "/api/vendors/{vendor_id}"),
)


class AdminConsoleError(Exception):
    """Every attempt failed. Carries the last failure and the full trail."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        failures: Optional[list[str]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.failures = failures or []
        super().__init__(message)


@dataclass
class AttemptOutcome:
    attempt: Attempt
    status_code: int
    data: Any = None


@dataclass
class DeleteOutcome:
    vendor_id: str
    hard: bool
    attempt: Attempt
    data: Any = None
    failures: list[str] = field(default_factory=list)

    @property
    def soft_deleted(self) -> bool:
        return not self.hard


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict):
        return str(payload.get("detail") or payload.get("message") or payload)
    return str(payload)


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


class AdminConsoleClient:
    """Async client for vendor moderation endpoints.

    Pass ``client`` to reuse an ``httpx.AsyncClient`` (tests hand in one
    built on ``MockTransport`` or ``ASGITransport``); otherwise one is created
    and closed by ``aclose()`` / ``async with``.
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        token: Optional[str] = None,
        timeout: float = _DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}

    async def __aenter__(self) -> "AdminConsoleClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _request_headers(self) -> dict:
        headers = dict(self._headers)
        request_id = get_request_id()
        if request_id:
            headers["X-Request-ID"] = request_id
        return headers

    async def _first_success(
        self,
        attempts: tuple[Attempt, ...],
        vendor_id: VendorId,
        approved: bool,
    ) -> AttemptOutcome:
        failures: list[str] = []
        last_status: Optional[int] = None
        for attempt in attempts:
            path, body = attempt.render(vendor_id, approved)
            try:
                response = await self._client.request(
                    attempt.method, path, json=body, headers=self._request_headers()
                )
            except httpx.RequestError as e:
                failures.append(f"{attempt.method} {path}: {type(e).__name__}: {e}")
                last_status = None
                continue

            if response.is_success:
                logger.info(
                    "Admin console %s %s succeeded (%d)",
                    attempt.method,
                    path,
                    response.status_code,
                )
                return AttemptOutcome(
                    attempt=attempt,
                    status_code=response.status_code,
                    data=_json_or_none(response),
                )

            last_status = response.status_code
            failures.append(
                f"{attempt.method} {path}: {response.status_code} {_error_message(response)}"
            )
            logger.debug("Admin console attempt failed: %s", failures[-1])

        raise AdminConsoleError(
            failures[-1] if failures else "No attempts configured",
            status_code=last_status,
            failures=failures,
        )

    async def set_approval(self, vendor_id: VendorId, approved: bool) -> AttemptOutcome:
        """Approve or unapprove a vendor through the first route that accepts it."""
        return await self._first_success(APPROVAL_ATTEMPTS, vendor_id, approved)

    async def delete_vendor(self, vendor_id: VendorId) -> DeleteOutcome:
        """Delete a vendor, or at least take it out of the storefront.

        A server that answers with ``softDeleted`` made it a soft delete. When
        no delete route succeeds, the vendor is unapproved instead and the
        outcome reports ``hard=False``.
        """
        try:
            outcome = await self._first_success(DELETE_ATTEMPTS, vendor_id, False)
        except AdminConsoleError as e:
            logger.warning(
                "Deleting vendor %s failed (%s); unapproving instead", vendor_id, e
            )
            fallback = await self.set_approval(vendor_id, False)
            return DeleteOutcome(
                vendor_id=str(vendor_id),
                hard=False,
                attempt=fallback.attempt,
                data=fallback.data,
                failures=e.failures,
            )

        soft = isinstance(outcome.data, dict) and bool(outcome.data.get("softDeleted"))
        return DeleteOutcome(
            vendor_id=str(vendor_id),
            hard=not soft,
            attempt=outcome.attempt,
            data=outcome.data,
        )
