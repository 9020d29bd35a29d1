"""Vendor approval storage, tolerant of two schema conventions.

Current deployments store approval in a boolean ``vendors.is_approved``
column. Older ones carry a string ``vendors.status`` column
(pending/approved/rejected/disabled) instead. The convention in use is detected
once per process by introspecting the ``vendors`` table, cached, and every
approval read or write goes through ``VendorSchema``.

Translation:
    is_approved = true   <=>  status = 'approved'
    is_approved = false  <=>  status in ('pending', 'rejected', 'disabled')
"""

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

import sqlalchemy as sa
from libs.common.errors import PersistenceError
from libs.common.logging import get_logger
from services.marketplace_service.models.enums import VendorStatus
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# Columns present in every known vendors schema
CORE_COLUMNS = ("id", "user_id", "store_name", "description", "created_at")
# Contact columns only some schemas carry
OPTIONAL_COLUMNS = ("email", "phone", "address")

_COLUMN_TYPES: dict[str, Any] = {
    "id": sa.Uuid,
    "user_id": sa.Uuid,
    "store_name": sa.String,
    "description": sa.Text,
    "email": sa.String,
    "phone": sa.String,
    "address": sa.String,
    "created_at": sa.DateTime(timezone=True),
    "is_approved": sa.Boolean,
    "status": sa.String,
}


class ApprovalColumn(str, enum.Enum):
    IS_APPROVED = "is_approved"
    STATUS = "status"


@dataclass(frozen=True)
class VendorRecord:
    """A vendors row with approval already translated to a boolean."""

    id: uuid.UUID
    user_id: Optional[uuid.UUID]
    store_name: str
    description: Optional[str]
    is_approved: bool
    status: str
    created_at: Optional[datetime]
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


@dataclass(frozen=True)
class VendorSchema:
    """The detected shape of the ``vendors`` table."""

    approval: ApprovalColumn
    columns: frozenset[str]

    @property
    def table(self) -> sa.TableClause:
        names = [c for c in CORE_COLUMNS + OPTIONAL_COLUMNS if c in self.columns]
        names.append(self.approval.value)
        return sa.table("vendors", *(sa.column(n, _COLUMN_TYPES[n]) for n in names))

    @property
    def contact_columns(self) -> tuple[str, ...]:
        return tuple(c for c in OPTIONAL_COLUMNS if c in self.columns)

    def approval_value(
        self, approved: bool, reason: VendorStatus = VendorStatus.PENDING
    ) -> Any:
        """Value to write for an approval change. ``reason`` only matters for status schemas."""
        if self.approval is ApprovalColumn.IS_APPROVED:
            return approved
        return VendorStatus.APPROVED.value if approved else reason.value

    def approved_clause(self, approved: bool) -> sa.ColumnElement[bool]:
        column = self.table.c[self.approval.value]
        if self.approval is ApprovalColumn.IS_APPROVED:
            return column.is_(sa.true()) if approved else column.is_not(sa.true())
        if approved:
            return column == VendorStatus.APPROVED.value
        return sa.or_(column.is_(None), column != VendorStatus.APPROVED.value)

    def read_approved(self, raw: Any) -> bool:
        if self.approval is ApprovalColumn.IS_APPROVED:
            return bool(raw)
        return raw == VendorStatus.APPROVED.value

    def status_label(self, raw: Any) -> str:
        if self.approval is ApprovalColumn.IS_APPROVED:
            return VendorStatus.APPROVED.value if raw else VendorStatus.PENDING.value
        return raw or VendorStatus.PENDING.value

    def to_record(self, row: sa.RowMapping) -> VendorRecord:
        raw = row[self.approval.value]
        return VendorRecord(
            id=row["id"],
            user_id=row["user_id"],
            store_name=row["store_name"] or "Vendor",
            description=row["description"],
            is_approved=self.read_approved(raw),
            status=self.status_label(raw),
            created_at=row["created_at"],
            email=row.get("email"),
            phone=row.get("phone"),
            address=row.get("address"),
        )


_cached_schema: Optional[VendorSchema] = None


def _inspect_vendor_columns(sync_conn) -> set[str]:
    return {col["name"] for col in sa.inspect(sync_conn).get_columns("vendors")}


async def get_vendor_schema(db: AsyncSession) -> VendorSchema:
    """Detect (once per process) which approval convention ``vendors`` uses."""
    global _cached_schema
    if _cached_schema is not None:
        return _cached_schema

    conn = await db.connection()
    names = await conn.run_sync(_inspect_vendor_columns)

    # is_approved wins when both exist (newer schema)
    if ApprovalColumn.IS_APPROVED.value in names:
        approval = ApprovalColumn.IS_APPROVED
    elif ApprovalColumn.STATUS.value in names:
        approval = ApprovalColumn.STATUS
    else:
        raise PersistenceError(
            "vendors table has neither 'is_approved' nor 'status' column"
        )

    _cached_schema = VendorSchema(approval=approval, columns=frozenset(names))
    logger.info("Vendor approval column detected: %s", approval.value)
    return _cached_schema


def reset_vendor_schema_cache() -> None:
    """Forget the detected schema (tests, or after a migration at runtime)."""
    global _cached_schema
    _cached_schema = None
