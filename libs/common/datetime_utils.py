"""Datetime helpers. All persisted timestamps are timezone-aware UTC."""

from datetime import datetime, time, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime (use as a column default)."""
    return datetime.now(timezone.utc)


def start_of_utc_day(moment: datetime | None = None) -> datetime:
    """Midnight UTC of the day containing ``moment`` (defaults to now)."""
    moment = moment or utc_now()
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return datetime.combine(moment.astimezone(timezone.utc).date(), time.min, timezone.utc)
