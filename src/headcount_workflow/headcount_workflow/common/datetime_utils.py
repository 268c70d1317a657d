from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_utc() -> datetime:
    """Current UTC time truncated to milliseconds.

    Note: Wrapped so tests can patch/mock easier. Milliseconds match what the
    signature timestamp string carries, so a stored value re-hashes identically.
    """
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes coming back from the database."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """MySQL DATETIME columns hold naive UTC."""
    value = as_utc(value)
    return value.replace(tzinfo=None) if value is not None else None


def to_iso_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2026-02-01T10:00:00.000Z."""
    value = as_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def today_utc() -> date:
    return now_utc().date()


def as_date(value) -> Optional[date]:
    """DATE column values (date, datetime or 'YYYY-MM-DD...') -> date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_iso_date(str(value)[:10])
