from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier. Only used to pick the
    facility's calendar day, never stored.
    """
    return datetime.now()


def now_utc() -> datetime:
    """Current time as an aware UTC datetime; use this for anything persisted."""
    return datetime.now(timezone.utc)


def to_naive_utc(value: datetime) -> datetime:
    """Aware -> naive UTC for DATETIME columns. Naive input is assumed UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_rfc3339(value: Optional[datetime]) -> Optional[str]:
    """Format a timestamp as RFC3339 in UTC (``2026-02-01T09:00:00Z``).

    Naive values coming from MySQL DATETIME columns are taken as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")
