"""Time utility helpers."""

from __future__ import annotations

from datetime import UTC, datetime


def now_utc() -> datetime:
    """Return current timezone-aware UTC datetime."""
    return datetime.now(tz=UTC)


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string for stored records."""
    return now_utc().isoformat()
