from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default time source: timezone-aware UTC now."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """
    Normalise a datetime to aware UTC.

    Naive values are labelled as UTC without conversion; some backends
    (SQLite) hand back naive datetimes for columns written in UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
