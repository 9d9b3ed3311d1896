from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def now_utc() -> datetime:
    """Return current time as tz-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_rfc3339(dt: datetime) -> str:
    """
    Convert tz-aware datetime to RFC3339 (UTC, with 'Z').

    Keeps milliseconds, matching the format browsers emit for ISO strings.
    """
    dt = normalize_dt(dt).astimezone(timezone.utc)
    s = dt.isoformat(timespec="milliseconds")
    return s.replace("+00:00", "Z")


def normalize_dt(dt: datetime) -> datetime:
    """Ensure datetime is tz-aware. Raises if naive."""
    if not isinstance(dt, datetime):
        raise TypeError("dt must be a datetime")
    if dt.tzinfo is None:
        raise ValueError("naive datetime is not allowed; timezone-aware required")
    return dt


def monotonic_touch(previous: Optional[datetime]) -> datetime:
    """Return now, or `previous` if the clock went backwards."""
    now = now_utc()
    if previous is not None and normalize_dt(previous) > now:
        return previous
    return now
