"""
Time parsing and timezone normalization.

Time-of-day buckets are derived from the *local* wall-clock hour, so every
timestamp that feeds the recommender is made timezone-aware first.
"""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo


def ensure_tz(dt: datetime, timezone: str) -> datetime:
    """Ensure `dt` has tzinfo; attach `timezone` if naive."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=ZoneInfo(timezone))
    return dt


def parse_datetime(value: str, timezone: str) -> datetime:
    """Parse ISO-8601 datetime string and ensure tzinfo is present.

    Notes:
    - Accepts a trailing `Z` (UTC) and converts it to `+00:00` for `fromisoformat`.
    - If the parsed value is naive, the provided `timezone` is attached.
    """
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    return ensure_tz(dt, timezone)


def local_hour(timezone: str, now: datetime | None = None) -> int:
    """Return the wall-clock hour (0..23) in `timezone` for `now` (default: current time)."""
    tz = ZoneInfo(timezone)
    current = ensure_tz(now, timezone) if now is not None else datetime.now(tz)
    return current.astimezone(tz).hour
