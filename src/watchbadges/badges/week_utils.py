"""Calendar helpers for marathon weeks and streak days.

Marathon buckets are keyed by ISO-8601 week (Monday start); streak days are
compared as user-local calendar dates.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# Legacy clients stored streak days as JavaScript Date.toDateString() output
_LEGACY_DATE_FORMAT = "%a %b %d %Y"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_week_iso(dt: datetime | date) -> str:
    """Get ISO week string e.g. '2026-W09'. Uses %G-W%V (ISO year + ISO week)."""
    return dt.strftime("%G-W%V")


def get_monday(dt: datetime | date) -> date:
    """Get the Monday of the ISO week containing dt."""
    d = dt.date() if isinstance(dt, datetime) else dt
    return d - timedelta(days=d.weekday())


def get_week_boundaries(dt: datetime | None = None) -> tuple[datetime, datetime]:
    """Get (Monday 00:00, Sunday 23:59:59) for the ISO week containing dt, in dt's zone."""
    if dt is None:
        dt = utcnow()
    tz = dt.tzinfo or timezone.utc
    monday = get_monday(dt)
    sunday = monday + timedelta(days=6)
    start = datetime.combine(monday, time.min, tzinfo=tz)
    end = datetime.combine(sunday, time(23, 59, 59), tzinfo=tz)
    return start, end


def seconds_until_week_end(now: datetime | None = None) -> int:
    """Whole seconds left until the end of the current ISO week (never negative)."""
    if now is None:
        now = utcnow()
    _, end = get_week_boundaries(now)
    return max(0, math.ceil((end - now).total_seconds()))


def resolve_timezone(name: str | None) -> tzinfo:
    """ZoneInfo for ``name``; unknown or empty names fall back to UTC."""
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def local_today(now: datetime | None = None, tz: tzinfo | None = None) -> date:
    """The calendar date of ``now`` as seen in ``tz``."""
    if now is None:
        now = utcnow()
    return now.astimezone(tz or timezone.utc).date()


def parse_activity_date(value: object) -> date | None:
    """Parse a stored streak day. Accepts ISO dates and the legacy format."""
    if not isinstance(value, str):
        return None
    for parse in (date.fromisoformat, lambda v: datetime.strptime(v, _LEGACY_DATE_FORMAT).date()):
        try:
            return parse(value)
        except ValueError:
            continue
    return None


def to_epoch_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def from_epoch_ms(value: object) -> datetime | None:
    """Epoch milliseconds to an aware UTC datetime; None for anything else."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
