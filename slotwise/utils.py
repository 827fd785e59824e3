"""Shared time helpers used across the schedule model and the engines."""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from slotwise.errors import InvalidConfiguration, InvalidInput

MINUTES_PER_DAY = 24 * 60

_TICK = timedelta(seconds=1)

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_hhmm(value: str) -> int:
    """Convert an ``HH:MM`` string to minutes since midnight.

    ``24:00`` is accepted as the end of the day.

    Examples:
        >>> parse_hhmm("09:30")
        570
        >>> parse_hhmm("24:00")
        1440
    """
    match = _HHMM_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise InvalidConfiguration(f"Time must be in HH:MM format, got {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes != 0):
        raise InvalidConfiguration(f"Time out of range: {value!r}")
    return hours * 60 + minutes


def format_minutes(minutes: int) -> str:
    """Format minutes since midnight as ``HH:MM``.

    Examples:
        >>> format_minutes(570)
        '09:30'
    """
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def resolve_timezone(key: str) -> ZoneInfo:
    """Look up an IANA timezone, raising InvalidConfiguration for unknown keys."""
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidConfiguration(f"Unknown timezone: {key!r}") from None


def ensure_aware(value: datetime, name: str = "datetime") -> datetime:
    """Return ``value`` in UTC, rejecting naive datetimes."""
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        raise InvalidInput(f"{name} must be timezone-aware, got naive {value.isoformat()}")
    return value.astimezone(timezone.utc)


def wall_clock_to_utc(
    day: date, minute: int, tz: ZoneInfo, *, as_end: bool = False
) -> Optional[datetime]:
    """Resolve a local wall-clock time to a UTC instant.

    Returns None when the wall time does not exist in ``tz`` (it falls in a
    spring-forward gap). Ambiguous times resolve to their first occurrence.

    With ``as_end`` set, the wall time at which the clock jumps forward
    resolves to the transition instant, so an interval can end exactly
    where the gap begins. Later wall times inside the gap still give None.
    """
    local = datetime.combine(day, time.min) + timedelta(minutes=minute)
    aware = local.replace(tzinfo=tz, fold=0)
    as_utc = aware.astimezone(timezone.utc)
    if as_utc.astimezone(tz).replace(tzinfo=None) == local:
        return as_utc
    # Inside a gap, fold=0 applies the offset in force before the jump.
    if as_end and (as_utc - _TICK).astimezone(tz).replace(tzinfo=None) == local - _TICK:
        return as_utc
    return None


def hours_between(start: datetime, end: datetime) -> float:
    """Signed number of hours from ``start`` to ``end``."""
    return (end - start).total_seconds() / 3600
