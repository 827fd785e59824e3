"""Provider schedule data models: weekly rule, date overrides, and breaks."""

import datetime as dt
from typing import Any, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field

from slotwise.config import settings
from slotwise.errors import InvalidConfiguration
from slotwise.schemas.time_schema import DayRange
from slotwise.utils import resolve_timezone

WEEKDAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class WeeklyAvailabilityRule(BaseModel):
    """
    Recurring weekly working hours for one provider.

    ``days`` is keyed by weekday, Monday = 0 through Sunday = 6. A weekday
    that is missing or maps to an empty list is fully unavailable.
    """
    model_config = ConfigDict(frozen=True)

    timezone: str = settings.engine.default_timezone
    days: dict[int, list[DayRange]] = Field(default_factory=dict)

    def ranges_for(self, day: dt.date) -> list[DayRange]:
        return list(self.days.get(day.weekday(), []))

    @classmethod
    def from_working_hours(
        cls, working_hours: dict[str, Any], timezone: Optional[str] = None
    ) -> "WeeklyAvailabilityRule":
        """
        Build a rule from the listing ``working_hours`` mapping:
        ``{"monday": {"enabled": True, "start": "09:00", "end": "17:00"}, ...}``.
        """
        days: dict[int, list[DayRange]] = {}
        for name, day_data in working_hours.items():
            key = name.strip().lower()
            if key not in WEEKDAY_NAMES:
                raise InvalidConfiguration(f"Unknown weekday in working hours: {name!r}")
            if not day_data or not day_data.get("enabled", True):
                continue
            start, end = day_data.get("start"), day_data.get("end")
            if not start or not end:
                raise InvalidConfiguration(f"Working hours for {key} need both start and end")
            days[WEEKDAY_NAMES.index(key)] = [DayRange.parse(start, end)]
        return cls(timezone=timezone or settings.engine.default_timezone, days=days)


class AvailabilityOverride(BaseModel):
    """Date-specific replacement of the weekly rule: either new ranges or closed."""
    model_config = ConfigDict(frozen=True)

    date: dt.date
    closed: bool = False
    ranges: list[DayRange] = Field(default_factory=list)

    @classmethod
    def closed_on(cls, day: dt.date) -> "AvailabilityOverride":
        return cls(date=day, closed=True)

    @classmethod
    def with_hours(cls, day: dt.date, *hours: tuple[str, str]) -> "AvailabilityOverride":
        return cls(date=day, ranges=[DayRange.parse(start, end) for start, end in hours])


class BreakTime(BaseModel):
    """A daily recurring break, e.g. lunch from 12:00 to 13:00."""
    model_config = ConfigDict(frozen=True)

    start: str
    end: str
    title: str = "Break"

    @property
    def day_range(self) -> DayRange:
        return DayRange.parse(self.start, self.end)


def validate_schedule(
    rule: WeeklyAvailabilityRule, overrides: list[AvailabilityOverride]
) -> tuple[ZoneInfo, dict[dt.date, AvailabilityOverride]]:
    """
    Check a rule and its overrides before any slot is generated.

    Returns the resolved timezone and the overrides indexed by date.

    Raises:
        InvalidConfiguration: On an unknown timezone, a weekday key outside
            0-6, an override that is both closed and has ranges (or neither),
            two overrides for the same date, or overlapping ranges within a day.
    """
    tz = resolve_timezone(rule.timezone)

    for weekday, ranges in rule.days.items():
        if not 0 <= weekday <= 6:
            raise InvalidConfiguration(f"Weekday must be between 0 and 6, got {weekday}")
        _check_disjoint(ranges, WEEKDAY_NAMES[weekday])

    by_date: dict[dt.date, AvailabilityOverride] = {}
    for override in overrides:
        if override.closed and override.ranges:
            raise InvalidConfiguration(
                f"Override for {override.date.isoformat()} is closed but also lists ranges"
            )
        if not override.closed and not override.ranges:
            raise InvalidConfiguration(
                f"Override for {override.date.isoformat()} must list ranges or be closed"
            )
        if override.date in by_date:
            raise InvalidConfiguration(
                f"Duplicate override for {override.date.isoformat()}"
            )
        _check_disjoint(override.ranges, override.date.isoformat())
        by_date[override.date] = override

    return tz, by_date


def _check_disjoint(ranges: list[DayRange], label: str) -> None:
    """Non-empty ranges of one day must not overlap each other."""
    usable = sorted((r for r in ranges if not r.is_empty), key=lambda r: r.start_minute)
    for earlier, later in zip(usable, usable[1:]):
        if later.start_minute < earlier.end_minute:
            raise InvalidConfiguration(f"Overlapping ranges on {label}: {earlier} and {later}")
