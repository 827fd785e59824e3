"""Immutable time primitives shared by both engines."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from slotwise.errors import InvalidConfiguration, InvalidInput
from slotwise.utils import MINUTES_PER_DAY, ensure_aware, format_minutes, parse_hhmm


@dataclass(frozen=True)
class TimeInterval:
    """
    Half-open interval ``[start, end)`` between two absolute instants.

    Both endpoints are stored in UTC; ``timezone`` keeps the originating
    IANA identifier for display only.
    """

    start: datetime
    end: datetime
    timezone: str = "UTC"

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", ensure_aware(self.start, "interval start"))
        object.__setattr__(self, "end", ensure_aware(self.end, "interval end"))
        if self.start >= self.end:
            raise InvalidInput(
                f"Interval start must precede end: {self.start.isoformat()} >= {self.end.isoformat()}"
            )

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "TimeInterval") -> bool:
        """Back-to-back intervals do not overlap."""
        return self.start < other.end and other.start < self.end

    def expanded(self, minutes: int) -> "TimeInterval":
        """Return a copy widened by ``minutes`` on both sides."""
        if not minutes:
            return self
        pad = timedelta(minutes=minutes)
        return TimeInterval(self.start - pad, self.end + pad, self.timezone)


@dataclass(frozen=True)
class DayRange:
    """A time-of-day range as minute offsets from local midnight."""

    start_minute: int
    end_minute: int

    def __post_init__(self) -> None:
        for name in ("start_minute", "end_minute"):
            value = getattr(self, name)
            if not 0 <= value <= MINUTES_PER_DAY:
                raise InvalidConfiguration(
                    f"{name} must be between 0 and {MINUTES_PER_DAY}, got {value}"
                )

    @classmethod
    def parse(cls, start: str, end: str) -> "DayRange":
        """Build a range from ``HH:MM`` strings, e.g. ``DayRange.parse("09:00", "17:00")``."""
        return cls(parse_hhmm(start), parse_hhmm(end))

    @property
    def is_empty(self) -> bool:
        """Zero-length and inverted ranges carry no availability."""
        return self.end_minute <= self.start_minute

    @property
    def length_minutes(self) -> int:
        return max(0, self.end_minute - self.start_minute)

    def overlaps(self, start_minute: int, end_minute: int) -> bool:
        return self.start_minute < end_minute and start_minute < self.end_minute

    def __str__(self) -> str:
        return f"{format_minutes(self.start_minute)}-{format_minutes(self.end_minute)}"
