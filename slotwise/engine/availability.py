"""
Availability engine: turns a provider's schedule into bookable slots.

Per calendar date in the provider's timezone:
  1. Effective ranges come from the date's override, else the weekly rule.
  2. Each range is cut into back-to-back slots of the slot duration, taken
     from the call, the chosen service option, or the listing default.
  3. Each slot gets the first failing check, in order:
       lead time → horizon → bookings (raw, then buffered) → calendar
       busy times → break times.

Every candidate is returned, available or not, in chronological order.
The engine is a pure function of its arguments: no I/O, no clock reads,
no shared state.

Usage:
    slots = compute_slots(rule, overrides, bookings, service,
                          date(2025, 3, 17), date(2025, 3, 23), now)
    free = [s for s in slots if s.available]
"""

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence
from zoneinfo import ZoneInfo

from slotwise.config import settings
from slotwise.errors import InvalidInput
from slotwise.schemas.booking_schema import Booking, BusyTime, Slot, SlotUnavailableReason
from slotwise.schemas.schedule_schema import (
    AvailabilityOverride,
    WeeklyAvailabilityRule,
    validate_schedule,
)
from slotwise.schemas.settings_schema import (
    ServiceOption,
    ServiceSettings,
    validate_service_settings,
)
from slotwise.schemas.time_schema import DayRange, TimeInterval
from slotwise.utils import ensure_aware, wall_clock_to_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Blocker:
    """An occupied interval and the same interval widened by the buffer."""

    raw: TimeInterval
    padded: TimeInterval
    label: Optional[str] = None


@dataclass(frozen=True)
class _SlotChecks:
    """Everything a single slot is tested against, resolved once per call."""

    earliest_start: dt.datetime
    latest_start: dt.datetime
    local_today: Optional[dt.date]
    buffer_minutes: int
    bookings: tuple[_Blocker, ...]
    busy: tuple[_Blocker, ...]
    breaks: tuple[tuple[DayRange, str], ...]


def compute_slots(
    rule: WeeklyAvailabilityRule,
    overrides: Sequence[AvailabilityOverride],
    existing_bookings: Iterable[Booking],
    service: ServiceSettings,
    range_start: dt.date,
    range_end: dt.date,
    now: dt.datetime,
    *,
    busy_times: Iterable[BusyTime] = (),
    provider_id: Optional[str] = None,
    max_range_days: Optional[int] = settings.engine.max_range_days,
    slot_duration_minutes: Optional[int] = None,
    service_option: Optional[str] = None,
) -> list[Slot]:
    """
    Compute every candidate slot for ``range_start``..``range_end`` inclusive.

    Args:
        rule: Weekly working hours; its timezone defines day boundaries.
        overrides: Date-specific replacements for the weekly rule.
        existing_bookings: Bookings to check against. Only pending and
            confirmed ones block; with ``provider_id`` set, other
            providers' bookings are ignored.
        service: Slot size, buffer, lead-time and horizon settings.
        range_start: First local date to generate.
        range_end: Last local date to generate.
        now: The instant availability is evaluated at. Must be aware.
        busy_times: External calendar blocks for the provider.
        provider_id: Restricts which bookings are considered.
        max_range_days: Upper bound on the range length; None disables it.
        slot_duration_minutes: Slot length for this call instead of the
            listing default.
        service_option: Name of one of ``service.service_options``; its
            duration sets the slot length and its name and price are
            copied onto every slot.

    Returns:
        All candidate slots, chronological. An empty list is a valid result.

    Raises:
        InvalidInput: Inverted or oversized range, a naive ``now``, a
            non-positive slot length, or both a length and an option.
        InvalidConfiguration: Malformed rule, overrides, or settings, or an
            unknown service option.
    """
    now_utc = ensure_aware(now, "now")
    if range_start > range_end:
        raise InvalidInput(
            f"range_start {range_start.isoformat()} is after range_end {range_end.isoformat()}"
        )
    span_days = (range_end - range_start).days + 1
    if max_range_days is not None and span_days > max_range_days:
        raise InvalidInput(
            f"Requested {span_days} days of slots, the limit is {max_range_days}"
        )

    validate_service_settings(service)
    duration, option = resolve_slot_length(service, slot_duration_minutes, service_option)
    tz, overrides_by_date = validate_schedule(rule, list(overrides))

    window = query_window(range_start, range_end, tz, service.buffer_minutes)
    checks = _SlotChecks(
        earliest_start=now_utc + dt.timedelta(hours=service.advance_booking_minimum_hours),
        latest_start=now_utc + dt.timedelta(days=service.advance_booking_maximum_days),
        local_today=None if service.same_day_booking else now_utc.astimezone(tz).date(),
        buffer_minutes=service.buffer_minutes,
        bookings=_blockers(
            ((b.interval, None) for b in existing_bookings
             if b.blocks_availability and (provider_id is None or b.provider_id == provider_id)),
            window,
            service.buffer_minutes,
        ),
        busy=_blockers(
            ((b.interval, f"Conflicts with {b.title} ({b.source.value})") for b in busy_times),
            window,
            service.buffer_minutes,
        ),
        breaks=tuple((brk.day_range, brk.title) for brk in service.break_times),
    )

    if not service.booking_enabled:
        logger.debug("Booking disabled for listing; no slots generated")
        return []

    slots: list[Slot] = []
    for offset in range(span_days):
        day = range_start + dt.timedelta(days=offset)
        override = overrides_by_date.get(day)
        ranges = override.ranges if override is not None else rule.ranges_for(day)
        for day_range in sorted(ranges, key=lambda r: r.start_minute):
            slots.extend(
                _slots_for_range(day, day_range, tz, rule.timezone, duration, option, checks)
            )

    slots.sort(key=lambda s: s.start)
    logger.debug(
        "Computed %d slots (%d available) of %d minutes for %s..%s in %s",
        len(slots), sum(1 for s in slots if s.available), duration,
        range_start.isoformat(), range_end.isoformat(), rule.timezone,
    )
    return slots


def resolve_slot_length(
    service: ServiceSettings,
    slot_duration_minutes: Optional[int] = None,
    service_option: Optional[str] = None,
) -> tuple[int, Optional[ServiceOption]]:
    """
    Pick the slot length for one call.

    An explicit length wins, then the named option's duration, then the
    listing's ``slot_duration_minutes``.
    """
    if slot_duration_minutes is not None and service_option is not None:
        raise InvalidInput("Pass slot_duration_minutes or service_option, not both")
    if service_option is not None:
        option = service.option(service_option)
        return option.duration_minutes, option
    if slot_duration_minutes is not None:
        if slot_duration_minutes <= 0:
            raise InvalidInput(f"slot_duration_minutes must be > 0, got {slot_duration_minutes}")
        return slot_duration_minutes, None
    return service.slot_duration_minutes, None


def query_window(
    range_start: dt.date, range_end: dt.date, tz: ZoneInfo, buffer_minutes: int
) -> TimeInterval:
    """UTC span that any relevant booking must touch, buffer included on both sides."""
    first = dt.datetime.combine(range_start, dt.time.min, tzinfo=tz)
    last = dt.datetime.combine(range_end + dt.timedelta(days=1), dt.time.min, tzinfo=tz)
    # Bookings and slots are both widened, so reach out twice the buffer.
    pad = dt.timedelta(minutes=2 * buffer_minutes)
    return TimeInterval(first - pad, last + pad)


def _blockers(
    intervals: Iterable[tuple[TimeInterval, Optional[str]]],
    window: TimeInterval,
    buffer_minutes: int,
) -> tuple[_Blocker, ...]:
    return tuple(
        _Blocker(raw=interval, padded=interval.expanded(buffer_minutes), label=label)
        for interval, label in intervals
        if interval.overlaps(window)
    )


def _slots_for_range(
    day: dt.date,
    day_range: DayRange,
    tz: ZoneInfo,
    tz_name: str,
    duration: int,
    option: Optional[ServiceOption],
    checks: _SlotChecks,
) -> list[Slot]:
    if day_range.is_empty:
        logger.warning("Skipping empty range %s on %s", day_range, day.isoformat())
        return []

    expected_length = dt.timedelta(minutes=duration)
    slots: list[Slot] = []

    minute = day_range.start_minute
    while minute + duration <= day_range.end_minute:
        start = wall_clock_to_utc(day, minute, tz)
        end = wall_clock_to_utc(day, minute + duration, tz, as_end=True)
        if start is None or end is None or end - start != expected_length:
            # Slot touches a DST gap or straddles a transition.
            logger.debug("Dropping slot at %s minute %d across a DST change", day, minute)
        else:
            reason, detail = _check_slot(
                TimeInterval(start, end, tz_name), day, minute, minute + duration, checks
            )
            slots.append(Slot(
                start=start,
                end=end,
                timezone=tz_name,
                duration_minutes=duration,
                available=reason is None,
                reason=reason,
                detail=detail,
                service_name=option.name if option is not None else None,
                price=option.price if option is not None else None,
            ))
        minute += duration

    return slots


def _check_slot(
    interval: TimeInterval,
    day: dt.date,
    start_minute: int,
    end_minute: int,
    checks: _SlotChecks,
) -> tuple[Optional[SlotUnavailableReason], Optional[str]]:
    """Return the first reason the slot is unavailable and what caused it."""
    if interval.start < checks.earliest_start or day == checks.local_today:
        return SlotUnavailableReason.PAST_MINIMUM_LEAD_TIME, None
    if interval.start > checks.latest_start:
        return SlotUnavailableReason.BEYOND_MAX_HORIZON, None

    padded = interval.expanded(checks.buffer_minutes)
    for blocker in checks.bookings:
        if interval.overlaps(blocker.raw):
            return SlotUnavailableReason.ALREADY_BOOKED, blocker.label
    for blocker in checks.bookings:
        if padded.overlaps(blocker.padded):
            return SlotUnavailableReason.INSIDE_BUFFER, blocker.label
    for blocker in checks.busy:
        if padded.overlaps(blocker.padded):
            return SlotUnavailableReason.CALENDAR_BUSY, blocker.label

    for day_range, title in checks.breaks:
        if day_range.overlaps(start_minute, end_minute):
            return SlotUnavailableReason.OUTSIDE_HOURS, f"During {title}"
    return None, None


def find_slot(
    slots: Iterable[Slot], start: dt.datetime, end: Optional[dt.datetime] = None
) -> Optional[Slot]:
    """Return the slot beginning at ``start`` (and ending at ``end``, if given)."""
    start_utc = ensure_aware(start, "start")
    end_utc = ensure_aware(end, "end") if end is not None else None
    for slot in slots:
        if slot.start == start_utc and (end_utc is None or slot.end == end_utc):
            return slot
    return None


def free_slots(slots: Iterable[Slot]) -> list[Slot]:
    return [s for s in slots if s.available]
