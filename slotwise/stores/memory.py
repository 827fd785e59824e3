"""
Dict-backed stores for tests and local development.

In production these would be backed by the application database; the
booking store's ``transaction()`` would map to a row lock or a
serializable transaction.
"""

import datetime as dt
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from slotwise.errors import BookingNotFound, InvalidConfiguration, SlotConflict
from slotwise.logging_context import get_request_logger
from slotwise.schemas.booking_schema import Booking, BookingStatus, BusyTime
from slotwise.schemas.schedule_schema import AvailabilityOverride, WeeklyAvailabilityRule
from slotwise.schemas.settings_schema import ServiceSettings
from slotwise.schemas.time_schema import TimeInterval

logger = get_request_logger(__name__)


class InMemoryScheduleStore:
    """Schedules, overrides, settings and busy times keyed by listing id."""

    def __init__(self) -> None:
        self._rules: dict[str, WeeklyAvailabilityRule] = {}
        self._overrides: dict[str, list[AvailabilityOverride]] = {}
        self._settings: dict[str, ServiceSettings] = {}
        self._busy: dict[str, list[BusyTime]] = {}

    def configure(
        self,
        listing_id: str,
        rule: WeeklyAvailabilityRule,
        service: ServiceSettings,
        overrides: Optional[list[AvailabilityOverride]] = None,
    ) -> None:
        self._rules[listing_id] = rule
        self._settings[listing_id] = service
        self._overrides[listing_id] = list(overrides or [])

    def add_override(self, listing_id: str, override: AvailabilityOverride) -> None:
        self._overrides.setdefault(listing_id, []).append(override)

    def add_busy_time(self, listing_id: str, busy: BusyTime) -> None:
        self._busy.setdefault(listing_id, []).append(busy)

    def get_weekly_rule(self, listing_id: str) -> WeeklyAvailabilityRule:
        if listing_id not in self._rules:
            raise InvalidConfiguration(f"No schedule configured for listing {listing_id}")
        return self._rules[listing_id]

    def get_overrides(self, listing_id: str) -> list[AvailabilityOverride]:
        return list(self._overrides.get(listing_id, []))

    def get_service_settings(self, listing_id: str) -> ServiceSettings:
        if listing_id not in self._settings:
            raise InvalidConfiguration(f"No service settings for listing {listing_id}")
        return self._settings[listing_id]

    def get_busy_times(
        self, listing_id: str, start: dt.datetime, end: dt.datetime
    ) -> list[BusyTime]:
        window = TimeInterval(start, end)
        return [b for b in self._busy.get(listing_id, []) if b.interval.overlaps(window)]

    def reset(self) -> None:
        """Clear all data. Used by test fixtures for isolation."""
        self._rules.clear()
        self._overrides.clear()
        self._settings.clear()
        self._busy.clear()


class InMemoryBookingStore:
    """Bookings keyed by id, guarded by a re-entrant lock."""

    def __init__(self) -> None:
        self._bookings: dict[str, Booking] = {}
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            yield

    def list_bookings(
        self, provider_id: str, start: dt.datetime, end: dt.datetime
    ) -> list[Booking]:
        window = TimeInterval(start, end)
        with self._lock:
            return [
                b for b in self._bookings.values()
                if b.provider_id == provider_id and b.interval.overlaps(window)
            ]

    def get(self, booking_id: str) -> Booking:
        with self._lock:
            if booking_id not in self._bookings:
                raise BookingNotFound(f"Booking {booking_id} not found")
            return self._bookings[booking_id]

    def add(self, booking: Booking) -> None:
        with self._lock:
            if booking.id in self._bookings:
                raise SlotConflict(f"Booking {booking.id} already exists")
            self._bookings[booking.id] = booking
        logger.debug("Stored booking %s (%s)", booking.id, booking.status.value)

    def update_status(
        self, booking_id: str, expected: BookingStatus, new: BookingStatus
    ) -> Booking:
        with self._lock:
            current = self.get(booking_id)
            if current.status != expected:
                raise SlotConflict(
                    f"Booking {booking_id} is {current.status.value}, expected {expected.value}"
                )
            updated = current.model_copy(update={"status": new})
            self._bookings[booking_id] = updated
        logger.debug("Booking %s: %s -> %s", booking_id, expected.value, new.value)
        return updated

    def reset(self) -> None:
        """Clear all bookings. Used by test fixtures for isolation."""
        with self._lock:
            self._bookings.clear()
