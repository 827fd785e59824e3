"""Store interfaces the booking service reads from and writes to."""

import datetime as dt
from contextlib import AbstractContextManager
from typing import Protocol

from slotwise.schemas.booking_schema import Booking, BookingStatus, BusyTime
from slotwise.schemas.schedule_schema import AvailabilityOverride, WeeklyAvailabilityRule
from slotwise.schemas.settings_schema import ServiceSettings


class ScheduleStore(Protocol):
    """Provider schedule and listing settings, looked up by listing id."""

    def get_weekly_rule(self, listing_id: str) -> WeeklyAvailabilityRule:
        ...

    def get_overrides(self, listing_id: str) -> list[AvailabilityOverride]:
        ...

    def get_service_settings(self, listing_id: str) -> ServiceSettings:
        ...

    def get_busy_times(
        self, listing_id: str, start: dt.datetime, end: dt.datetime
    ) -> list[BusyTime]:
        """External calendar blocks overlapping ``[start, end)``."""
        ...


class BookingStore(Protocol):
    """Booking records with a conditional status write and a transaction boundary."""

    def list_bookings(
        self, provider_id: str, start: dt.datetime, end: dt.datetime
    ) -> list[Booking]:
        """All bookings of ``provider_id`` overlapping ``[start, end)``, any status."""
        ...

    def get(self, booking_id: str) -> Booking:
        """Raises BookingNotFound for unknown ids."""
        ...

    def add(self, booking: Booking) -> None:
        ...

    def update_status(
        self, booking_id: str, expected: BookingStatus, new: BookingStatus
    ) -> Booking:
        """
        Set the status only if it still equals ``expected``.

        Raises:
            BookingNotFound: Unknown id.
            SlotConflict: The stored status is no longer ``expected``.
        """
        ...

    def transaction(self) -> AbstractContextManager:
        """Serialize a read-check-write sequence against concurrent writers."""
        ...
