"""Shared test fixtures and helpers."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from slotwise.schemas.booking_schema import Booking, BookingStatus
from slotwise.schemas.schedule_schema import WeeklyAvailabilityRule
from slotwise.schemas.settings_schema import ServiceSettings
from slotwise.schemas.time_schema import DayRange
from slotwise.stores.memory import InMemoryBookingStore, InMemoryScheduleStore
from slotwise.stores.service import BookingService

TZ_NAME = "America/New_York"
TZ = ZoneInfo(TZ_NAME)
SUNDAY = date(2025, 3, 16)
MONDAY = date(2025, 3, 17)


def local_at(day: date, hhmm: str, tz: ZoneInfo = TZ) -> datetime:
    """Aware datetime for a wall-clock time on ``day`` in ``tz``."""
    hour, minute = (int(part) for part in hhmm.split(":"))
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=tz)


@pytest.fixture
def at():
    return local_at


@pytest.fixture
def make_booking():
    """Factory for Booking records with sensible defaults."""

    def _make(
        start: datetime,
        end: datetime,
        status: BookingStatus = BookingStatus.CONFIRMED,
        provider_id: str = "prov-1",
        price: Optional[Decimal] = None,
        booking_id: str = "BK-TEST",
    ) -> Booking:
        return Booking(
            id=booking_id,
            start_time=start,
            end_time=end,
            status=status,
            customer_id="cust-1",
            provider_id=provider_id,
            listing_id="listing-1",
            price=price,
        )

    return _make


@pytest.fixture
def monday_rule() -> WeeklyAvailabilityRule:
    """Mondays 09:00-17:00 New York time, every other day closed."""
    return WeeklyAvailabilityRule(timezone=TZ_NAME, days={0: [DayRange.parse("09:00", "17:00")]})


@pytest.fixture
def hourly_settings() -> ServiceSettings:
    return ServiceSettings(
        slot_duration_minutes=60,
        buffer_minutes=0,
        advance_booking_minimum_hours=0,
        advance_booking_maximum_days=90,
    )


@pytest.fixture
def sunday_morning() -> datetime:
    return local_at(SUNDAY, "09:00")


@pytest.fixture
def schedule_store(monday_rule, hourly_settings):
    store = InMemoryScheduleStore()
    store.configure("listing-1", monday_rule, hourly_settings)
    yield store
    store.reset()


@pytest.fixture
def booking_store():
    store = InMemoryBookingStore()
    yield store
    store.reset()


@pytest.fixture
def booking_service(schedule_store, booking_store) -> BookingService:
    return BookingService(schedule_store, booking_store)
