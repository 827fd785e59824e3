"""Booking records and the value types returned by the engines."""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from slotwise.schemas.settings_schema import RefundPolicy
from slotwise.schemas.time_schema import TimeInterval
from slotwise.utils import resolve_timezone


class BookingStatus(str, Enum):
    """Lifecycle status of a booking."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# Only these statuses occupy a slot.
BLOCKING_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


class Booking(BaseModel):
    """An existing reservation as loaded from the booking store."""
    model_config = ConfigDict(frozen=True)

    id: str
    start_time: dt.datetime
    end_time: dt.datetime
    status: BookingStatus = BookingStatus.PENDING
    customer_id: str
    provider_id: str
    listing_id: str
    price: Optional[Decimal] = None
    service_name: Optional[str] = None

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start_time, self.end_time)

    @property
    def blocks_availability(self) -> bool:
        return self.status in BLOCKING_STATUSES


class BusySource(str, Enum):
    GOOGLE = "google"
    MANUAL = "manual"


class BusyTime(BaseModel):
    """A block imported from an external calendar or entered by hand."""
    model_config = ConfigDict(frozen=True)

    start_time: dt.datetime
    end_time: dt.datetime
    title: str = "Busy"
    source: BusySource = BusySource.MANUAL

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start_time, self.end_time)


class SlotUnavailableReason(str, Enum):
    """Why a candidate slot cannot be booked."""

    ALREADY_BOOKED = "already-booked"
    OUTSIDE_HOURS = "outside-hours"
    INSIDE_BUFFER = "inside-buffer"
    PAST_MINIMUM_LEAD_TIME = "past-minimum-lead-time"
    BEYOND_MAX_HORIZON = "beyond-max-horizon"
    CALENDAR_BUSY = "calendar-busy"


class Slot(BaseModel):
    """
    A candidate booking interval. ``reason`` is set exactly when unavailable.

    ``detail`` names what blocks the slot (a busy-time or break title) when
    there is something to name. ``service_name`` and ``price`` are set when
    the slots were computed for a service option.
    """
    model_config = ConfigDict(frozen=True)

    start: dt.datetime
    end: dt.datetime
    timezone: str
    duration_minutes: int
    available: bool
    reason: Optional[SlotUnavailableReason] = None
    detail: Optional[str] = None
    service_name: Optional[str] = None
    price: Optional[Decimal] = None

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start, self.end, self.timezone)

    @property
    def local_start(self) -> dt.datetime:
        return self.start.astimezone(resolve_timezone(self.timezone))

    @property
    def local_date(self) -> dt.date:
        return self.local_start.date()

    @property
    def local_start_label(self) -> str:
        return self.local_start.strftime("%H:%M")

    @property
    def local_end_label(self) -> str:
        return self.end.astimezone(resolve_timezone(self.timezone)).strftime("%H:%M")


class CancellationOutcome(BaseModel):
    """Fee and refund decision for one cancellation request."""
    model_config = ConfigDict(frozen=True)

    within_free_window: bool
    fee_amount: Decimal
    refund_amount: Decimal
    hours_until_booking: float
    base_price: Decimal
    refund_policy: RefundPolicy
