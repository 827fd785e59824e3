from slotwise.schemas.booking_schema import (
    BLOCKING_STATUSES,
    Booking,
    BookingStatus,
    BusySource,
    BusyTime,
    CancellationOutcome,
    Slot,
    SlotUnavailableReason,
)
from slotwise.schemas.schedule_schema import (
    AvailabilityOverride,
    BreakTime,
    WeeklyAvailabilityRule,
    validate_schedule,
)
from slotwise.schemas.settings_schema import (
    RefundPolicy,
    ServiceOption,
    ServiceSettings,
    validate_service_settings,
)
from slotwise.schemas.time_schema import DayRange, TimeInterval

__all__ = [
    "AvailabilityOverride",
    "BLOCKING_STATUSES",
    "Booking",
    "BookingStatus",
    "BreakTime",
    "BusySource",
    "BusyTime",
    "CancellationOutcome",
    "DayRange",
    "RefundPolicy",
    "ServiceOption",
    "ServiceSettings",
    "Slot",
    "SlotUnavailableReason",
    "TimeInterval",
    "WeeklyAvailabilityRule",
    "validate_schedule",
    "validate_service_settings",
]
