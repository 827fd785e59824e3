"""Booking slot availability and cancellation policy engines."""

from slotwise.engine import compute_slots, evaluate_cancellation
from slotwise.errors import (
    BookingNotFound,
    InvalidConfiguration,
    InvalidInput,
    InvalidTransitionError,
    SlotConflict,
    SlotwiseError,
)

__all__ = [
    "compute_slots",
    "evaluate_cancellation",
    "SlotwiseError",
    "InvalidConfiguration",
    "InvalidInput",
    "SlotConflict",
    "BookingNotFound",
    "InvalidTransitionError",
]
