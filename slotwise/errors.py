"""
Exception hierarchy for slot computation and booking.

Engines raise these and never catch them; translating them into
user-facing messages is the caller's job.
"""


class SlotwiseError(Exception):
    """Base exception for all slotwise errors."""


class InvalidConfiguration(SlotwiseError):
    """Raised for a malformed schedule, override set, or service settings."""


class InvalidInput(SlotwiseError):
    """Raised for malformed call arguments (inverted range, missing price, naive datetimes)."""


class SlotConflict(SlotwiseError):
    """Raised when a slot was taken, or a booking changed, between read and write."""


class BookingNotFound(SlotwiseError):
    """Raised when a store has no booking with the requested id."""


class InvalidTransitionError(SlotwiseError):
    """Raised when a booking status change is not allowed from its current status."""
