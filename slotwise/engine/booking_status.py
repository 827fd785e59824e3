"""
Booking status lifecycle.

Every status change must match an explicit transition. Anything else is
rejected with a clear error listing what is allowed from the current
status:

    pending   --confirm-->  confirmed
    pending   --cancel--->  cancelled
    confirmed --cancel--->  cancelled
    confirmed --complete->  completed

Cancelled and completed bookings are terminal.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from slotwise.errors import InvalidTransitionError
from slotwise.schemas.booking_schema import BookingStatus

logger = logging.getLogger(__name__)


class StatusTrigger(str, Enum):
    """Actions that move a booking between statuses."""
    CONFIRM = "confirm"
    CANCEL = "cancel"
    COMPLETE = "complete"


@dataclass(frozen=True)
class Transition:
    """A single valid status transition."""
    from_status: BookingStatus
    to_status: BookingStatus
    trigger: StatusTrigger


TRANSITIONS: list[Transition] = [
    Transition(BookingStatus.PENDING, BookingStatus.CONFIRMED, StatusTrigger.CONFIRM),
    Transition(BookingStatus.PENDING, BookingStatus.CANCELLED, StatusTrigger.CANCEL),
    Transition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED, StatusTrigger.CANCEL),
    Transition(BookingStatus.CONFIRMED, BookingStatus.COMPLETED, StatusTrigger.COMPLETE),
]


def apply_trigger(current: BookingStatus, trigger: StatusTrigger) -> BookingStatus:
    """
    Resolve the status reached from ``current`` via ``trigger``.

    Raises:
        InvalidTransitionError: If no valid transition exists.
    """
    for t in TRANSITIONS:
        if t.from_status == current and t.trigger == trigger:
            logger.debug(
                "Status transition: %s -> %s (trigger: %s)",
                current.value, t.to_status.value, trigger.value,
            )
            return t.to_status

    valid = [t.value for t in valid_triggers(current)]
    raise InvalidTransitionError(
        f"No valid transition from '{current.value}' "
        f"with trigger '{trigger.value}'. Valid triggers: {valid}"
    )


def valid_triggers(current: BookingStatus) -> list[StatusTrigger]:
    """Return all triggers valid from ``current``."""
    return [t.trigger for t in TRANSITIONS if t.from_status == current]


def is_terminal(status: BookingStatus) -> bool:
    return not valid_triggers(status)
