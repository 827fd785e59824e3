from slotwise.engine.availability import (
    compute_slots,
    find_slot,
    free_slots,
    resolve_slot_length,
)
from slotwise.engine.booking_status import (
    StatusTrigger,
    apply_trigger,
    is_terminal,
    valid_triggers,
)
from slotwise.engine.cancellation import evaluate_cancellation

__all__ = [
    "compute_slots",
    "find_slot",
    "free_slots",
    "resolve_slot_length",
    "evaluate_cancellation",
    "StatusTrigger",
    "apply_trigger",
    "valid_triggers",
    "is_terminal",
]
