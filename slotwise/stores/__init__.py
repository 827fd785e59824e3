from slotwise.stores.base import BookingStore, ScheduleStore
from slotwise.stores.memory import InMemoryBookingStore, InMemoryScheduleStore
from slotwise.stores.service import BookingService

__all__ = [
    "BookingStore",
    "ScheduleStore",
    "InMemoryBookingStore",
    "InMemoryScheduleStore",
    "BookingService",
]
