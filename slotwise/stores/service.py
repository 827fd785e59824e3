"""
Booking service: the caller side of the availability contract.

The engines only see a snapshot of bookings. This service loads that
snapshot from the stores and, when a customer books, re-computes the
slot inside the booking store's transaction so two customers racing for
the same slot cannot both win. The loser gets SlotConflict.

Usage:
    service = BookingService(schedule_store, booking_store)
    slots = service.available_slots("listing-1", "provider-1", monday, monday, now,
                                    service_option="Colour")
    booking = service.book_slot("listing-1", "provider-1", "customer-9", slots[0].start, now,
                                service_option="Colour")
    outcome = service.cancel_booking(booking.id, later)
"""

import datetime as dt
import uuid
from decimal import Decimal
from typing import Optional

from slotwise.engine.availability import (
    compute_slots,
    find_slot,
    query_window,
    resolve_slot_length,
)
from slotwise.engine.booking_status import StatusTrigger, apply_trigger
from slotwise.engine.cancellation import evaluate_cancellation
from slotwise.errors import SlotConflict
from slotwise.logging_context import get_request_logger, request_scope
from slotwise.schemas.booking_schema import Booking, BookingStatus, CancellationOutcome, Slot
from slotwise.stores.base import BookingStore, ScheduleStore
from slotwise.utils import ensure_aware, resolve_timezone

logger = get_request_logger(__name__)


class BookingService:
    """Loads schedule and booking data, runs the engines, and commits status changes."""

    def __init__(self, schedules: ScheduleStore, bookings: BookingStore) -> None:
        self._schedules = schedules
        self._bookings = bookings

    def available_slots(
        self,
        listing_id: str,
        provider_id: str,
        range_start: dt.date,
        range_end: dt.date,
        now: dt.datetime,
        *,
        slot_duration_minutes: Optional[int] = None,
        service_option: Optional[str] = None,
    ) -> list[Slot]:
        """All candidate slots for the listing over the local date range."""
        rule = self._schedules.get_weekly_rule(listing_id)
        service = self._schedules.get_service_settings(listing_id)
        window = query_window(
            range_start, range_end, resolve_timezone(rule.timezone), service.buffer_minutes
        )
        return compute_slots(
            rule,
            self._schedules.get_overrides(listing_id),
            self._bookings.list_bookings(provider_id, window.start, window.end),
            service,
            range_start,
            range_end,
            now,
            busy_times=self._schedules.get_busy_times(listing_id, window.start, window.end),
            provider_id=provider_id,
            slot_duration_minutes=slot_duration_minutes,
            service_option=service_option,
        )

    def book_slot(
        self,
        listing_id: str,
        provider_id: str,
        customer_id: str,
        start: dt.datetime,
        now: dt.datetime,
        price: Optional[Decimal] = None,
        *,
        slot_duration_minutes: Optional[int] = None,
        service_option: Optional[str] = None,
    ) -> Booking:
        """
        Book the slot starting at ``start``.

        The slot length comes from ``slot_duration_minutes``, else the named
        service option, else the listing default. Without an explicit
        ``price`` the option's price is used.

        Raises:
            SlotConflict: The slot does not exist or is no longer available.
        """
        with request_scope("BOOK"):
            service = self._schedules.get_service_settings(listing_id)
            duration, option = resolve_slot_length(service, slot_duration_minutes, service_option)
            tz = resolve_timezone(self._schedules.get_weekly_rule(listing_id).timezone)
            start_utc = ensure_aware(start, "start")
            end_utc = start_utc + dt.timedelta(minutes=duration)
            local_day = start_utc.astimezone(tz).date()

            with self._bookings.transaction():
                slots = self.available_slots(
                    listing_id, provider_id, local_day, local_day, now,
                    slot_duration_minutes=slot_duration_minutes,
                    service_option=service_option,
                )
                slot = find_slot(slots, start_utc, end_utc)
                if slot is None:
                    raise SlotConflict(
                        f"No {duration}-minute slot starts at {start.isoformat()} "
                        f"for listing {listing_id}"
                    )
                if not slot.available:
                    logger.info(
                        "Rejected booking for %s at %s: %s",
                        listing_id, slot.start.isoformat(), slot.reason.value,
                    )
                    raise SlotConflict(
                        f"Slot at {slot.start.isoformat()} is no longer available "
                        f"({slot.reason.value})"
                    )

                booking = Booking(
                    id=f"BK-{uuid.uuid4().hex[:8].upper()}",
                    start_time=slot.start,
                    end_time=slot.end,
                    status=BookingStatus.CONFIRMED if service.auto_confirm else BookingStatus.PENDING,
                    customer_id=customer_id,
                    provider_id=provider_id,
                    listing_id=listing_id,
                    price=price if price is not None else slot.price,
                    service_name=slot.service_name,
                )
                self._bookings.add(booking)

            logger.info(
                "Booking created: %s for %s at %s (%s)",
                booking.id, customer_id, booking.start_time.isoformat(), booking.status.value,
            )
            return booking

    def confirm_booking(self, booking_id: str) -> Booking:
        return self._transition(booking_id, StatusTrigger.CONFIRM)

    def complete_booking(self, booking_id: str) -> Booking:
        return self._transition(booking_id, StatusTrigger.COMPLETE)

    def cancel_booking(
        self,
        booking_id: str,
        now: dt.datetime,
        base_price: Optional[Decimal] = None,
        partial_refund_percentage: Optional[Decimal] = None,
    ) -> CancellationOutcome:
        """
        Evaluate the fee and refund, then mark the booking cancelled.

        The status is only written once the evaluation succeeds: a booking
        whose policy or price cannot be resolved stays active.
        """
        with request_scope("CANCEL"):
            booking = self._bookings.get(booking_id)
            new_status = apply_trigger(booking.status, StatusTrigger.CANCEL)
            outcome = evaluate_cancellation(
                booking,
                self._schedules.get_service_settings(booking.listing_id),
                now,
                base_price=base_price,
                partial_refund_percentage=partial_refund_percentage,
            )
            self._bookings.update_status(booking_id, booking.status, new_status)
            logger.info(
                "Booking cancelled: %s (free=%s, fee=%s, refund=%s)",
                booking_id, outcome.within_free_window, outcome.fee_amount, outcome.refund_amount,
            )
            return outcome

    def _transition(self, booking_id: str, trigger: StatusTrigger) -> Booking:
        booking = self._bookings.get(booking_id)
        new_status = apply_trigger(booking.status, trigger)
        return self._bookings.update_status(booking_id, booking.status, new_status)
