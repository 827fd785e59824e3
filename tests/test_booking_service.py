"""Integration tests: stores + availability engine + cancellation evaluator."""

import threading
from datetime import date, timedelta
from decimal import Decimal

import pytest

from slotwise.errors import BookingNotFound, InvalidInput, InvalidTransitionError, SlotConflict
from slotwise.schemas.booking_schema import BookingStatus, BusyTime, SlotUnavailableReason
from slotwise.schemas.schedule_schema import AvailabilityOverride
from slotwise.schemas.settings_schema import ServiceOption, ServiceSettings

MONDAY = date(2025, 3, 17)


class TestAvailableSlots:
    def test_reads_schedule_from_store(self, booking_service, sunday_morning):
        slots = booking_service.available_slots(
            "listing-1", "prov-1", MONDAY, MONDAY, sunday_morning
        )
        assert len(slots) == 8

    def test_overrides_and_busy_times_come_from_store(
        self, booking_service, schedule_store, sunday_morning, at
    ):
        schedule_store.add_override("listing-1", AvailabilityOverride.with_hours(
            MONDAY, ("09:00", "12:00")
        ))
        schedule_store.add_busy_time("listing-1", BusyTime(
            start_time=at(MONDAY, "10:00"), end_time=at(MONDAY, "11:00"),
        ))
        slots = booking_service.available_slots(
            "listing-1", "prov-1", MONDAY, MONDAY, sunday_morning
        )
        assert [s.available for s in slots] == [True, False, True]
        assert slots[1].reason == SlotUnavailableReason.CALENDAR_BUSY

    def test_existing_bookings_block(
        self, booking_service, booking_store, make_booking, sunday_morning, at
    ):
        booking_store.add(make_booking(at(MONDAY, "11:00"), at(MONDAY, "12:00")))
        slots = booking_service.available_slots(
            "listing-1", "prov-1", MONDAY, MONDAY, sunday_morning
        )
        assert sum(1 for s in slots if s.available) == 7


class TestBookSlot:
    def test_books_free_slot_as_pending(self, booking_service, booking_store, sunday_morning, at):
        booking = booking_service.book_slot(
            "listing-1", "prov-1", "cust-9", at(MONDAY, "10:00"), sunday_morning,
            price=Decimal("80"),
        )
        assert booking.id.startswith("BK-")
        assert booking.status == BookingStatus.PENDING
        assert booking.end_time - booking.start_time == timedelta(hours=1)
        assert booking_store.get(booking.id) == booking

    def test_auto_confirm(self, booking_service, schedule_store, monday_rule, sunday_morning, at):
        schedule_store.configure(
            "listing-1", monday_rule,
            ServiceSettings(slot_duration_minutes=60, auto_confirm=True),
        )
        booking = booking_service.book_slot(
            "listing-1", "prov-1", "cust-9", at(MONDAY, "10:00"), sunday_morning
        )
        assert booking.status == BookingStatus.CONFIRMED

    def test_second_booking_of_same_slot_conflicts(self, booking_service, sunday_morning, at):
        booking_service.book_slot("listing-1", "prov-1", "cust-1", at(MONDAY, "10:00"), sunday_morning)
        with pytest.raises(SlotConflict, match="already-booked"):
            booking_service.book_slot(
                "listing-1", "prov-1", "cust-2", at(MONDAY, "10:00"), sunday_morning
            )

    def test_unaligned_start_conflicts(self, booking_service, sunday_morning, at):
        with pytest.raises(SlotConflict, match="No 60-minute slot starts"):
            booking_service.book_slot(
                "listing-1", "prov-1", "cust-1", at(MONDAY, "10:15"), sunday_morning
            )

    def test_slot_freed_by_cancellation_can_be_rebooked(
        self, booking_service, sunday_morning, at
    ):
        first = booking_service.book_slot(
            "listing-1", "prov-1", "cust-1", at(MONDAY, "10:00"), sunday_morning,
            price=Decimal("50"),
        )
        booking_service.cancel_booking(first.id, sunday_morning)
        second = booking_service.book_slot(
            "listing-1", "prov-1", "cust-2", at(MONDAY, "10:00"), sunday_morning
        )
        assert second.id != first.id

    def test_concurrent_bookings_of_one_slot(
        self, booking_service, booking_store, sunday_morning, at
    ):
        start = at(MONDAY, "10:00")
        barrier = threading.Barrier(2)
        booked, conflicts = [], []

        def book(customer_id):
            barrier.wait()
            try:
                booked.append(booking_service.book_slot(
                    "listing-1", "prov-1", customer_id, start, sunday_morning
                ))
            except SlotConflict as exc:
                conflicts.append(exc)

        threads = [threading.Thread(target=book, args=(c,)) for c in ("cust-1", "cust-2")]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert len(booked) == 1
        assert len(conflicts) == 1
        assert "already-booked" in str(conflicts[0])
        stored = booking_store.list_bookings("prov-1", start, start + timedelta(hours=1))
        assert [b.id for b in stored] == [booked[0].id]


class TestServiceOptionBookings:
    @pytest.fixture
    def salon(self, schedule_store, monday_rule):
        schedule_store.configure(
            "listing-1", monday_rule,
            ServiceSettings(
                slot_duration_minutes=60,
                service_options=[
                    ServiceOption(name="Trim", duration_minutes=30, price=Decimal("25")),
                    ServiceOption(name="Colour", duration_minutes=90, price=Decimal("80")),
                ],
            ),
        )
        return schedule_store

    def test_option_sets_length_price_and_name(self, salon, booking_service, sunday_morning, at):
        booking = booking_service.book_slot(
            "listing-1", "prov-1", "cust-1", at(MONDAY, "10:30"), sunday_morning,
            service_option="Colour",
        )
        assert booking.end_time - booking.start_time == timedelta(minutes=90)
        assert booking.price == Decimal("80")
        assert booking.service_name == "Colour"

    def test_explicit_price_wins(self, salon, booking_service, sunday_morning, at):
        booking = booking_service.book_slot(
            "listing-1", "prov-1", "cust-1", at(MONDAY, "09:00"), sunday_morning,
            price=Decimal("60"), service_option="Colour",
        )
        assert booking.price == Decimal("60")

    def test_colour_booking_blocks_overlapping_trims(
        self, salon, booking_service, sunday_morning, at
    ):
        booking_service.book_slot(
            "listing-1", "prov-1", "cust-1", at(MONDAY, "10:30"), sunday_morning,
            service_option="Colour",
        )
        trims = booking_service.available_slots(
            "listing-1", "prov-1", MONDAY, MONDAY, sunday_morning, service_option="Trim"
        )
        blocked = [s.local_start_label for s in trims if not s.available]
        assert blocked == ["10:30", "11:00", "11:30"]
        with pytest.raises(SlotConflict, match="already-booked"):
            booking_service.book_slot(
                "listing-1", "prov-1", "cust-2", at(MONDAY, "11:00"), sunday_morning,
                service_option="Trim",
            )

    def test_start_off_the_option_grid_conflicts(
        self, salon, booking_service, sunday_morning, at
    ):
        with pytest.raises(SlotConflict, match="No 90-minute slot starts"):
            booking_service.book_slot(
                "listing-1", "prov-1", "cust-1", at(MONDAY, "10:00"), sunday_morning,
                service_option="Colour",
            )


class TestStatusChanges:
    def test_confirm_then_complete(self, booking_service, sunday_morning, at):
        booking = booking_service.book_slot(
            "listing-1", "prov-1", "cust-1", at(MONDAY, "09:00"), sunday_morning
        )
        assert booking_service.confirm_booking(booking.id).status == BookingStatus.CONFIRMED
        assert booking_service.complete_booking(booking.id).status == BookingStatus.COMPLETED

    def test_unknown_booking(self, booking_service):
        with pytest.raises(BookingNotFound):
            booking_service.confirm_booking("BK-MISSING")

    def test_cancel_returns_outcome_and_marks_cancelled(
        self, booking_service, booking_store, sunday_morning, at
    ):
        booking = booking_service.book_slot(
            "listing-1", "prov-1", "cust-1", at(MONDAY, "09:00"), sunday_morning,
            price=Decimal("100"),
        )
        outcome = booking_service.cancel_booking(booking.id, sunday_morning)
        assert outcome.within_free_window is True
        assert outcome.refund_amount == Decimal("100.00")
        assert booking_store.get(booking.id).status == BookingStatus.CANCELLED

    def test_cancel_twice_is_rejected(self, booking_service, sunday_morning, at):
        booking = booking_service.book_slot(
            "listing-1", "prov-1", "cust-1", at(MONDAY, "09:00"), sunday_morning,
            price=Decimal("100"),
        )
        booking_service.cancel_booking(booking.id, sunday_morning)
        with pytest.raises(InvalidTransitionError):
            booking_service.cancel_booking(booking.id, sunday_morning)

    def test_failed_evaluation_leaves_booking_active(
        self, booking_service, booking_store, sunday_morning, at
    ):
        booking = booking_service.book_slot(
            "listing-1", "prov-1", "cust-1", at(MONDAY, "09:00"), sunday_morning
        )
        with pytest.raises(InvalidInput, match="no price"):
            booking_service.cancel_booking(booking.id, sunday_morning)
        assert booking_store.get(booking.id).status == BookingStatus.PENDING


class TestBookingStore:
    def test_conditional_update_detects_stale_status(self, booking_store, make_booking, at):
        booking_store.add(make_booking(at(MONDAY, "09:00"), at(MONDAY, "10:00")))
        booking_store.update_status("BK-TEST", BookingStatus.CONFIRMED, BookingStatus.CANCELLED)
        with pytest.raises(SlotConflict, match="is cancelled"):
            booking_store.update_status(
                "BK-TEST", BookingStatus.CONFIRMED, BookingStatus.COMPLETED
            )

    def test_duplicate_id_rejected(self, booking_store, make_booking, at):
        booking = make_booking(at(MONDAY, "09:00"), at(MONDAY, "10:00"))
        booking_store.add(booking)
        with pytest.raises(SlotConflict):
            booking_store.add(booking)

    def test_list_filters_by_provider_and_window(self, booking_store, make_booking, at):
        booking_store.add(make_booking(at(MONDAY, "09:00"), at(MONDAY, "10:00"), booking_id="a"))
        booking_store.add(make_booking(
            at(MONDAY, "09:00"), at(MONDAY, "10:00"), provider_id="prov-2", booking_id="b"
        ))
        booking_store.add(make_booking(
            at(MONDAY + timedelta(days=3), "09:00"), at(MONDAY + timedelta(days=3), "10:00"),
            booking_id="c",
        ))
        found = booking_store.list_bookings("prov-1", at(MONDAY, "00:00"), at(MONDAY, "23:59"))
        assert [b.id for b in found] == ["a"]
