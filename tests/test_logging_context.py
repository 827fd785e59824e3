"""Tests for request-id aware logging."""

import contextvars
import logging
from datetime import date

from slotwise.logging_context import (
    RequestIdFilter,
    get_request_id,
    get_request_logger,
    request_scope,
    set_request_id,
)


class TestRequestId:
    def test_default_id(self):
        assert contextvars.Context().run(get_request_id) == "NO_REQUEST_ID"

    def test_set_and_get(self):
        set_request_id("REQ-123")
        assert get_request_id() == "REQ-123"

    def test_filter_adds_request_id(self):
        set_request_id("REQ-456")
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        assert RequestIdFilter().filter(record) is True
        assert record.request_id == "REQ-456"

    def test_logger_gets_single_filter(self):
        logger = get_request_logger("slotwise.tests.logging")
        get_request_logger("slotwise.tests.logging")
        assert sum(isinstance(f, RequestIdFilter) for f in logger.filters) == 1

    def test_booking_service_logs_with_request_id(
        self, booking_service, sunday_morning, at, caplog
    ):
        set_request_id("REQ-BOOK")
        with caplog.at_level(logging.INFO, logger="slotwise.stores.service"):
            booking_service.book_slot(
                "listing-1", "prov-1", "cust-1", at(date(2025, 3, 17), "09:00"), sunday_morning
            )
        records = [r for r in caplog.records if "Booking created" in r.getMessage()]
        assert records
        assert records[0].request_id == "REQ-BOOK"


class TestRequestScope:
    def test_mints_and_restores_id(self):
        def run():
            with request_scope("cancel") as request_id:
                inside = get_request_id()
            return request_id, inside, get_request_id()

        request_id, inside, after = contextvars.Context().run(run)
        assert request_id.startswith("CANCEL-")
        assert len(request_id) == len("CANCEL-") + 8
        assert inside == request_id
        assert after == "NO_REQUEST_ID"

    def test_keeps_caller_id(self):
        def run():
            set_request_id("REQ-789")
            with request_scope("BOOK") as request_id:
                pass
            return request_id, get_request_id()

        assert contextvars.Context().run(run) == ("REQ-789", "REQ-789")

    def test_booking_without_caller_id_is_traced(
        self, booking_service, sunday_morning, at, caplog
    ):
        def book():
            with caplog.at_level(logging.DEBUG, logger="slotwise.stores"):
                booking_service.book_slot(
                    "listing-1", "prov-1", "cust-1", at(date(2025, 3, 17), "09:00"), sunday_morning
                )
            return get_request_id()

        assert contextvars.Context().run(book) == "NO_REQUEST_ID"
        traced = [r for r in caplog.records if r.name.startswith("slotwise.stores")]
        ids = {r.request_id for r in traced}
        assert len(ids) == 1
        assert ids.pop().startswith("BOOK-")
        assert any("Stored booking" in r.getMessage() for r in traced)
