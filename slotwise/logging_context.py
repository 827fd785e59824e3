"""Request ID logging context for tracing booking operations across modules.

Every booking write runs under a request id so that the service, store and
engine log lines of one booking or one cancellation can be grouped. Callers
that already have a correlation id (an HTTP request id, a job id) set it
with ``set_request_id``; otherwise ``request_scope`` mints one for the
duration of the operation and restores the previous value afterwards.

Usage:
    from slotwise.logging_context import get_request_logger, request_scope

    logger = get_request_logger(__name__)
    with request_scope("BOOK"):
        logger.info("Booking slot")  # record.request_id == "BOOK-1A2B3C4D"
"""

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

NO_REQUEST_ID = "NO_REQUEST_ID"

_request_id: ContextVar[str] = ContextVar("request_id", default=NO_REQUEST_ID)


def set_request_id(request_id: str) -> None:
    """Set the correlation ID for the current context."""
    _request_id.set(request_id)


def get_request_id() -> str:
    """Retrieve the current correlation ID."""
    return _request_id.get()


@contextmanager
def request_scope(operation: str) -> Iterator[str]:
    """
    Run a booking operation under a request id.

    An id already set by the caller is kept. Otherwise a new one of the form
    ``<OPERATION>-<8 hex>`` is set for the block and removed on exit.
    """
    current = _request_id.get()
    if current != NO_REQUEST_ID:
        yield current
        return

    token = _request_id.set(f"{operation.upper()}-{uuid.uuid4().hex[:8].upper()}")
    try:
        yield _request_id.get()
    finally:
        _request_id.reset(token)


class RequestIdFilter(logging.Filter):
    """Stamps the current request id on each record as ``record.request_id``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    """Module logger whose records carry ``request_id`` for ``%(request_id)s`` formats."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger
