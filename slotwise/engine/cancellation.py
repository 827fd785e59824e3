"""
Cancellation policy evaluator.

Decides whether a cancellation is free and, if not, what fee applies and
how much of the price goes back to the customer.

Cancelling at or beyond ``cancellation_hours`` before the start is free:
the boundary itself carries no fee. Inside the window, the fee is a
percentage of the price or a fixed amount. The refund then follows the
listing's refund policy, applied to what is left after the fee.
"""

import datetime as dt
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from slotwise.errors import InvalidConfiguration, InvalidInput
from slotwise.schemas.booking_schema import Booking, CancellationOutcome
from slotwise.schemas.settings_schema import (
    RefundPolicy,
    ServiceSettings,
    validate_service_settings,
)
from slotwise.utils import ensure_aware, hours_between

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
HUNDRED = Decimal(100)


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def evaluate_cancellation(
    booking: Booking,
    service: ServiceSettings,
    now: dt.datetime,
    *,
    base_price: Optional[Decimal] = None,
    partial_refund_percentage: Optional[Decimal] = None,
) -> CancellationOutcome:
    """
    Evaluate a cancellation request for ``booking`` at ``now``.

    Args:
        booking: The booking being cancelled.
        service: The listing's cancellation policy.
        now: When the cancellation is requested. Must be aware.
        base_price: The priced amount; defaults to ``booking.price``.
        partial_refund_percentage: Share of the post-fee amount refunded
            under a partial policy; defaults to the settings value.

    Raises:
        InvalidInput: Missing or negative price, or a naive ``now``.
        InvalidConfiguration: Invalid settings, or a partial refund policy
            with no percentage available.
    """
    validate_service_settings(service)
    now_utc = ensure_aware(now, "now")
    start = ensure_aware(booking.start_time, "booking start_time")

    price = base_price if base_price is not None else booking.price
    if price is None:
        raise InvalidInput(f"Booking {booking.id} has no price to evaluate a cancellation against")
    price = Decimal(price)
    if price < 0:
        raise InvalidInput(f"Booking price must be >= 0, got {price}")

    hours_until = hours_between(now_utc, start)
    within_free_window = hours_until >= service.cancellation_hours

    fee = Decimal(0)
    if not within_free_window and service.cancellation_fee_enabled:
        if service.cancellation_fee_percentage is not None:
            fee = price * service.cancellation_fee_percentage / HUNDRED
        elif service.cancellation_fee_amount is not None:
            fee = service.cancellation_fee_amount
    fee = _money(fee)

    remaining = max(price - fee, Decimal(0))
    if service.refund_policy == RefundPolicy.FULL:
        refund = remaining
    elif service.refund_policy == RefundPolicy.PARTIAL:
        pct = (
            partial_refund_percentage
            if partial_refund_percentage is not None
            else service.partial_refund_percentage
        )
        if pct is None:
            raise InvalidConfiguration(
                "Partial refund policy needs partial_refund_percentage"
            )
        pct = Decimal(pct)
        if not Decimal(0) <= pct <= HUNDRED:
            raise InvalidInput(f"partial_refund_percentage must be between 0 and 100, got {pct}")
        refund = remaining * pct / HUNDRED
    else:
        refund = Decimal(0)

    outcome = CancellationOutcome(
        within_free_window=within_free_window,
        fee_amount=fee,
        refund_amount=_money(refund),
        hours_until_booking=hours_until,
        base_price=_money(price),
        refund_policy=service.refund_policy,
    )
    logger.debug(
        "Cancellation of %s: %.2fh ahead, free=%s, fee=%s, refund=%s",
        booking.id, hours_until, within_free_window, outcome.fee_amount, outcome.refund_amount,
    )
    return outcome
