"""Per-listing service settings: slot sizing, lead times, and cancellation policy."""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from slotwise.config import settings
from slotwise.errors import InvalidConfiguration
from slotwise.schemas.schedule_schema import BreakTime


class RefundPolicy(str, Enum):
    """How much of the price (after any fee) is returned on cancellation."""

    FULL = "full"
    PARTIAL = "partial"
    NONE = "none"


class ServiceOption(BaseModel):
    """One bookable service of a listing, e.g. a 30-minute trim or a 90-minute colour."""
    model_config = ConfigDict(frozen=True)

    name: str
    duration_minutes: int
    price: Optional[Decimal] = None


class ServiceSettings(BaseModel):
    """
    Booking configuration for one listing.

    Only one of ``cancellation_fee_percentage`` and ``cancellation_fee_amount``
    may be set. With the fee enabled and neither set, the fee is zero.
    """
    model_config = ConfigDict(frozen=True)

    slot_duration_minutes: int = settings.policy.default_slot_minutes
    buffer_minutes: int = settings.policy.default_buffer_minutes
    advance_booking_minimum_hours: float = settings.policy.default_min_advance_hours
    advance_booking_maximum_days: int = settings.policy.default_max_advance_days
    cancellation_hours: float = settings.policy.default_cancellation_hours
    cancellation_fee_enabled: bool = False
    cancellation_fee_percentage: Optional[Decimal] = None
    cancellation_fee_amount: Optional[Decimal] = None
    refund_policy: RefundPolicy = RefundPolicy.FULL
    partial_refund_percentage: Optional[Decimal] = None
    booking_enabled: bool = True
    same_day_booking: bool = True
    auto_confirm: bool = False
    break_times: list[BreakTime] = Field(default_factory=list)
    service_options: list[ServiceOption] = Field(default_factory=list)

    def option(self, name: str) -> ServiceOption:
        """Look up a service option by name."""
        for option in self.service_options:
            if option.name == name:
                return option
        known = [o.name for o in self.service_options]
        raise InvalidConfiguration(f"Unknown service option {name!r}. Known options: {known}")


def validate_service_settings(service: ServiceSettings) -> None:
    """Raise InvalidConfiguration if the settings cannot drive slot or fee computation."""
    if service.slot_duration_minutes <= 0:
        raise InvalidConfiguration(
            f"slot_duration_minutes must be > 0, got {service.slot_duration_minutes}"
        )

    for name, value in [
        ("buffer_minutes", service.buffer_minutes),
        ("advance_booking_minimum_hours", service.advance_booking_minimum_hours),
        ("advance_booking_maximum_days", service.advance_booking_maximum_days),
        ("cancellation_hours", service.cancellation_hours),
    ]:
        if value < 0:
            raise InvalidConfiguration(f"{name} must be >= 0, got {value}")

    if (
        service.cancellation_fee_percentage is not None
        and service.cancellation_fee_amount is not None
    ):
        raise InvalidConfiguration(
            "Set cancellation_fee_percentage or cancellation_fee_amount, not both"
        )

    for name, pct in [
        ("cancellation_fee_percentage", service.cancellation_fee_percentage),
        ("partial_refund_percentage", service.partial_refund_percentage),
    ]:
        if pct is not None and not Decimal(0) <= pct <= Decimal(100):
            raise InvalidConfiguration(f"{name} must be between 0 and 100, got {pct}")

    if service.cancellation_fee_amount is not None and service.cancellation_fee_amount < 0:
        raise InvalidConfiguration(
            f"cancellation_fee_amount must be >= 0, got {service.cancellation_fee_amount}"
        )

    for brk in service.break_times:
        if brk.day_range.is_empty:
            raise InvalidConfiguration(f"Break {brk.title!r} must end after it starts")

    seen: set[str] = set()
    for option in service.service_options:
        if option.duration_minutes <= 0:
            raise InvalidConfiguration(
                f"Service option {option.name!r} duration_minutes must be > 0, "
                f"got {option.duration_minutes}"
            )
        if option.price is not None and option.price < 0:
            raise InvalidConfiguration(
                f"Service option {option.name!r} price must be >= 0, got {option.price}"
            )
        if option.name in seen:
            raise InvalidConfiguration(f"Duplicate service option {option.name!r}")
        seen.add(option.name)
