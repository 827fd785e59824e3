"""
Centralized configuration with environment variable overrides.

Engine bounds and the policy defaults applied to new listings are
configurable here. Nothing is hardcoded in engine or store logic.
"""

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class EngineConfig:
    """Bounds applied by the availability engine."""

    default_timezone: str = os.getenv("SLOTWISE_DEFAULT_TIMEZONE", "Europe/London")
    max_range_days: int = _safe_int("SLOTWISE_MAX_RANGE_DAYS", "90")


@dataclass(frozen=True)
class PolicyConfig:
    """Defaults for service settings that a listing does not set explicitly."""

    default_slot_minutes: int = _safe_int("SLOTWISE_DEFAULT_SLOT_MINUTES", "60")
    default_buffer_minutes: int = _safe_int("SLOTWISE_DEFAULT_BUFFER_MINUTES", "0")
    default_min_advance_hours: float = _safe_float("SLOTWISE_DEFAULT_MIN_ADVANCE_HOURS", "0")
    default_max_advance_days: int = _safe_int("SLOTWISE_DEFAULT_MAX_ADVANCE_DAYS", "90")
    default_cancellation_hours: float = _safe_float(
        "SLOTWISE_DEFAULT_CANCELLATION_HOURS", "24"
    )


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    try:
        ZoneInfo(config.engine.default_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(
            "SLOTWISE_DEFAULT_TIMEZONE must be an IANA timezone, "
            f"got {config.engine.default_timezone!r}"
        ) from None
    if config.engine.max_range_days < 1:
        raise ValueError(
            f"SLOTWISE_MAX_RANGE_DAYS must be >= 1, got {config.engine.max_range_days}"
        )
    if config.policy.default_slot_minutes < 1:
        raise ValueError(
            "SLOTWISE_DEFAULT_SLOT_MINUTES must be >= 1, "
            f"got {config.policy.default_slot_minutes}"
        )

    for name, value in [
        ("SLOTWISE_DEFAULT_BUFFER_MINUTES", config.policy.default_buffer_minutes),
        ("SLOTWISE_DEFAULT_MIN_ADVANCE_HOURS", config.policy.default_min_advance_hours),
        ("SLOTWISE_DEFAULT_MAX_ADVANCE_DAYS", config.policy.default_max_advance_days),
        ("SLOTWISE_DEFAULT_CANCELLATION_HOURS", config.policy.default_cancellation_hours),
    ]:
        if value < 0:
            raise ValueError(f"{name} must be >= 0, got {value}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded (default timezone %s)", config.engine.default_timezone)
    return config


# Singleton instance
settings = load_config()
