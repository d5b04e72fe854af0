"""
Centralized configuration with environment variable overrides.

Operating hours, the public-holiday table, the fallback hourly rate and
the cancellation notice window all live here so jurisdictions can override
them without touching scheduling or policy logic.
"""

import logging
import os
import re
from dataclasses import dataclass, field

from dotenv import load_dotenv

from fieldbook.logging_context import attach_request_id_filter

load_dotenv()

logger = logging.getLogger(__name__)

# South African public holidays (MM-DD).
DEFAULT_PUBLIC_HOLIDAYS = (
    "01-01,03-21,04-27,05-01,06-16,08-09,09-24,12-16,12-25,12-26"
)

_HOLIDAY_PATTERN = re.compile(r"^(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])$")


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


def _csv_tuple(env_var: str, default: str) -> tuple[str, ...]:
    """Split a comma-separated env var into a tuple of trimmed, non-empty items."""
    raw = os.getenv(env_var, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class SchedulingConfig:
    """Operating hours and pricing defaults for the hourly grid."""

    weekday_start_hour: int = _safe_int("WEEKDAY_START_HOUR", "16")
    weekday_end_hour: int = _safe_int("WEEKDAY_END_HOUR", "22")
    weekend_start_hour: int = _safe_int("WEEKEND_START_HOUR", "9")
    weekend_end_hour: int = _safe_int("WEEKEND_END_HOUR", "22")
    public_holidays: tuple[str, ...] = _csv_tuple("PUBLIC_HOLIDAYS", DEFAULT_PUBLIC_HOLIDAYS)
    default_hourly_rate: float = _safe_float("DEFAULT_HOURLY_RATE", "400")


@dataclass(frozen=True)
class PolicyConfig:
    """Cancellation and modification rules."""

    cancellation_notice_hours: float = _safe_float("CANCELLATION_NOTICE_HOURS", "24")
    privileged_roles: tuple[str, ...] = _csv_tuple("PRIVILEGED_ROLES", "admin,staff")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    service_name: str = os.getenv("SERVICE_NAME", "fieldbook")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    sched = config.scheduling
    for label, start, end in [
        ("WEEKDAY", sched.weekday_start_hour, sched.weekday_end_hour),
        ("WEEKEND", sched.weekend_start_hour, sched.weekend_end_hour),
    ]:
        if not 0 <= start < end <= 24:
            raise ValueError(
                f"{label}_START_HOUR/{label}_END_HOUR must satisfy "
                f"0 <= start < end <= 24, got {start}-{end}"
            )

    for holiday in sched.public_holidays:
        if not _HOLIDAY_PATTERN.match(holiday):
            raise ValueError(f"PUBLIC_HOLIDAYS entries must be MM-DD, got {holiday!r}")

    if sched.default_hourly_rate <= 0:
        raise ValueError(
            f"DEFAULT_HOURLY_RATE must be > 0, got {sched.default_hourly_rate}"
        )

    if config.policy.cancellation_notice_hours < 0:
        raise ValueError(
            "CANCELLATION_NOTICE_HOURS must be >= 0, "
            f"got {config.policy.cancellation_notice_hours}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] [%(request_id)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    attach_request_id_filter(logging.getLogger())
    logger.info("Configuration loaded for '%s'", config.service_name)
    return config


# Singleton instance
settings = load_config()
