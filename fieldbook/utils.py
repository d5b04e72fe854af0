"""Shared utilities for coercing the loosely-typed values upstream systems send."""

import math
import re
from datetime import date, datetime
from typing import Any, Optional

_TIME_PATTERN = re.compile(r"(\d{1,2}):(\d{1,2})(?::(\d{1,2}))?")

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR


def pad(n: int) -> str:
    return f"{n:02d}"


def extract_time_parts(value: Any) -> Optional[tuple[int, int, int]]:
    """Pull (hour, minute, second) out of a time-ish string.

    Accepts ``HH:MM``, ``HH:MM:SS`` and full timestamps such as
    ``2025-11-24 18:00:00``. Returns None when no time can be found.

    Examples:
        >>> extract_time_parts("18:30")
        (18, 30, 0)
        >>> extract_time_parts("2025-11-24 18:00:05")
        (18, 0, 5)
    """
    if value is None:
        return None
    match = _TIME_PATTERN.search(str(value))
    if not match:
        return None
    hour, minute, second = match.groups()
    return int(hour), int(minute), int(second or 0)


def normalize_time_hm(value: Any) -> str:
    """Normalize a time to ``HH:MM``, or an empty string when unparseable."""
    parts = extract_time_parts(value)
    if parts is None:
        return ""
    hour, minute, _ = parts
    return f"{pad(min(23, hour))}:{pad(min(59, minute))}"


def to_api_time(value: Any) -> str:
    """Normalize a time to the ``HH:MM:SS`` form the booking store expects."""
    parts = extract_time_parts(value)
    if parts is None:
        return ""
    hour, minute, second = parts
    return f"{pad(min(23, hour))}:{pad(min(59, minute))}:{pad(min(59, second))}"


def time_to_minutes(value: Any) -> Optional[int]:
    """Minutes since midnight, allowing ``24:00`` as an end-of-day boundary."""
    parts = extract_time_parts(value)
    if parts is None:
        return None
    hour, minute, _ = parts
    return min(MINUTES_PER_DAY, hour * MINUTES_PER_HOUR + min(59, minute))


def minutes_to_hm(minutes: int) -> str:
    return f"{pad(minutes // MINUTES_PER_HOUR)}:{pad(minutes % MINUTES_PER_HOUR)}"


def safe_number(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """Coerce numbers and numeric strings to float, returning ``default`` otherwise."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def to_bool(value: Any) -> bool:
    """Interpret the truthy encodings upstream feeds use (1, "1", "true")."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return value is True or value == 1


_DATE_PATTERN = re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})")


def parse_date(value: Any) -> Optional[date]:
    """Parse a ``YYYY-MM-DD`` calendar date (a trailing time part is ignored)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None:
        return None
    match = _DATE_PATTERN.match(str(value).strip())
    if not match:
        return None
    try:
        return date(*(int(part) for part in match.groups()))
    except ValueError:
        return None
