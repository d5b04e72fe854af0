"""
Cancellation and modification eligibility.

Rules, in order:
1. Cancelled or completed bookings cannot be cancelled again.
2. Privileged roles (admin, staff) may always cancel.
3. Everyone else needs at least the configured notice (24h by default).

A start time that cannot be parsed never blocks the customer.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union

from fieldbook.config import PolicyConfig, settings
from fieldbook.schemas.booking_schema import Booking, BookingStatus, UserRole
from fieldbook.utils import extract_time_parts, parse_date

logger = logging.getLogger(__name__)

_TIMESTAMP_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")

RoleLike = Union[UserRole, str, None]


@dataclass
class PolicyDecision:
    allowed: bool
    message: Optional[str] = None


def parse_booking_datetime(booking_date: Any, time_value: Any) -> Optional[datetime]:
    """Combine a booking date and time into a naive local datetime.

    Some stores return the time as a full timestamp (``2025-12-07 10:00:00``);
    that form wins over ``booking_date``.
    """
    if not time_value:
        return None
    text = str(time_value).strip()
    if _TIMESTAMP_PREFIX.match(text):
        try:
            stamp = datetime.fromisoformat(text.replace(" ", "T"))
        except ValueError:
            stamp = None
        if stamp is not None:
            if stamp.tzinfo is not None:
                stamp = stamp.astimezone().replace(tzinfo=None)
            return stamp

    day = parse_date(booking_date)
    parts = extract_time_parts(text)
    if day is None or parts is None:
        return None
    hour, minute, second = parts
    try:
        return datetime(day.year, day.month, day.day, hour, minute, second)
    except ValueError:
        return None


def hours_until_booking_start(booking: Booking, now: Optional[datetime] = None) -> Optional[float]:
    start = parse_booking_datetime(booking.booking_date, booking.start_time)
    if start is None:
        return None
    return (start - (now or datetime.now())).total_seconds() / 3600


def has_booking_ended(booking: Booking, now: Optional[datetime] = None) -> bool:
    end = parse_booking_datetime(booking.booking_date, booking.end_time)
    if end is None:
        return False
    return end <= (now or datetime.now())


class CancellationPolicy:
    """Decides whether an actor may still cancel or modify a booking."""

    def __init__(self, config: Optional[PolicyConfig] = None) -> None:
        self.config = config or settings.policy
        self._privileged = frozenset(r.lower() for r in self.config.privileged_roles)

    def is_privileged(self, role: RoleLike) -> bool:
        if role is None:
            return False
        value = role.value if isinstance(role, UserRole) else str(role)
        return value.strip().lower() in self._privileged

    def evaluate(
        self, booking: Booking, role: RoleLike = None, now: Optional[datetime] = None
    ) -> PolicyDecision:
        if booking.status == BookingStatus.CANCELLED:
            return PolicyDecision(False, "Booking already cancelled.")
        if booking.status == BookingStatus.COMPLETED:
            return PolicyDecision(False, "Completed bookings cannot be cancelled.")
        if self.is_privileged(role):
            return PolicyDecision(True)

        hours_until = hours_until_booking_start(booking, now)
        if hours_until is None:
            logger.debug(
                "Unparseable start %r on %r, allowing cancellation",
                booking.start_time, booking.booking_date,
            )
            return PolicyDecision(True)

        notice = self.config.cancellation_notice_hours
        if hours_until < notice:
            return PolicyDecision(
                False,
                f"Cancellations are only allowed up to {notice:g} hours before start time.",
            )
        return PolicyDecision(True)

    def can_cancel(
        self, booking: Booking, role: RoleLike = None, now: Optional[datetime] = None
    ) -> bool:
        return self.evaluate(booking, role, now).allowed

    def restriction_message(
        self, booking: Booking, role: RoleLike = None, now: Optional[datetime] = None
    ) -> Optional[str]:
        return self.evaluate(booking, role, now).message
