"""
In-memory booking store.

Implements the BookingStore operations the reschedule saga drives. In
production these calls go to the bookings API; this store backs tests and
local runs and performs the same server-side overlap check at creation.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from fieldbook.config import settings
from fieldbook.exceptions import BookingStoreError
from fieldbook.logging_context import get_request_logger
from fieldbook.scheduling.pricing import compute_booking_cost
from fieldbook.schemas.booking_schema import (
    Booking,
    BookingCreateRequest,
    BookingStatus,
    PaymentStatus,
)
from fieldbook.utils import parse_date, time_to_minutes

logger = get_request_logger(__name__)


class InMemoryBookingStore:
    """Dict-backed booking store keyed by integer booking id."""

    def __init__(self, hourly_rates: Optional[dict[int, float]] = None) -> None:
        self.hourly_rates = dict(hourly_rates or {})
        self._bookings: dict[int, Booking] = {}
        self._next_id = 1
        self.cancellation_reasons: dict[int, str] = {}

    def add(self, booking: Booking) -> Booking:
        """Seed an existing booking, assigning an id when it has none."""
        if booking.id is None:
            booking = booking.model_copy(update={"id": self._next_id})
        self._next_id = max(self._next_id, booking.id + 1)
        self._bookings[booking.id] = booking
        return booking

    def get(self, booking_id: int) -> Optional[Booking]:
        return self._bookings.get(booking_id)

    def all(self) -> list[Booking]:
        return list(self._bookings.values())

    def _overlaps(self, request: BookingCreateRequest) -> Optional[Booking]:
        start = time_to_minutes(request.start_time)
        end = time_to_minutes(request.end_time)
        day = parse_date(request.booking_date)
        for existing in self._bookings.values():
            if existing.status == BookingStatus.CANCELLED:
                continue
            if existing.id == request.original_booking_id:
                continue
            if existing.field_id != request.field_id or parse_date(existing.booking_date) != day:
                continue
            other_start = time_to_minutes(existing.start_time)
            other_end = time_to_minutes(existing.end_time)
            if other_start is None or other_end is None:
                continue
            if start < other_end and other_start < end:
                return existing
        return None

    async def create_booking(self, request: BookingCreateRequest) -> Booking:
        """Create a pending, unpaid booking for the requested window."""
        clash = self._overlaps(request)
        if clash is not None:
            raise BookingStoreError(
                f"Field {request.field_id} is already booked "
                f"{clash.start_time}-{clash.end_time} on {request.booking_date}."
            )

        rate = self.hourly_rates.get(request.field_id, settings.scheduling.default_hourly_rate)
        booking = Booking(
            id=self._next_id,
            booking_reference=f"BK-{uuid.uuid4().hex[:6].upper()}",
            field_id=request.field_id,
            booking_date=request.booking_date,
            start_time=request.start_time,
            end_time=request.end_time,
            duration_hours=request.duration_hours,
            hourly_rate=rate,
            total_amount=compute_booking_cost(rate, request.duration_hours),
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            notes=request.notes,
            original_booking_id=request.original_booking_id,
            payment_adjustment=request.payment_adjustment,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self._next_id += 1
        self._bookings[booking.id] = booking
        logger.info(
            "Booking created: %s field %s on %s %s-%s",
            booking.booking_reference, booking.field_id, booking.booking_date,
            booking.start_time, booking.end_time,
        )
        return booking

    async def cancel_booking(self, booking_id: int, reason: str) -> None:
        booking = self._require(booking_id)
        if booking.status == BookingStatus.COMPLETED:
            raise BookingStoreError(f"Booking {booking_id} is completed and cannot be cancelled.")
        self._bookings[booking_id] = booking.model_copy(update={"status": BookingStatus.CANCELLED})
        self.cancellation_reasons[booking_id] = reason
        logger.info("Booking cancelled: %s (%s)", booking_id, reason)

    async def confirm_payment(self, booking_id: int) -> Booking:
        """Mark a booking paid and confirmed."""
        booking = self._require(booking_id).model_copy(
            update={"status": BookingStatus.CONFIRMED, "payment_status": PaymentStatus.PAID}
        )
        self._bookings[booking_id] = booking
        logger.info("Booking %s marked paid and confirmed", booking_id)
        return booking

    def _require(self, booking_id: int) -> Booking:
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise BookingStoreError(f"Booking {booking_id} not found.")
        return booking

    def reset(self) -> None:
        """Clear all bookings. Used by test fixtures for isolation."""
        self._bookings.clear()
        self.cancellation_reasons.clear()
        self._next_id = 1
