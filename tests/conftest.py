"""Shared test fixtures and helpers."""

from datetime import datetime
from typing import Optional

import pytest

from fieldbook.exceptions import BookingStoreError
from fieldbook.policy.cancellation import CancellationPolicy
from fieldbook.scheduling.calendar import OperatingHoursCalendar
from fieldbook.schemas.availability_schema import AvailabilitySlot
from fieldbook.schemas.booking_schema import Booking, BookingStatus, PaymentStatus
from fieldbook.tools.booking import InMemoryBookingStore

# Saturday morning; 2025-12-23 is the following Tuesday.
NOW = datetime(2025, 12, 20, 10, 0)
WEEKDAY = "2025-12-23"
SATURDAY = "2025-12-27"
RATE = 400.0


@pytest.fixture
def calendar():
    return OperatingHoursCalendar()


@pytest.fixture
def policy():
    return CancellationPolicy()


@pytest.fixture
def store():
    return InMemoryBookingStore(hourly_rates={1: RATE})


class FailingCancelStore(InMemoryBookingStore):
    """Store whose cancel call always fails, as when the bookings API rejects it."""

    async def cancel_booking(self, booking_id, reason):
        raise BookingStoreError("cancel endpoint unavailable")


class RecordingStore(InMemoryBookingStore):
    """Store that records which bookings had payment confirmed."""

    def __init__(self, hourly_rates=None):
        super().__init__(hourly_rates)
        self.confirmed_ids: list = []

    async def confirm_payment(self, booking_id):
        self.confirmed_ids.append(booking_id)
        return await super().confirm_payment(booking_id)


class FailingConfirmStore(InMemoryBookingStore):
    async def confirm_payment(self, booking_id):
        raise BookingStoreError("payment service unavailable")


def make_booking(
    booking_id: Optional[int] = 1,
    booking_date: str = WEEKDAY,
    start_time: str = "16:00:00",
    end_time: str = "18:00:00",
    total_amount: float = 800.0,
    status: BookingStatus = BookingStatus.CONFIRMED,
    payment_status: PaymentStatus = PaymentStatus.PAID,
    duration_hours: float = 2,
    **extra,
) -> Booking:
    """Helper to create a Booking with sensible defaults (2h, paid, field 1)."""
    return Booking(
        id=booking_id,
        booking_reference=f"BK-TEST{booking_id or 0}",
        field_id=1,
        booking_date=booking_date,
        start_time=start_time,
        end_time=end_time,
        duration_hours=duration_hours,
        hourly_rate=RATE,
        total_amount=total_amount,
        status=status,
        payment_status=payment_status,
        **extra,
    )


def make_slot(
    start: str,
    end: str,
    available: bool = True,
    blocked: bool = False,
    price: Optional[float] = None,
    past: bool = False,
) -> AvailabilitySlot:
    return AvailabilitySlot(
        start=start, end=end, available=available, blocked=blocked, price=price, past=past,
    )
