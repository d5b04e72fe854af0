"""Tests for booking normalization and the booking-creation request."""

import pytest
from pydantic import ValidationError

from fieldbook.schemas.availability_schema import OperatingHoursOverride
from fieldbook.schemas.booking_schema import (
    Booking,
    BookingCreateRequest,
    BookingStatus,
    PaymentStatus,
    normalize_booking_status,
    normalize_payment_status,
)


class TestBookingFromUpstream:
    def test_alternate_keys(self):
        booking = Booking.from_upstream({
            "booking_id": "7",
            "reference": "BK-77",
            "fieldId": 3,
            "booking_date": "2025-12-23",
            "start_time": "16:00:00",
            "end_time": "18:00:00",
            "amount": "800",
            "status": "Confirmed",
            "payment_status": "SUCCESS",
            "refundDue": 0,
        })
        assert booking.id == 7
        assert booking.booking_reference == "BK-77"
        assert booking.field_id == 3
        assert booking.total_amount == 800.0
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.payment_status == PaymentStatus.PAID
        assert booking.refund_amount is None
        assert booking.model_dump()["refundDue"] == 0

    def test_missing_values_default(self):
        booking = Booking.from_upstream({"field_id": 1})
        assert booking.status == BookingStatus.PENDING
        assert booking.payment_status == PaymentStatus.PENDING
        assert booking.total_amount == 0
        assert booking.booking_date == ""


class TestStatusNormalization:
    @pytest.mark.parametrize("raw, expected", [
        ("cancelled_by_user", BookingStatus.CANCELLED),
        ("CONFIRMED", BookingStatus.CONFIRMED),
        ("done", BookingStatus.COMPLETED),
        ("completed", BookingStatus.COMPLETED),
        ("awaiting", BookingStatus.PENDING),
        ("", BookingStatus.PENDING),
    ])
    def test_booking_status(self, raw, expected):
        assert normalize_booking_status({"status": raw}) == expected

    def test_booking_status_alternate_key(self):
        assert normalize_booking_status({"booking_status": "canceled"}) == BookingStatus.CANCELLED

    @pytest.mark.parametrize("raw, expected", [
        ("paid", PaymentStatus.PAID),
        ("Payment Completed", PaymentStatus.PAID),
        ("manual_pending", PaymentStatus.MANUAL_PENDING),
        ("refunded", PaymentStatus.REFUNDED),
        ("failed", PaymentStatus.FAILED),
        ("unpaid", PaymentStatus.PENDING),
        ("", PaymentStatus.PENDING),
    ])
    def test_payment_status(self, raw, expected):
        assert normalize_payment_status({"payment_status": raw}) == expected

    def test_paid_flags(self):
        assert normalize_payment_status({"is_paid": 1}) == PaymentStatus.PAID
        assert normalize_payment_status({"paid_at": "2025-12-01T10:00:00Z"}) == PaymentStatus.PAID

    def test_nested_payment_status(self):
        assert normalize_payment_status({"payment": {"status": "failed"}}) == PaymentStatus.FAILED


class TestBookingCreateRequest:
    def test_times_normalized_and_duration_derived(self):
        request = BookingCreateRequest(
            field_id=1, booking_date="2025-12-23", start_time="16:00", end_time="18:00",
        )
        assert request.start_time == "16:00:00"
        assert request.end_time == "18:00:00"
        assert request.duration_hours == 2

    def test_explicit_duration_kept(self):
        request = BookingCreateRequest(
            field_id=1, booking_date="2025-12-23", start_time="16:00", end_time="18:00",
            duration_hours=2,
        )
        assert request.duration_hours == 2

    def test_payload_omits_unset_metadata(self):
        payload = BookingCreateRequest(
            field_id=1, booking_date="2025-12-23", start_time="16:00", end_time="17:00",
            notes="Bring bibs",
        ).to_payload()
        assert payload == {
            "field_id": 1,
            "booking_date": "2025-12-23",
            "start_time": "16:00:00",
            "end_time": "17:00:00",
            "duration_hours": 1.0,
            "notes": "Bring bibs",
        }

    def test_payload_carries_override_and_carryover(self):
        payload = BookingCreateRequest(
            field_id=1, booking_date="2025-12-27", start_time="09:00", end_time="10:00",
            operating_hours_override=OperatingHoursOverride(start="09:00", end="22:00"),
            original_booking_id=5,
            original_total_amount=400,
            original_payment_status=PaymentStatus.PAID,
            payment_adjustment=0,
        ).to_payload()
        assert payload["operating_hours_override"] == {"start": "09:00", "end": "22:00"}
        assert payload["original_payment_status"] == "paid"
        assert payload["payment_adjustment"] == 0

    def test_bad_date_rejected(self):
        with pytest.raises(ValidationError, match="booking_date"):
            BookingCreateRequest(
                field_id=1, booking_date="23/12/2025", start_time="16:00", end_time="17:00",
            )

    def test_missing_time_rejected(self):
        with pytest.raises(ValidationError):
            BookingCreateRequest(
                field_id=1, booking_date="2025-12-23", start_time="", end_time="17:00",
            )

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError, match="end_time must be after"):
            BookingCreateRequest(
                field_id=1, booking_date="2025-12-23", start_time="18:00", end_time="17:00",
            )
