"""Booking read model, booking-creation request, and upstream record normalization."""

from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from fieldbook.schemas.availability_schema import OperatingHoursOverride
from fieldbook.utils import safe_number, time_to_minutes, to_api_time


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    MANUAL_PENDING = "manual_pending"
    PAID = "paid"
    REFUNDED = "refunded"
    FAILED = "failed"


class UserRole(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"
    CUSTOMER = "customer"


class Booking(BaseModel):
    """Booking as returned by the booking store.

    Unknown upstream keys are kept (``extra="allow"``) because refund and
    balance figures arrive under several historical names.
    """
    model_config = ConfigDict(extra="allow")

    id: Optional[int] = None
    booking_reference: str = ""
    field_id: int
    booking_date: str
    start_time: str
    end_time: str
    duration_hours: float = 0
    hourly_rate: float = 0
    total_amount: float = 0
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    refund_amount: Optional[float] = None
    notes: Optional[str] = None

    @classmethod
    def from_upstream(cls, row: Mapping[str, Any]) -> "Booking":
        """Build a Booking from a raw store record, whatever naming it used."""
        data = dict(row)
        data["status"] = normalize_booking_status(row)
        data["payment_status"] = normalize_payment_status(row)

        booking_id = _pick_number(row.get("id"), row.get("booking_id"), row.get("bookingId"))
        data["id"] = int(booking_id) if booking_id is not None else None
        data["booking_reference"] = _pick_string(
            row.get("booking_reference"), row.get("reference"),
            row.get("booking_ref"), row.get("ref"),
        ) or ""
        data["total_amount"] = _pick_number(
            row.get("total_amount"), row.get("amount"), row.get("total"), row.get("price"),
        ) or 0.0

        field_id = _pick_number(row.get("field_id"), row.get("fieldId"), row.get("field"))
        data["field_id"] = int(field_id) if field_id is not None else 0
        for key in ("duration_hours", "hourly_rate"):
            data[key] = safe_number(row.get(key), 0.0)
        data["refund_amount"] = safe_number(row.get("refund_amount"), None)
        for key in ("booking_date", "start_time", "end_time"):
            data[key] = str(row.get(key) or "")
        return cls.model_validate(data)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID


def _pick_number(*values: Any) -> Optional[float]:
    for value in values:
        number = safe_number(value, None)
        if number is not None:
            return number
    return None


def _pick_string(*values: Any) -> Optional[str]:
    for value in values:
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def normalize_payment_status(row: Mapping[str, Any]) -> PaymentStatus:
    """Map the payment-status spellings and paid flags stores emit onto PaymentStatus."""
    payment = row.get("payment")
    nested = payment.get("status") if isinstance(payment, Mapping) else None
    raw = str(
        row.get("payment_status") or row.get("paymentStatus") or nested
        or row.get("payment_status_text") or row.get("status_payment") or ""
    ).lower()

    if row.get("is_paid") in (True, 1, "1") or row.get("paid_at") or row.get("payment_confirmed_at"):
        return PaymentStatus.PAID
    if raw in ("unpaid", "not_paid", "not paid"):
        return PaymentStatus.PENDING
    if "manual" in raw:
        return PaymentStatus.MANUAL_PENDING
    if "refund" in raw:
        return PaymentStatus.REFUNDED
    if "paid" in raw or "success" in raw or "completed" in raw or raw == "1":
        return PaymentStatus.PAID
    if "fail" in raw:
        return PaymentStatus.FAILED
    return PaymentStatus.PENDING


def normalize_booking_status(row: Mapping[str, Any]) -> BookingStatus:
    raw = str(
        row.get("status") or row.get("booking_status") or row.get("bookingStatus")
        or row.get("status_text") or ""
    ).lower()
    if raw.startswith("cancel"):
        return BookingStatus.CANCELLED
    if raw.startswith("confirm"):
        return BookingStatus.CONFIRMED
    if raw.startswith("complete") or raw in ("done", "finalized", "finished"):
        return BookingStatus.COMPLETED
    return BookingStatus.PENDING


class BookingCreateRequest(BaseModel):
    """Payload sent to the booking store to create a booking.

    Times are normalized to ``HH:MM:SS``; ``duration_hours`` is derived from
    the times when omitted. The ``original_*`` and ``payment_adjustment``
    fields are only set when the request replaces an existing booking.
    """
    field_id: int
    booking_date: str
    start_time: str
    end_time: str
    duration_hours: Optional[float] = None
    notes: Optional[str] = None
    operating_hours_override: Optional[OperatingHoursOverride] = None
    original_booking_id: Optional[int] = None
    original_total_amount: Optional[float] = None
    original_payment_status: Optional[PaymentStatus] = None
    payment_adjustment: Optional[float] = None

    @field_validator("booking_date")
    @classmethod
    def _validate_date(cls, value: str) -> str:
        try:
            datetime.strptime(value.strip()[:10], "%Y-%m-%d")
        except ValueError:
            raise ValueError(f"booking_date must be YYYY-MM-DD, got {value!r}") from None
        return value.strip()[:10]

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalize_time(cls, value: str) -> str:
        normalized = to_api_time(value)
        if not normalized:
            raise ValueError(f"Start and end times are required, got {value!r}")
        return normalized

    @model_validator(mode="after")
    def _derive_duration(self) -> "BookingCreateRequest":
        if self.duration_hours is not None and self.duration_hours > 0:
            return self
        start = time_to_minutes(self.start_time)
        end = time_to_minutes(self.end_time)
        if start is None or end is None or end <= start:
            raise ValueError(
                f"end_time must be after start_time, got {self.start_time}-{self.end_time}"
            )
        self.duration_hours = round((end - start) / 60, 2)
        return self

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict for the booking store, omitting unset metadata."""
        return self.model_dump(mode="json", exclude_none=True)
