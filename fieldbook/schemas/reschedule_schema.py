"""Reschedule reconciliation results."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from fieldbook.schemas.booking_schema import (
    Booking,
    BookingCreateRequest,
    BookingStatus,
    PaymentStatus,
)


class PaymentOutcomeKind(str, Enum):
    CARRIED_OVER = "carried_over"
    CREDIT_DUE = "credit_due"
    ADDITIONAL_DUE = "additional_due"


class PaymentOutcome(BaseModel):
    kind: PaymentOutcomeKind
    amount: float = 0.0

    @property
    def signed_adjustment(self) -> float:
        """Negative when money is owed to the customer, positive when owed by them."""
        if self.kind == PaymentOutcomeKind.CREDIT_DUE:
            return -self.amount
        if self.kind == PaymentOutcomeKind.ADDITIONAL_DUE:
            return self.amount
        return 0.0


class ReconciliationResult(BaseModel):
    """What should happen to bookings and payments when a booking is moved."""
    new_booking_request: BookingCreateRequest
    should_cancel_original: bool
    payment_outcome: PaymentOutcome
    new_status: BookingStatus
    new_payment_status: PaymentStatus
    partial_payment_amount: float = 0.0

    @property
    def settles_payment(self) -> bool:
        """True when the new booking is fully covered by the carried-over payment."""
        return self.new_payment_status == PaymentStatus.PAID


class RescheduleOutcome(BaseModel):
    """Result of running the create-then-cancel reschedule flow."""
    result: ReconciliationResult
    new_booking: Booking
    cancel_failed: bool = False
    cancel_error: Optional[str] = None
    payment_confirm_failed: bool = False
    message: str = ""

    @property
    def manual_cleanup_required(self) -> bool:
        return self.cancel_failed or self.payment_confirm_failed
