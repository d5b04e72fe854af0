"""
Reschedule reconciliation: moving an existing booking to a new window.

There is no transaction spanning "create new" and "cancel old", so the
flow runs as a saga with a single compensating step:

    1. create the replacement booking (failure aborts everything)
    2. cancel the original (failure is reported, never rolled back)
    3. mark the replacement paid/confirmed when the old payment covers it

A failed step 2 leaves the customer with two reservations rather than
none, and the outcome tells the caller the original must be cancelled
manually.

Payment outcome by original payment state and duration change:

    unpaid  any       -> replacement pending, full new amount due
    paid    equal     -> carried_over, replacement paid + confirmed
    paid    shorter   -> credit_due (old - new), replacement paid + confirmed
    paid    longer    -> additional_due (new - old), replacement pending,
                         old amount recorded as a partial payment

Amounts are never negative. When segment pricing makes a shorter window
dearer (or a longer one cheaper) the outcome follows the sign of the price
difference instead of the duration change.
"""

import uuid
from datetime import datetime
from typing import Optional, Protocol, Union

from fieldbook.exceptions import BookingStoreError, RescheduleError
from fieldbook.logging_context import get_request_logger, set_request_id
from fieldbook.policy.cancellation import CancellationPolicy, RoleLike
from fieldbook.scheduling.calendar import OperatingHoursCalendar, default_calendar
from fieldbook.scheduling.pricing import PRICE_PRECISION, compute_booking_cost
from fieldbook.schemas.availability_schema import ContiguousWindow
from fieldbook.schemas.booking_schema import (
    Booking,
    BookingCreateRequest,
    BookingStatus,
    PaymentStatus,
)
from fieldbook.schemas.reschedule_schema import (
    PaymentOutcome,
    PaymentOutcomeKind,
    ReconciliationResult,
    RescheduleOutcome,
)
from fieldbook.utils import normalize_time_hm, parse_date, time_to_minutes

logger = get_request_logger(__name__)

BookingId = Union[int, str]


class BookingStore(Protocol):
    """Booking store operations the reschedule saga drives.

    Implementations raise BookingStoreError on failure.
    """

    async def create_booking(self, request: BookingCreateRequest) -> Booking: ...

    async def cancel_booking(self, booking_id: BookingId, reason: str) -> None: ...

    async def confirm_payment(self, booking_id: BookingId) -> Booking: ...


def original_duration_hours(booking: Booking) -> float:
    """Duration of the booked window, preferring its times over ``duration_hours``."""
    start = time_to_minutes(booking.start_time)
    end = time_to_minutes(booking.end_time)
    if start is not None and end is not None and end > start:
        return (end - start) / 60
    return booking.duration_hours or 1


def original_amount(booking: Booking) -> float:
    if booking.total_amount > 0:
        return booking.total_amount
    return compute_booking_cost(booking.hourly_rate, original_duration_hours(booking))


def has_selection_changed(original: Booking, candidate: BookingCreateRequest) -> bool:
    """True when the candidate's date, times or notes differ from the original booking."""
    date_changed = parse_date(candidate.booking_date) != parse_date(original.booking_date)
    time_changed = (
        normalize_time_hm(candidate.start_time) != normalize_time_hm(original.start_time)
        or normalize_time_hm(candidate.end_time) != normalize_time_hm(original.end_time)
    )
    notes_changed = (candidate.notes or "") != (original.notes or "")
    return date_changed or time_changed or notes_changed


class RescheduleReconciler:
    """Computes the booking and payment transitions for a reschedule; never calls the store."""

    def __init__(self, calendar: Optional[OperatingHoursCalendar] = None) -> None:
        self.calendar = calendar or default_calendar

    def reconcile(
        self,
        booking: Booking,
        window: ContiguousWindow,
        duration: int,
        booking_date: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ReconciliationResult:
        """Work out what should happen when ``booking`` moves to ``window``.

        Args:
            booking: The booking being modified.
            window: The newly selected window; its price is the new amount.
            duration: Whole hours of the new window.
            booking_date: New date; defaults to the original date.
            notes: Notes for the replacement booking.
        """
        new_date = booking_date or booking.booking_date
        old_amount = round(original_amount(booking), PRICE_PRECISION)
        new_amount = round(window.price, PRICE_PRECISION)
        old_duration = original_duration_hours(booking)

        partial = 0.0
        if not booking.is_paid:
            outcome = PaymentOutcome(kind=PaymentOutcomeKind.ADDITIONAL_DUE, amount=new_amount)
            status, payment_status = BookingStatus.PENDING, PaymentStatus.PENDING
        elif duration == old_duration:
            outcome = PaymentOutcome(kind=PaymentOutcomeKind.CARRIED_OVER, amount=0.0)
            status, payment_status = BookingStatus.CONFIRMED, PaymentStatus.PAID
        else:
            # Shorter normally means a credit and longer a charge, but segment
            # prices can invert that; the price difference decides.
            delta = round(new_amount - old_amount, PRICE_PRECISION)
            if delta <= 0:
                outcome = PaymentOutcome(kind=PaymentOutcomeKind.CREDIT_DUE, amount=abs(delta))
                status, payment_status = BookingStatus.CONFIRMED, PaymentStatus.PAID
            else:
                outcome = PaymentOutcome(kind=PaymentOutcomeKind.ADDITIONAL_DUE, amount=delta)
                status, payment_status = BookingStatus.PENDING, PaymentStatus.PENDING
                partial = old_amount
            if (delta > 0) != (duration > old_duration):
                logger.info(
                    "Price difference %.2f runs against the %sh -> %sh duration change; "
                    "recording %s",
                    delta, old_duration, duration, outcome.kind.value,
                )

        request = BookingCreateRequest(
            field_id=booking.field_id,
            booking_date=new_date,
            start_time=window.start,
            end_time=window.end,
            duration_hours=duration,
            notes=notes or None,
            operating_hours_override=self.calendar.override_for(new_date),
            original_booking_id=booking.id,
            original_total_amount=old_amount,
            original_payment_status=booking.payment_status,
            payment_adjustment=outcome.signed_adjustment,
        )
        return ReconciliationResult(
            new_booking_request=request,
            should_cancel_original=booking.status != BookingStatus.CANCELLED,
            payment_outcome=outcome,
            new_status=status,
            new_payment_status=payment_status,
            partial_payment_amount=partial,
        )


class RescheduleSaga:
    """Runs a reconciliation against a booking store: create, cancel, then confirm payment."""

    def __init__(
        self,
        store: BookingStore,
        reconciler: Optional[RescheduleReconciler] = None,
        policy: Optional[CancellationPolicy] = None,
    ) -> None:
        self.store = store
        self.reconciler = reconciler or RescheduleReconciler()
        self.policy = policy or CancellationPolicy()

    def _check_eligible(
        self, booking: Booking, candidate: BookingCreateRequest,
        role: RoleLike, now: Optional[datetime],
    ) -> None:
        if booking.status == BookingStatus.COMPLETED:
            raise RescheduleError("Completed bookings cannot be rescheduled.")
        if not has_selection_changed(booking, candidate):
            raise RescheduleError("No changes to save.")
        if booking.status != BookingStatus.CANCELLED:
            decision = self.policy.evaluate(booking, role, now)
            if not decision.allowed:
                raise RescheduleError(decision.message or "Booking can no longer be changed.")

    async def execute(
        self,
        booking: Booking,
        window: ContiguousWindow,
        duration: int,
        booking_date: Optional[str] = None,
        notes: Optional[str] = None,
        role: RoleLike = None,
        now: Optional[datetime] = None,
    ) -> RescheduleOutcome:
        """Move ``booking`` to ``window``.

        Raises:
            RescheduleError: If the booking may not be changed, nothing changed,
                or the replacement booking could not be created.
        """
        set_request_id(f"RESCHEDULE-{booking.id or uuid.uuid4().hex[:8]}")
        new_date = booking_date or booking.booking_date
        result = self.reconciler.reconcile(booking, window, duration, new_date, notes)
        self._check_eligible(booking, result.new_booking_request, role, now)

        logger.info(
            "Rescheduling booking %s to %s %s-%s (%s %.2f)",
            booking.id, new_date, window.start, window.end,
            result.payment_outcome.kind.value, result.payment_outcome.amount,
        )

        try:
            new_booking = await self.store.create_booking(result.new_booking_request)
        except BookingStoreError as exc:
            logger.error("Replacement booking for %s was not created: %s", booking.id, exc)
            raise RescheduleError(f"Could not create the new booking: {exc}") from exc

        cancel_failed = False
        cancel_error = None
        if result.should_cancel_original:
            reference = f" (#{new_booking.booking_reference})" if new_booking.booking_reference else ""
            try:
                await self.store.cancel_booking(booking.id, f"Rescheduled via edit{reference}")
            except BookingStoreError as exc:
                cancel_failed = True
                cancel_error = str(exc)
                logger.warning(
                    "Original booking %s not cancelled after reschedule to %s: %s",
                    booking.id, new_booking.id, exc,
                )

        payment_confirm_failed = False
        if result.settles_payment:
            try:
                new_booking = await self.store.confirm_payment(new_booking.id)
            except BookingStoreError as exc:
                payment_confirm_failed = True
                logger.warning(
                    "Carried-over payment not applied to booking %s: %s", new_booking.id, exc,
                )

        return RescheduleOutcome(
            result=result,
            new_booking=new_booking,
            cancel_failed=cancel_failed,
            cancel_error=cancel_error,
            payment_confirm_failed=payment_confirm_failed,
            message=_outcome_message(cancel_failed, payment_confirm_failed),
        )


def _outcome_message(cancel_failed: bool, payment_confirm_failed: bool) -> str:
    if cancel_failed:
        message = "New booking created, but please cancel the original booking manually."
    else:
        message = "New booking created and original booking archived as cancelled."
    if payment_confirm_failed:
        message += " The carried-over payment still needs to be applied to the new booking."
    return message
