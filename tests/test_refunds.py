"""Tests for the refund/balance resolver."""

import pytest

from fieldbook.policy.refunds import (
    BALANCE_KEYS,
    REFUND_KEYS,
    explicit_refund_amount,
    first_numeric,
    resolve_adjusted_amount,
)
from fieldbook.schemas.booking_schema import BookingStatus, PaymentStatus
from tests.conftest import make_booking


def _cancelled_paid(**extra):
    return make_booking(
        total_amount=400,
        status=BookingStatus.CANCELLED,
        payment_status=PaymentStatus.PAID,
        **extra,
    )


class TestResolveAdjustedAmount:
    def test_cancelled_paid_without_refund_field(self):
        assert resolve_adjusted_amount(_cancelled_paid()) == -400

    def test_cancelled_refunded_without_refund_field(self):
        booking = _cancelled_paid().model_copy(update={"payment_status": PaymentStatus.REFUNDED})
        assert resolve_adjusted_amount(booking) == -400

    def test_explicit_refund_is_negated(self):
        assert resolve_adjusted_amount(_cancelled_paid(refund_amount=250)) == -250

    def test_legacy_refund_key_on_model_extras(self):
        assert resolve_adjusted_amount(_cancelled_paid(refundDue="150")) == -150

    def test_refund_sign_ignored(self):
        assert resolve_adjusted_amount({"customer_refund": -75, "total_amount": 400}) == -75

    def test_zero_refund_falls_through(self):
        assert resolve_adjusted_amount(_cancelled_paid(refund_amount=0)) == -400

    def test_negative_balance(self):
        assert resolve_adjusted_amount({"balance_due": -50, "total_amount": 400}) == -50

    def test_positive_balance_ignored(self):
        record = {"outstanding_balance": 50, "total_amount": 400, "status": "confirmed"}
        assert resolve_adjusted_amount(record) == 400

    def test_active_booking_keeps_total(self):
        assert resolve_adjusted_amount(make_booking(total_amount=400)) == 400

    def test_cancelled_unpaid_keeps_total(self):
        booking = make_booking(
            total_amount=400, status=BookingStatus.CANCELLED, payment_status=PaymentStatus.PENDING,
        )
        assert resolve_adjusted_amount(booking) == 400

    def test_amount_fallback_key(self):
        assert resolve_adjusted_amount({"amount": "120.50"}) == 120.5

    def test_missing_record(self):
        assert resolve_adjusted_amount(None) == 0
        assert resolve_adjusted_amount({}) == 0

    def test_non_numeric_refund_skipped(self):
        record = {"refund": "n/a", "refund_due": 90, "total_amount": 400}
        assert resolve_adjusted_amount(record) == -90


class TestExplicitRefundAmount:
    def test_unsigned_value(self):
        assert explicit_refund_amount({"amount_due_to_customer": -120}) == 120

    def test_absent(self):
        assert explicit_refund_amount(_cancelled_paid()) is None

    def test_distinct_from_implied_amount(self):
        booking = _cancelled_paid()
        assert explicit_refund_amount(booking) is None
        assert resolve_adjusted_amount(booking) == -400


class TestFirstNumeric:
    def test_priority_order(self):
        record = {"refund": 10, "refund_amount": 20}
        assert first_numeric(record, REFUND_KEYS) == 20

    def test_accept_predicate(self):
        record = {"balance": 5, "amount_due": -5}
        assert first_numeric(record, BALANCE_KEYS, accept=lambda v: v < 0) == -5

    @pytest.mark.parametrize("value", [None, "", "abc"])
    def test_non_numeric_values(self, value):
        assert first_numeric({"refund": value}, REFUND_KEYS) is None
