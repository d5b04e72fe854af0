"""
Refund/balance resolution across the field names booking stores have used.

Sign convention for the adjusted amount: negative is owed to the customer,
zero or positive is owed by the customer (or already settled).
"""

from typing import Any, Callable, Mapping, Optional, Sequence, Union

from pydantic import BaseModel

from fieldbook.schemas.booking_schema import BookingStatus, PaymentStatus
from fieldbook.utils import safe_number

REFUND_KEYS: tuple[str, ...] = (
    "refund_amount",
    "refundAmount",
    "refund",
    "amount_refund",
    "amountRefund",
    "refund_due",
    "refundDue",
    "amount_due_customer",
    "amount_due_to_customer",
    "customer_refund",
)

BALANCE_KEYS: tuple[str, ...] = (
    "balance",
    "balance_due",
    "amount_due",
    "amountDue",
    "outstanding_balance",
    "outstandingBalance",
)

RecordLike = Union[BaseModel, Mapping[str, Any], None]


def _as_mapping(record: RecordLike) -> Mapping[str, Any]:
    if record is None:
        return {}
    if isinstance(record, BaseModel):
        return record.model_dump()
    return record


def first_numeric(
    record: RecordLike,
    keys: Sequence[str],
    accept: Optional[Callable[[float], bool]] = None,
) -> Optional[float]:
    """Value of the first key in ``keys`` that holds an acceptable number."""
    source = _as_mapping(record)
    for key in keys:
        if key not in source:
            continue
        value = safe_number(source[key], None)
        if value is None:
            continue
        if accept is None or accept(value):
            return value
    return None


def explicit_refund_amount(record: RecordLike) -> Optional[float]:
    """The unsigned refund figure the store reported, if it reported one."""
    value = first_numeric(record, REFUND_KEYS)
    return abs(value) if value is not None else None


def resolve_adjusted_amount(record: RecordLike) -> float:
    """Signed amount for a booking record.

    Order: explicit refund, then a negative balance, then the implied
    refund of a cancelled paid booking, then the booking total.
    """
    if record is None:
        return 0.0
    source = _as_mapping(record)

    refund = first_numeric(source, REFUND_KEYS)
    if refund:
        return -abs(refund)

    negative_balance = first_numeric(source, BALANCE_KEYS, accept=lambda v: v < 0)
    if negative_balance is not None:
        return negative_balance

    total = first_numeric(source, ("total_amount", "amount")) or 0.0
    paid_states = (PaymentStatus.PAID, PaymentStatus.REFUNDED)
    if (
        source.get("status") == BookingStatus.CANCELLED
        and source.get("payment_status") in paid_states
        and total > 0
    ):
        return -total
    return total
