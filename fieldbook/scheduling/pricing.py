"""Booking cost calculation."""

from typing import Optional, Sequence

# Amounts are kept to the unit of account's cents.
PRICE_PRECISION = 2


def compute_booking_cost(hourly_rate: float, hours: float) -> float:
    """Flat cost: ``hourly_rate × hours``.

    >>> compute_booking_cost(400, 2)
    800.0
    """
    return round(float(hourly_rate) * float(hours), PRICE_PRECISION)


def window_cost(
    segment_prices: Sequence[Optional[float]], hourly_rate: float, hours: int
) -> float:
    """Sum per-segment prices, or fall back to the flat rate if any segment lacks one."""
    if segment_prices and all(price is not None for price in segment_prices):
        return round(sum(segment_prices), PRICE_PRECISION)  # type: ignore[arg-type]
    return compute_booking_cost(hourly_rate, hours)
