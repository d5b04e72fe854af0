"""
Availability merging onto the canonical hourly grid.

Upstream ranges can span several hours and need not start or end on the
hour. Each range is cut into hour-aligned segments (start floored, end
ceiled) keyed ``"HH:MM-HH:MM"``, and those keys are looked up for every
canonical slot. Missing data means open; a block always wins.

Usage:
    slots = merge_availability(date(2025, 12, 27), feed)
    open_slots = [s for s in slots if s.bookable]
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from fieldbook.scheduling.calendar import DateLike, OperatingHoursCalendar
from fieldbook.scheduling.slots import generate_hourly_slots
from fieldbook.schemas.availability_schema import AvailabilityFeed, AvailabilitySlot
from fieldbook.utils import (
    MINUTES_PER_HOUR,
    minutes_to_hm,
    parse_date,
    time_to_minutes,
)

logger = logging.getLogger(__name__)

FeedLike = Union[AvailabilityFeed, Mapping[str, Any], None]


@dataclass
class _Block:
    status: str
    reason: Optional[str]


@dataclass
class _Availability:
    available: bool
    price: Optional[float]


def segment_range(start_time: Any, end_time: Any) -> list[str]:
    """Split ``[start, end)`` into hour-aligned segment keys.

    Returns an empty list for unparseable or empty ranges.

    Examples:
        >>> segment_range("12:00", "14:00")
        ['12:00-13:00', '13:00-14:00']
        >>> segment_range("12:30", "13:15")
        ['12:00-13:00', '13:00-14:00']
    """
    start = time_to_minutes(start_time)
    end = time_to_minutes(end_time)
    if start is None or end is None or end <= start:
        return []

    first_hour = start // MINUTES_PER_HOUR
    last_hour = -(-end // MINUTES_PER_HOUR)
    return [
        f"{minutes_to_hm(h * MINUTES_PER_HOUR)}-{minutes_to_hm((h + 1) * MINUTES_PER_HOUR)}"
        for h in range(first_hour, last_hour)
    ]


def _build_blocked_map(feed: AvailabilityFeed) -> dict[str, _Block]:
    blocked: dict[str, _Block] = {}
    for entry in feed.blocked_slots:
        for key in segment_range(entry.start_time, entry.end_time):
            blocked[key] = _Block(status=entry.status, reason=entry.reason)
    return blocked


def _build_availability_map(feed: AvailabilityFeed) -> dict[str, _Availability]:
    availability: dict[str, _Availability] = {}
    for entry in feed.slots:
        for key in segment_range(entry.start_time, entry.end_time):
            existing = availability.get(key)
            if existing is None:
                availability[key] = _Availability(entry.available, entry.price)
                continue
            existing.available = existing.available and entry.available
            if entry.price is not None:
                existing.price = entry.price
    return availability


def merge_availability(
    day: DateLike,
    feed: FeedLike = None,
    now: Optional[datetime] = None,
    calendar: Optional[OperatingHoursCalendar] = None,
) -> list[AvailabilitySlot]:
    """Overlay upstream availability and blocks onto the canonical grid for ``day``.

    Args:
        day: The calendar date being viewed.
        feed: Upstream payload, raw or already normalized. None means fully open.
        now: Reference time for marking elapsed slots on the current date.
        calendar: Operating-hours calendar; defaults to the configured one.

    Returns:
        Exactly one AvailabilitySlot per canonical slot, in grid order.
    """
    if feed is not None and not isinstance(feed, AvailabilityFeed):
        feed = AvailabilityFeed.from_upstream(feed)

    blocked = _build_blocked_map(feed) if feed is not None else {}
    availability = _build_availability_map(feed) if feed is not None else {}

    merged = []
    for slot in generate_hourly_slots(day, calendar):
        avail = availability.get(slot.key)
        block = blocked.get(slot.key)
        merged.append(AvailabilitySlot(
            start=slot.start,
            end=slot.end,
            available=avail.available if avail else True,
            blocked=block is not None,
            block_reason=block.reason if block else None,
            block_status=block.status if block else None,
            price=avail.price if avail else None,
        ))

    merged = mark_past_slots(day, merged, now)
    logger.debug(
        "Merged %d slots for %s (%d blocked, %d unavailable)",
        len(merged), day,
        sum(1 for s in merged if s.blocked),
        sum(1 for s in merged if not s.available),
    )
    return merged


def mark_past_slots(
    day: DateLike, slots: list[AvailabilitySlot], now: Optional[datetime] = None
) -> list[AvailabilitySlot]:
    """Mark slots that have already started as past; only applies when ``day`` is today."""
    now = now or datetime.now()
    parsed = parse_date(day)
    if parsed is None or parsed != now.date():
        return slots

    now_minutes = now.hour * MINUTES_PER_HOUR + now.minute
    adjusted = []
    for slot in slots:
        start = time_to_minutes(slot.start)
        in_past = start is not None and start <= now_minutes
        update = {"available": False, "past": True} if in_past else {"past": False}
        adjusted.append(slot.model_copy(update=update))
    return adjusted
