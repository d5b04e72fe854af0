"""
Availability view loading.

In production the fetcher calls ``GET /fields/{id}/availability``. If that
call fails the view falls back to a fully open grid at the default rate
and carries a warning instead of raising; the booking store re-validates
availability when the booking is created.
"""

from datetime import datetime
from typing import Any, Awaitable, Callable, Mapping, Optional

from fieldbook.config import settings
from fieldbook.logging_context import get_request_logger
from fieldbook.scheduling.availability import merge_availability
from fieldbook.scheduling.calendar import DateLike, OperatingHoursCalendar, default_calendar
from fieldbook.scheduling.slots import generate_hourly_slots
from fieldbook.scheduling.windows import find_contiguous_windows
from fieldbook.schemas.availability_schema import (
    AvailabilityFeed,
    AvailabilityView,
    ContiguousWindow,
    FeedField,
    FeedSlot,
)
from fieldbook.utils import parse_date

logger = get_request_logger(__name__)

AvailabilityFetcher = Callable[[int, str, int], Awaitable[Optional[Mapping[str, Any]]]]


def fallback_feed(
    field_id: int, day: DateLike, calendar: Optional[OperatingHoursCalendar] = None
) -> AvailabilityFeed:
    """Every operating hour open at the default rate."""
    rate = settings.scheduling.default_hourly_rate
    return AvailabilityFeed(
        field=FeedField(id=field_id, hourly_rate=rate),
        slots=[
            FeedSlot(start_time=slot.start, end_time=slot.end, available=True, price=rate)
            for slot in generate_hourly_slots(day, calendar)
        ],
    )


async def load_availability_view(
    field_id: int,
    day: DateLike,
    fetch: Optional[AvailabilityFetcher] = None,
    duration: int = 1,
    now: Optional[datetime] = None,
    calendar: Optional[OperatingHoursCalendar] = None,
) -> AvailabilityView:
    """Fetch, normalize and merge availability for one field and date.

    Never raises for upstream problems: a failed fetch yields the open
    fallback grid with ``warning`` set.
    """
    calendar = calendar or default_calendar
    parsed = parse_date(day)
    date_str = parsed.isoformat() if parsed else str(day)

    warning = None
    feed: Optional[AvailabilityFeed] = None
    if fetch is not None:
        try:
            feed = AvailabilityFeed.from_upstream(await fetch(field_id, date_str, duration))
        except Exception as exc:  # transport errors of any kind degrade to the fallback grid
            logger.warning(
                "Availability fetch failed for field %s on %s, using fallback: %s",
                field_id, date_str, exc,
            )
            warning = f"Live availability could not be loaded ({exc}); showing default hours."
            feed = fallback_feed(field_id, day, calendar)

    rate = settings.scheduling.default_hourly_rate
    if feed is not None and feed.field.hourly_rate > 0:
        rate = feed.field.hourly_rate

    return AvailabilityView(
        date=date_str,
        field_id=field_id,
        hourly_rate=rate,
        slots=merge_availability(day, feed, now=now, calendar=calendar),
        operating_hours_override=calendar.override_for(day),
        warning=warning,
    )


def bookable_windows(view: AvailabilityView, duration: int) -> list[ContiguousWindow]:
    return find_contiguous_windows(view.slots, duration, view.hourly_rate)
