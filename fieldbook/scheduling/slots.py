"""Canonical hourly grid generation."""

from typing import Optional

from fieldbook.scheduling.calendar import DateLike, OperatingHoursCalendar, default_calendar
from fieldbook.schemas.availability_schema import HourSlot
from fieldbook.utils import pad


def generate_hourly_slots(
    day: DateLike, calendar: Optional[OperatingHoursCalendar] = None
) -> list[HourSlot]:
    """Return one HourSlot per operating hour, in order, with no gaps or overlaps."""
    hours = (calendar or default_calendar).hours_for(day)
    return [
        HourSlot(start=f"{pad(h)}:00", end=f"{pad(h + 1)}:00")
        for h in range(hours.start_hour, hours.end_hour)
    ]
