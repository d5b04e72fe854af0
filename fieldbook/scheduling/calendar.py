"""
Operating-hours calendar.

Weekends and configured public holidays open at 09:00; other days open at
16:00. Both close at 22:00. Hours and the holiday table come from
SchedulingConfig so another jurisdiction can swap them out.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from fieldbook.config import SchedulingConfig, settings
from fieldbook.schemas.availability_schema import OperatingHoursOverride
from fieldbook.utils import pad, parse_date

logger = logging.getLogger(__name__)

DateLike = Union[date, str, None]


@dataclass(frozen=True)
class OperatingHours:
    """Bookable hour range for a date; ``end_hour`` is exclusive."""
    start_hour: int
    end_hour: int

    @property
    def hours(self) -> int:
        return self.end_hour - self.start_hour


class OperatingHoursCalendar:
    """Resolves the bookable hour range for a calendar date."""

    def __init__(self, config: Optional[SchedulingConfig] = None) -> None:
        self.config = config or settings.scheduling
        self._holidays = frozenset(self.config.public_holidays)

    @property
    def weekday_hours(self) -> OperatingHours:
        return OperatingHours(self.config.weekday_start_hour, self.config.weekday_end_hour)

    @property
    def extended_hours(self) -> OperatingHours:
        return OperatingHours(self.config.weekend_start_hour, self.config.weekend_end_hour)

    def is_weekend(self, day: DateLike) -> bool:
        parsed = parse_date(day)
        return parsed is not None and parsed.weekday() >= 5

    def is_public_holiday(self, day: DateLike) -> bool:
        parsed = parse_date(day)
        if parsed is None:
            return False
        return f"{pad(parsed.month)}-{pad(parsed.day)}" in self._holidays

    def hours_for(self, day: DateLike) -> OperatingHours:
        """Return the operating window; unparseable dates get weekday hours."""
        if parse_date(day) is None:
            logger.debug("Unparseable date %r, using weekday hours", day)
            return self.weekday_hours
        if self.is_weekend(day) or self.is_public_holiday(day):
            return self.extended_hours
        return self.weekday_hours

    def override_for(self, day: DateLike) -> Optional[OperatingHoursOverride]:
        """The window to forward to the booking store when it differs from weekday hours."""
        hours = self.hours_for(day)
        if hours == self.weekday_hours:
            return None
        return OperatingHoursOverride(
            start=f"{pad(hours.start_hour)}:00",
            end=f"{pad(hours.end_hour)}:00",
        )


default_calendar = OperatingHoursCalendar()


def get_operating_hours(day: DateLike) -> OperatingHours:
    return default_calendar.hours_for(day)


def operating_hours_override(day: DateLike) -> Optional[OperatingHoursOverride]:
    return default_calendar.override_for(day)
