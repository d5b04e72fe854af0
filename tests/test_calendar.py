"""Tests for operating hours and canonical slot generation."""

from dataclasses import replace
from datetime import date, timedelta

import pytest

from fieldbook.config import SchedulingConfig
from fieldbook.scheduling.calendar import (
    OperatingHours,
    OperatingHoursCalendar,
    get_operating_hours,
    operating_hours_override,
)
from fieldbook.scheduling.slots import generate_hourly_slots
from fieldbook.utils import time_to_minutes


class TestOperatingHours:
    def test_weekday_window(self, calendar):
        assert calendar.hours_for(date(2025, 12, 23)) == OperatingHours(16, 22)

    @pytest.mark.parametrize("day", [date(2025, 12, 27), date(2025, 12, 28)])
    def test_weekend_window(self, calendar, day):
        assert calendar.hours_for(day) == OperatingHours(9, 22)

    def test_public_holiday_on_weekday(self, calendar):
        # Christmas 2025 is a Thursday
        assert calendar.is_public_holiday(date(2025, 12, 25))
        assert calendar.hours_for(date(2025, 12, 25)) == OperatingHours(9, 22)

    def test_accepts_iso_strings(self, calendar):
        assert calendar.hours_for("2025-06-16") == OperatingHours(9, 22)
        assert calendar.hours_for("2025-06-17") == OperatingHours(16, 22)

    def test_invalid_date_defaults_to_weekday(self, calendar):
        assert calendar.hours_for("not-a-date") == OperatingHours(16, 22)
        assert calendar.hours_for(None) == OperatingHours(16, 22)
        assert not calendar.is_weekend("2025-13-45")

    def test_custom_holiday_table(self):
        config = replace(SchedulingConfig(), public_holidays=("07-04",))
        calendar = OperatingHoursCalendar(config)
        assert calendar.hours_for(date(2025, 7, 4)) == OperatingHours(9, 22)
        assert calendar.hours_for(date(2025, 12, 25)) == OperatingHours(16, 22)

    def test_module_level_helper(self):
        assert get_operating_hours(date(2025, 12, 27)).hours == 13


class TestOperatingHoursOverride:
    def test_none_on_regular_weekday(self, calendar):
        assert calendar.override_for("2025-12-23") is None

    def test_extended_window_on_weekend(self, calendar):
        override = calendar.override_for("2025-12-27")
        assert override is not None
        assert (override.start, override.end) == ("09:00", "22:00")

    def test_extended_window_on_holiday(self, calendar):
        override = calendar.override_for("2025-01-01")
        assert override.start == "09:00"

    def test_module_level_helper(self):
        assert operating_hours_override("2025-12-23") is None
        assert operating_hours_override(date(2025, 12, 27)).end == "22:00"


class TestSlotGenerator:
    def test_weekday_slots(self, calendar):
        slots = generate_hourly_slots(date(2025, 12, 23), calendar)
        assert [s.start for s in slots] == ["16:00", "17:00", "18:00", "19:00", "20:00", "21:00"]
        assert slots[-1].end == "22:00"

    def test_weekend_slot_count(self, calendar):
        assert len(generate_hourly_slots(date(2025, 12, 27), calendar)) == 13

    def test_contiguous_and_gap_free_for_every_day_of_year(self, calendar):
        day = date(2025, 1, 1)
        while day.year == 2025:
            hours = calendar.hours_for(day)
            slots = generate_hourly_slots(day, calendar)
            assert time_to_minutes(slots[0].start) == hours.start_hour * 60
            assert time_to_minutes(slots[-1].end) == hours.end_hour * 60
            for current, following in zip(slots, slots[1:]):
                assert current.end == following.start
            for slot in slots:
                assert time_to_minutes(slot.end) - time_to_minutes(slot.start) == 60
            day += timedelta(days=1)
