from fieldbook.scheduling.availability import merge_availability, segment_range
from fieldbook.scheduling.calendar import (
    OperatingHours,
    OperatingHoursCalendar,
    get_operating_hours,
    operating_hours_override,
)
from fieldbook.scheduling.pricing import compute_booking_cost, window_cost
from fieldbook.scheduling.slots import generate_hourly_slots
from fieldbook.scheduling.windows import (
    SelectionCheck,
    SelectionReason,
    check_selection,
    find_contiguous_windows,
    select_window,
)

__all__ = [
    "OperatingHoursCalendar",
    "OperatingHours",
    "get_operating_hours",
    "operating_hours_override",
    "generate_hourly_slots",
    "merge_availability",
    "segment_range",
    "find_contiguous_windows",
    "check_selection",
    "select_window",
    "SelectionCheck",
    "SelectionReason",
    "compute_booking_cost",
    "window_cost",
]
