"""
Contiguous window search and selection validation over a merged grid.

A window of N hours starting at slot i needs slots i..i+N-1 to exist, be
bookable (available, unblocked, not past) and follow each other without
gaps. Only windows covering exactly N × 60 minutes are returned.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from fieldbook.config import settings
from fieldbook.exceptions import SelectionError
from fieldbook.scheduling.pricing import window_cost
from fieldbook.schemas.availability_schema import AvailabilitySlot, ContiguousWindow
from fieldbook.utils import MINUTES_PER_HOUR, normalize_time_hm, time_to_minutes

logger = logging.getLogger(__name__)


class SelectionReason(str, Enum):
    """Why a selected start time cannot host the requested duration."""
    NOT_FOUND = "not_found"
    BLOCKED = "blocked"
    PAST = "past"
    UNAVAILABLE = "unavailable"
    TOO_SHORT = "too_short"


@dataclass
class SelectionCheck:
    """Outcome of validating a selected start time."""
    passed: bool
    reason: Optional[SelectionReason] = None
    message: Optional[str] = None


def _validate_duration(duration: int) -> int:
    if (
        isinstance(duration, bool)
        or not isinstance(duration, (int, float))
        or not math.isfinite(duration)
        or int(duration) != duration
        or duration < 1
    ):
        raise ValueError(f"Duration must be a whole number of hours >= 1, got {duration!r}")
    return int(duration)


def _slot_minutes(slot: AvailabilitySlot) -> Optional[tuple[int, int]]:
    start = time_to_minutes(slot.start)
    end = time_to_minutes(slot.end)
    if start is None or end is None or end <= start:
        return None
    return start, end


def _run_failure(
    slots: Sequence[AvailabilitySlot], index: int, duration: int
) -> Optional[SelectionReason]:
    """First reason the run ``slots[index:index + duration]`` is not bookable, or None."""
    covered = 0
    previous_end: Optional[int] = None
    for offset in range(duration):
        if index + offset >= len(slots):
            return SelectionReason.TOO_SHORT
        slot = slots[index + offset]
        if slot.blocked:
            return SelectionReason.BLOCKED
        if slot.past:
            return SelectionReason.PAST
        if not slot.available:
            return SelectionReason.UNAVAILABLE
        bounds = _slot_minutes(slot)
        if bounds is None or (previous_end is not None and bounds[0] != previous_end):
            return SelectionReason.TOO_SHORT
        covered += bounds[1] - bounds[0]
        previous_end = bounds[1]
    if covered != duration * MINUTES_PER_HOUR:
        return SelectionReason.TOO_SHORT
    return None


def _build_window(
    slots: Sequence[AvailabilitySlot], index: int, duration: int, hourly_rate: float
) -> ContiguousWindow:
    run = slots[index:index + duration]
    return ContiguousWindow(
        start=run[0].start,
        end=run[-1].end,
        price=window_cost([s.price for s in run], hourly_rate, duration),
        duration_hours=duration,
    )


def find_contiguous_windows(
    slots: Sequence[AvailabilitySlot],
    duration: int,
    hourly_rate: Optional[float] = None,
) -> list[ContiguousWindow]:
    """Every bookable window of ``duration`` hours, sorted by start time.

    Args:
        slots: Merged grid from ``merge_availability``.
        duration: Requested whole hours (>= 1).
        hourly_rate: Flat rate used when a segment has no explicit price.

    Raises:
        ValueError: If ``duration`` is not a whole number >= 1.
    """
    duration = _validate_duration(duration)
    rate = settings.scheduling.default_hourly_rate if hourly_rate is None else hourly_rate

    windows: dict[tuple[str, str], ContiguousWindow] = {}
    for index in range(len(slots)):
        if _run_failure(slots, index, duration) is not None:
            continue
        window = _build_window(slots, index, duration, rate)
        windows.setdefault((window.start, window.end), window)

    ordered = sorted(windows.values(), key=lambda w: time_to_minutes(w.start) or 0)
    logger.debug("Found %d windows of %dh across %d slots", len(ordered), duration, len(slots))
    return ordered


def check_selection(
    slots: Sequence[AvailabilitySlot], start: str, duration: int
) -> SelectionCheck:
    """Validate a selected start time, naming the first reason it cannot be booked."""
    duration = _validate_duration(duration)
    normalized = normalize_time_hm(start)
    index = next((i for i, s in enumerate(slots) if s.start == normalized), None)
    if index is None:
        return SelectionCheck(
            passed=False,
            reason=SelectionReason.NOT_FOUND,
            message=f"{start or 'That time'} is outside operating hours.",
        )

    reason = _run_failure(slots, index, duration)
    if reason is None:
        return SelectionCheck(passed=True)

    end_index = min(index + duration, len(slots)) - 1
    label = f"Cannot book {normalized}-{slots[end_index].end}: "
    details = {
        SelectionReason.BLOCKED: "slot is blocked for maintenance",
        SelectionReason.PAST: "time has already passed",
        SelectionReason.UNAVAILABLE: "slot is unavailable",
        SelectionReason.TOO_SHORT: f"not enough consecutive time for {duration}h",
    }
    return SelectionCheck(passed=False, reason=reason, message=label + details[reason])


def select_window(
    slots: Sequence[AvailabilitySlot],
    start: str,
    duration: int,
    hourly_rate: Optional[float] = None,
) -> ContiguousWindow:
    """Return the window starting at ``start``.

    Raises:
        SelectionError: With the specific reason the window cannot be booked.
    """
    check = check_selection(slots, start, duration)
    if not check.passed:
        raise SelectionError(check.reason.value, check.message or "Selection is not bookable.")
    rate = settings.scheduling.default_hourly_rate if hourly_rate is None else hourly_rate
    index = next(i for i, s in enumerate(slots) if s.start == normalize_time_hm(start))
    return _build_window(slots, index, int(duration), rate)
