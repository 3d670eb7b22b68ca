from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from .domain import Shift, parse_clock_time, parse_iso_date


# ============= TIME RANGES =============

def minutes_since_midnight(value: Any) -> Optional[int]:
    """'HH:mm' (or a datetime.time) -> minutes after 00:00, None when invalid"""
    parsed = parse_clock_time(value)
    if parsed is None:
        return None
    return parsed.hour * 60 + parsed.minute


def minute_ranges_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    # Half-open ranges: touching at an endpoint is not an overlap
    if start_a >= end_a or start_b >= end_b:
        return False
    return start_a < end_b and end_a > start_b


def time_ranges_overlap(start_a, end_a, start_b, end_b) -> bool:
    minutes = [minutes_since_midnight(value) for value in (start_a, end_a, start_b, end_b)]
    if any(m is None for m in minutes):
        return False
    return minute_ranges_overlap(*minutes)


def date_ranges_overlap(start_a, end_a, start_b, end_b) -> bool:
    """Inclusive calendar-date overlap. Invalid or reversed ranges never overlap."""
    dates = [parse_iso_date(value) for value in (start_a, end_a, start_b, end_b)]
    if any(d is None for d in dates):
        return False
    start_a, end_a, start_b, end_b = dates
    if start_a > end_a or start_b > end_b:
        return False
    return start_a <= end_b and end_a >= start_b


def date_in_range(day: date, start: Optional[date], end: Optional[date]) -> bool:
    if start is None or end is None:
        return False
    return start <= day <= end


# ============= SHIFTS =============

# [start, end) in whole hours of the local clock
SHIFT_HOURS: Dict[Shift, Tuple[int, int]] = {
    Shift.MORNING: (6, 12),
    Shift.AFTERNOON: (12, 18),
    Shift.EVENING: (18, 24),
}

SHIFT_MINUTE_RANGES: Dict[Shift, Tuple[int, int]] = {
    shift: (start * 60, end * 60) for shift, (start, end) in SHIFT_HOURS.items()
}

# Hours before this belong to the previous day's evening shift
NIGHT_ROLLOVER_HOUR = 6


def shift_for_hour(hour: Optional[int]) -> Optional[Shift]:
    if hour is None:
        return None
    for shift, (start, end) in SHIFT_HOURS.items():
        if start <= hour < end:
            return shift
    return None


def effective_shift_and_date(now: datetime) -> Tuple[Optional[Shift], date]:
    """
    Shift and calendar date that "what is happening now" logic should use.

    Between midnight and 06:00 classes of the previous evening are still
    considered running, so the answer is (Noite, yesterday).
    """
    if 0 <= now.hour < NIGHT_ROLLOVER_HOUR:
        return Shift.EVENING, (now - timedelta(days=1)).date()
    return shift_for_hour(now.hour), now.date()


def clock_range_overlaps_shift(start, end, shift: Shift) -> bool:
    start_min = minutes_since_midnight(start)
    end_min = minutes_since_midnight(end)
    if start_min is None or end_min is None:
        return False
    shift_start, shift_end = SHIFT_MINUTE_RANGES[shift]
    return minute_ranges_overlap(start_min, end_min, shift_start, shift_end)


def shift_label(shift: Shift) -> str:
    start, end = SHIFT_HOURS[shift]
    return f"{shift.value} ({start:02d}:00-{end % 24:02d}:00)"
