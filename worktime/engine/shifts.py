"""
Interval adjustment and shift-window classification.

Worked time is credited against three fixed daily windows (minutes since
midnight): early 07:00–09:00, day 09:00–18:00 and late 18:00–20:00.
Anything outside those windows earns no bucket credit. A record scheduled
16:30 → 09:30 is a night shift and is paid as a fixed block instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from worktime.engine.time_rounding import (clock_minutes, clock_seconds,
                                           round_down_to_nearest_half_hour,
                                           round_to_nearest_half_hour,
                                           round_up_to_nearest_half_hour)

MINUTES_PER_DAY = 1440
STEP_MINUTES = 30

EARLY_WINDOW = (420, 540)
DAY_WINDOW = (540, 1080)
LATE_WINDOW = (1080, 1200)

NIGHT_SHIFT_START = "16:30"
NIGHT_SHIFT_END = "09:30"
NIGHT_SHIFT_HOURS = 14.0

HOLIDAY_CAP_MINUTES = 8 * 60


@dataclass(frozen=True)
class AdjustedInterval:
    check_in: str
    check_out: str
    # Half-hour aligned bounds used for window classification
    start_minute: int
    end_minute: int
    # Un-rounded length of the adjusted interval
    duration_minutes: int


@dataclass(frozen=True)
class ShiftBuckets:
    early_minutes: int = 0
    late_minutes: int = 0
    day_minutes: int = 0

    @property
    def early_hours(self) -> float:
        return self.early_minutes / 60

    @property
    def late_hours(self) -> float:
        return self.late_minutes / 60

    @property
    def day_hours(self) -> float:
        return self.day_minutes / 60

    @property
    def total_minutes(self) -> int:
        return self.early_minutes + self.late_minutes + self.day_minutes


def _span(start: int, end: int) -> tuple[int, int]:
    if end <= start:
        end += MINUTES_PER_DAY
    return start, end


def break_minutes(break_time: Optional[str]) -> int:
    if not break_time:
        return 0
    return clock_minutes(break_time)


def adjust_interval(
    actual_in: str,
    actual_out: str,
    scheduled_in: Optional[str] = None,
    scheduled_out: Optional[str] = None,
) -> AdjustedInterval:
    """Clamp an actual interval against its schedule.

    Late arrival is rounded up, early arrival is not credited beyond the
    schedule, and staying past the scheduled end is rounded down.
    """
    check_in = actual_in
    if scheduled_in:
        actual, planned = clock_seconds(actual_in), clock_seconds(scheduled_in)
        if actual > planned:
            check_in = round_up_to_nearest_half_hour(actual_in)
        elif actual < planned:
            check_in = scheduled_in

    check_out = actual_out
    if scheduled_out and clock_seconds(actual_out) > clock_seconds(scheduled_out):
        check_out = round_down_to_nearest_half_hour(actual_out)

    start, end = _span(
        clock_minutes(round_to_nearest_half_hour(check_in)),
        clock_minutes(round_to_nearest_half_hour(check_out)),
    )
    raw_start, raw_end = _span(clock_minutes(check_in), clock_minutes(check_out))

    return AdjustedInterval(
        check_in=check_in,
        check_out=check_out,
        start_minute=start,
        end_minute=end,
        duration_minutes=raw_end - raw_start,
    )


def calculate_work_hours(
    actual_in: str,
    actual_out: str,
    scheduled_in: Optional[str] = None,
    scheduled_out: Optional[str] = None,
    break_time: Optional[str] = None,
) -> float:
    """Net hours of the adjusted interval after the break, never negative."""
    interval = adjust_interval(actual_in, actual_out, scheduled_in, scheduled_out)
    return max(0, interval.duration_minutes - break_minutes(break_time)) / 60


def is_night_shift(
    actual_in: Optional[str],
    actual_out: Optional[str],
    scheduled_in: Optional[str] = None,
    scheduled_out: Optional[str] = None,
) -> bool:
    """Scheduled times win over actual ones; both ends are rounded first."""
    start = scheduled_in or actual_in
    end = scheduled_out or actual_out
    if not start or not end:
        return False
    return (
        round_to_nearest_half_hour(start) == NIGHT_SHIFT_START
        and round_to_nearest_half_hour(end) == NIGHT_SHIFT_END
    )


def _window_for(minute: int) -> Optional[str]:
    minute %= MINUTES_PER_DAY
    for name, (lo, hi) in (
        ("early", EARLY_WINDOW),
        ("day", DAY_WINDOW),
        ("late", LATE_WINDOW),
    ):
        if lo <= minute < hi:
            return name
    return None


def classify_shift(
    interval: AdjustedInterval,
    break_mins: int = 0,
    *,
    is_holiday: bool = False,
    special_company: bool = False,
) -> ShiftBuckets:
    """Split an adjusted interval into early / day / late minutes."""
    if special_company:
        day = max(0, interval.end_minute - interval.start_minute - break_mins)
        if is_holiday and day >= HOLIDAY_CAP_MINUTES:
            day = HOLIDAY_CAP_MINUTES
        return ShiftBuckets(day_minutes=day)

    totals = {"early": 0, "day": 0, "late": 0}
    minute = interval.start_minute
    while minute < interval.end_minute:
        segment = min(STEP_MINUTES, interval.end_minute - minute)
        window = _window_for(minute)
        if window is not None:
            totals[window] += segment
        minute += STEP_MINUTES

    early, late = totals["early"], totals["late"]
    day = max(0, totals["day"] - break_mins)

    if is_holiday and early + late + day >= HOLIDAY_CAP_MINUTES:
        day = max(0, HOLIDAY_CAP_MINUTES - early - late)

    return ShiftBuckets(early_minutes=early, late_minutes=late, day_minutes=day)
