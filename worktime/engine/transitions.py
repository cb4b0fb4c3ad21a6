"""
Check-in / check-out state transitions.

A record moves OPEN (check-in set) → CLOSED (check-out and final status
set) exactly once. Both transitions are pure: they validate the current
state and return a new ``AttendanceEntry``.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from worktime.core.exceptions import (AlreadyCheckedIn, AlreadyCheckedOut,
                                      NotCheckedIn)
from worktime.engine.domain import (STATUS_EARLY_LEAVE, STATUS_LATE,
                                    STATUS_PRESENT, AttendanceEntry)
from worktime.engine.session_window import pick_open_record
from worktime.engine.time_rounding import (clock_minutes, clock_seconds,
                                           parse_clock)

NIGHT_START_HOUR = 18
NIGHT_END_HOUR = 6

DAY_LATE_AFTER = "09:00"
NIGHT_LATE_AFTER = "20:00"
DAY_EARLY_LEAVE_BEFORE_HOUR = 18


def _clock(moment: datetime) -> str:
    return moment.strftime("%H:%M:%S")


def _optional_clock(value: Optional[str], field: str) -> Optional[str]:
    if value is None or value == "":
        return None
    try:
        parse_clock(value)
    except ValueError as exc:
        raise ValueError(f"{field} must be HH:MM or HH:MM:SS") from exc
    return value.strip()


def is_night_check_in(moment: datetime) -> bool:
    return moment.hour >= NIGHT_START_HOUR or moment.hour < NIGHT_END_HOUR


def business_date(moment: datetime) -> date:
    """Evening check-ins are filed under the following day."""
    if moment.hour >= NIGHT_START_HOUR:
        return moment.date() + timedelta(days=1)
    return moment.date()


def check_in_status(moment: datetime, scheduled_in: Optional[str], night: bool) -> str:
    if scheduled_in:
        late = clock_seconds(_clock(moment)) > clock_seconds(scheduled_in)
    else:
        # Default limits are whole minutes; seconds past the limit are forgiven
        limit = clock_minutes(NIGHT_LATE_AFTER if night else DAY_LATE_AFTER)
        late = moment.hour * 60 + moment.minute > limit
    return STATUS_LATE if late else STATUS_PRESENT


def check_in(
    employee_id: int,
    moment: datetime,
    *,
    existing: Iterable[AttendanceEntry] = (),
    scheduled_check_in: Optional[str] = None,
    scheduled_check_out: Optional[str] = None,
    break_time: Optional[str] = None,
) -> AttendanceEntry:
    """Open a new record for ``employee_id`` at ``moment``.

    ``existing`` holds the employee's records around the business date.
    """
    scheduled_check_in = _optional_clock(scheduled_check_in, "scheduled_check_in")
    scheduled_check_out = _optional_clock(scheduled_check_out, "scheduled_check_out")
    break_time = _optional_clock(break_time, "break_time")

    existing = list(existing)
    work_date = business_date(moment)
    if pick_open_record(existing) is not None:
        raise AlreadyCheckedIn(f"Employee {employee_id} is already checked in")
    if any(e.date == work_date for e in existing):
        raise AlreadyCheckedIn(f"Employee {employee_id} already has a record for {work_date}")

    night = is_night_check_in(moment)
    return AttendanceEntry(
        employee_id=employee_id,
        date=work_date,
        check_in=_clock(moment),
        check_out=None,
        scheduled_check_in=scheduled_check_in,
        scheduled_check_out=scheduled_check_out,
        break_time=break_time,
        is_night_shift=night,
        status=check_in_status(moment, scheduled_check_in, night),
    )


def check_out_status(entry: AttendanceEntry, moment: datetime) -> str:
    if entry.status != STATUS_PRESENT:
        return entry.status
    if entry.is_night_shift:
        early = moment.hour < NIGHT_END_HOUR
    elif entry.scheduled_check_out:
        early = clock_seconds(_clock(moment)) < clock_seconds(entry.scheduled_check_out)
    else:
        early = moment.hour < DAY_EARLY_LEAVE_BEFORE_HOUR
    return STATUS_EARLY_LEAVE if early else STATUS_PRESENT


def check_out(entry: Optional[AttendanceEntry], moment: datetime) -> AttendanceEntry:
    """Close ``entry`` at ``moment``."""
    if entry is None or not entry.check_in:
        raise NotCheckedIn("No check-in record found")
    if entry.check_out:
        raise AlreadyCheckedOut(f"Record for {entry.date} is already checked out")
    return entry.closed(_clock(moment), check_out_status(entry, moment))
