"""
Open-record lookup across adjacent business dates.

Night shifts are filed under the following day and may run past
midnight, so an employee's open record can sit on yesterday's, today's
or tomorrow's date.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from worktime.engine.domain import AttendanceEntry
from worktime.store.base import AttendanceStore


def candidate_dates(today: date) -> tuple[date, date, date]:
    return today - timedelta(days=1), today, today + timedelta(days=1)


def pick_open_record(entries: list[AttendanceEntry]) -> Optional[AttendanceEntry]:
    """Latest business date wins if more than one record is open."""
    open_entries = [e for e in entries if e.is_open]
    if not open_entries:
        return None
    return max(open_entries, key=lambda e: e.date)


async def find_open_record(
    store: AttendanceStore,
    employee_id: int,
    today: date,
) -> Optional[AttendanceEntry]:
    entries = await store.find_records(employee_id, candidate_dates(today))
    return pick_open_record(entries)
