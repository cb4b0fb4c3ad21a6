"""
Immutable value objects the engine works on.

The record store converts ORM rows into these so that every calculation
in ``worktime.engine`` stays free of database sessions.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Optional

STATUS_PRESENT = "present"
STATUS_LATE = "late"
STATUS_EARLY_LEAVE = "early-leave"


@dataclass(frozen=True)
class AttendanceEntry:
    employee_id: int
    date: date
    check_in: Optional[str]
    check_out: Optional[str] = None
    scheduled_check_in: Optional[str] = None
    scheduled_check_out: Optional[str] = None
    break_time: Optional[str] = None
    is_night_shift: bool = False
    status: str = STATUS_PRESENT
    id: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return bool(self.check_in) and not self.check_out

    def closed(self, check_out: str, status: str) -> "AttendanceEntry":
        return replace(self, check_out=check_out, status=status)


@dataclass(frozen=True)
class EmployeeProfile:
    id: int
    name: str
    employee_code: Optional[str] = None
    category: Optional[str] = None
    salary_type: str = "hourly"
    cutoff_type: str = "20"
    facility_id: Optional[int] = None
    facility_name: Optional[str] = None
    company_special: bool = False
    is_active: bool = True


@dataclass(frozen=True)
class FacilityInfo:
    id: int
    name: str
