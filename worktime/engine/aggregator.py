"""
Per-facility payroll aggregation.

For every active employee of a facility, resolves the employee's own pay
period, classifies each closed attendance record into shift buckets and
sums the results into one summary row per employee.

Records are loaded with **one** store query spanning the union of all
employees' periods, then filtered per employee in Python.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date

from worktime.core.config import settings
from worktime.core.exceptions import (AggregationError, FacilityNotFound,
                                      RecordStoreError)
from worktime.engine.domain import AttendanceEntry, EmployeeProfile
from worktime.engine.holidays import HolidayCache, HolidayCalendar, years_around
from worktime.engine.pay_period import (PayPeriod, parse_year_month,
                                        resolve_pay_period)
from worktime.engine.shifts import (NIGHT_SHIFT_HOURS, adjust_interval,
                                    break_minutes, classify_shift,
                                    is_night_shift)
from worktime.store.base import AttendanceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmployeeSummary:
    employee_id: int
    employee_code: str | None
    name: str
    facility: str | None
    category: str | None
    salary_type: str
    period_start: date
    period_end: date
    total_hours: float = 0.0
    holiday_hours: float = 0.0
    weekday_hours: float = 0.0
    early_hours: float = 0.0
    late_hours: float = 0.0
    day_hours: float = 0.0
    total_work_days: int = 0
    night_shift_count: int = 0
    night_shift_hours: float = 0.0


@dataclass(frozen=True)
class FacilityReport:
    facility_id: int
    facility_name: str
    month: str
    special_company: bool
    employees: list[EmployeeSummary]


class _Totals:
    def __init__(self):
        self.total_hours = 0.0
        self.holiday_hours = 0.0
        self.weekday_hours = 0.0
        self.early_hours = 0.0
        self.late_hours = 0.0
        self.day_hours = 0.0
        self.work_days = 0
        self.night_shifts = 0


def summarize_employee(
    employee: EmployeeProfile,
    period: PayPeriod,
    records: list[AttendanceEntry],
    calendar: HolidayCalendar,
    *,
    special_company: bool,
) -> EmployeeSummary:
    """Fold one employee's records for ``period`` into a summary row."""
    t = _Totals()

    for rec in records:
        if rec.employee_id != employee.id or rec.date not in period:
            continue
        if not rec.check_in or not rec.check_out:
            continue

        try:
            holiday = calendar.is_holiday(rec.date)

            if is_night_shift(
                rec.check_in,
                rec.check_out,
                rec.scheduled_check_in,
                rec.scheduled_check_out,
            ):
                t.night_shifts += 1
                t.work_days += 1
                t.total_hours += NIGHT_SHIFT_HOURS
                continue

            interval = adjust_interval(
                rec.check_in,
                rec.check_out,
                rec.scheduled_check_in,
                rec.scheduled_check_out,
            )
            brk = break_minutes(rec.break_time)
        except ValueError as exc:
            logger.debug("Skipping malformed record %s of employee %s: %s", rec.id, employee.id, exc)
            continue

        net_hours = max(0, interval.duration_minutes - brk) / 60
        buckets = classify_shift(
            interval,
            brk,
            is_holiday=holiday,
            special_company=special_company,
        )

        t.work_days += 1
        t.early_hours += buckets.early_hours
        t.late_hours += buckets.late_hours
        t.day_hours += buckets.day_hours

        if holiday and not special_company:
            t.holiday_hours += buckets.day_hours
            t.total_hours += buckets.day_hours
        else:
            t.weekday_hours += net_hours
            t.total_hours += net_hours

    return EmployeeSummary(
        employee_id=employee.id,
        employee_code=employee.employee_code,
        name=employee.name,
        facility=employee.facility_name,
        category=employee.category,
        salary_type=employee.salary_type,
        period_start=period.start,
        period_end=period.end,
        total_hours=round(t.total_hours, 2),
        holiday_hours=round(t.holiday_hours, 2),
        weekday_hours=round(t.weekday_hours, 2),
        early_hours=round(t.early_hours, 2),
        late_hours=round(t.late_hours, 2),
        day_hours=round(t.day_hours, 2),
        total_work_days=t.work_days,
        night_shift_count=t.night_shifts,
        night_shift_hours=round(t.night_shifts * NIGHT_SHIFT_HOURS, 2),
    )


async def aggregate_facility(
    store: AttendanceStore,
    holidays: HolidayCache,
    facility_id: int,
    month: str,
    *,
    special_scope: str | None = None,
) -> FacilityReport:
    """Build the payroll report of one facility for the ``YYYY-MM`` month."""
    year, _ = parse_year_month(month)
    scope = special_scope or settings.SPECIAL_COMPANY_SCOPE

    try:
        facility = await store.get_facility(facility_id)
        if facility is None:
            raise FacilityNotFound(facility_id)
        employees = await store.list_facility_employees(facility_id)

        periods = {emp.id: resolve_pay_period(emp.cutoff_type, month) for emp in employees}
        records: list[AttendanceEntry] = []
        if periods:
            records = await store.list_attendance(
                periods.keys(),
                min(p.start for p in periods.values()),
                max(p.end for p in periods.values()),
            )
    except RecordStoreError as exc:
        raise AggregationError(f"Could not aggregate facility {facility_id} for {month}") from exc

    facility_special = any(emp.company_special for emp in employees)
    calendar = await holidays.calendar_for(years_around(year))

    by_employee: dict[int, list[AttendanceEntry]] = defaultdict(list)
    for rec in records:
        by_employee[rec.employee_id].append(rec)

    summaries = [
        summarize_employee(
            emp,
            periods[emp.id],
            by_employee.get(emp.id, []),
            calendar,
            special_company=emp.company_special if scope == "employee" else facility_special,
        )
        for emp in employees
    ]

    logger.info(
        "Aggregated %d employees of facility %s for %s (%d records)",
        len(summaries),
        facility_id,
        month,
        len(records),
    )
    return FacilityReport(
        facility_id=facility.id,
        facility_name=facility.name,
        month=month,
        special_company=facility_special,
        employees=summaries,
    )
