"""Pydantic schemas for the payroll report."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


# ── Payroll Report ─────────────────────────────────────────────────
class EmployeeSummaryRead(BaseModel):
    employee_id: int
    employee_code: str | None
    name: str
    facility: str | None
    category: str | None
    salary_type: str
    period_start: date
    period_end: date
    total_hours: float
    holiday_hours: float
    weekday_hours: float
    early_hours: float
    late_hours: float
    day_hours: float
    total_work_days: int
    night_shift_count: int
    night_shift_hours: float

    model_config = {"from_attributes": True}


class PayrollReportResponse(BaseModel):
    facility_id: int
    facility_name: str
    month: str
    special_company: bool
    employees: list[EmployeeSummaryRead]

    model_config = {"from_attributes": True}


# ── Health ─────────────────────────────────────────────────────────
class HealthResponse(BaseModel):
    db: bool
    cached_holiday_years: list[int]
