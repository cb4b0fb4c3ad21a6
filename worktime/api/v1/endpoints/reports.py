"""
Payroll report endpoints + health check.

The heavy lifting lives in ``worktime.engine.aggregator``; these routes
only validate the month, resolve dependencies and shape the output.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from worktime.api.v1.deps import get_db, get_holiday_cache, get_store
from worktime.engine.aggregator import FacilityReport, aggregate_facility
from worktime.engine.holidays import HolidayCache
from worktime.schemas.report import (MONTH_PATTERN, HealthResponse,
                                     PayrollReportResponse)
from worktime.store.base import AttendanceStore

router = APIRouter(tags=["reports"])
logger = logging.getLogger(__name__)

CSV_COLUMNS = (
    "employee_id",
    "employee_code",
    "name",
    "facility",
    "category",
    "salary_type",
    "period_start",
    "period_end",
    "total_hours",
    "holiday_hours",
    "weekday_hours",
    "early_hours",
    "late_hours",
    "day_hours",
    "total_work_days",
    "night_shift_count",
    "night_shift_hours",
)


def _csv_cell(value: object) -> str:
    text = "" if value is None else str(value)
    if any(ch in text for ch in ',"\n'):
        text = '"' + text.replace('"', '""') + '"'
    return text


# ── Payroll Report ─────────────────────────────────────────────────
@router.get("/reports/payroll/{facility_id}", response_model=PayrollReportResponse)
async def payroll_report(
    facility_id: int,
    month: str = Query(..., pattern=MONTH_PATTERN),
    store: AttendanceStore = Depends(get_store),
    holidays: HolidayCache = Depends(get_holiday_cache),
) -> FacilityReport:
    """Work-hour buckets per employee for each employee's own pay period."""
    return await aggregate_facility(store, holidays, facility_id, month)


# ── Payroll CSV ────────────────────────────────────────────────────
@router.get("/reports/payroll/{facility_id}/csv")
async def payroll_csv(
    facility_id: int,
    month: str = Query(..., pattern=MONTH_PATTERN),
    store: AttendanceStore = Depends(get_store),
    holidays: HolidayCache = Depends(get_holiday_cache),
) -> StreamingResponse:
    """Export the payroll report as a CSV file download."""
    report = await aggregate_facility(store, holidays, facility_id, month)

    def iter_csv():
        yield ",".join(CSV_COLUMNS) + "\n"
        for row in report.employees:
            yield ",".join(_csv_cell(getattr(row, col)) for col in CSV_COLUMNS) + "\n"

    return StreamingResponse(
        iter_csv(),
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename=payroll_{facility_id}_{month}.csv"
        },
    )


# ── Health (PUBLIC) ─────────────────────────────────────────────────
@router.get("/health", response_model=HealthResponse)
async def health(
    db: AsyncSession = Depends(get_db),
    holidays: HolidayCache = Depends(get_holiday_cache),
) -> HealthResponse:
    """Database connectivity and the years currently held by the holiday cache."""
    db_ok = False
    try:
        await db.execute(select(1))
        db_ok = True
    except Exception as e:
        logger.error("Health check DB failure: %s", e)

    return HealthResponse(db=db_ok, cached_holiday_years=holidays.cached_years())
