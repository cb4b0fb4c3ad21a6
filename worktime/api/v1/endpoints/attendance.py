"""
Check-in / check-out endpoints.

Each call validates the employee, runs the pure transition from
``worktime.engine.transitions`` and persists the result through the store.
"""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException

from worktime.api.v1.deps import get_now, get_store
from worktime.core.exceptions import EmployeeNotFound
from worktime.engine import transitions
from worktime.engine.domain import EmployeeProfile
from worktime.engine.session_window import candidate_dates, find_open_record
from worktime.schemas.attendance import (AttendanceRecordRead, CheckInRequest,
                                         CheckOutRequest)
from worktime.store.base import AttendanceStore

router = APIRouter(prefix="/attendance", tags=["attendance"])
logger = logging.getLogger(__name__)


async def _active_employee(store: AttendanceStore, employee_id: int) -> EmployeeProfile:
    employee = await store.get_employee(employee_id)
    if employee is None:
        raise EmployeeNotFound(employee_id)
    if not employee.is_active:
        raise HTTPException(status_code=403, detail="Employee account is deactivated")
    return employee


@router.post("/check-in", response_model=AttendanceRecordRead, status_code=201)
async def check_in(
    body: CheckInRequest,
    store: AttendanceStore = Depends(get_store),
    now: datetime = Depends(get_now),
) -> AttendanceRecordRead:
    """Open today's record (tomorrow's for evening night-shift starts)."""
    employee = await _active_employee(store, body.employee_id)

    existing = await store.find_records(
        employee.id, candidate_dates(transitions.business_date(now))
    )
    try:
        entry = transitions.check_in(
            employee.id,
            now,
            existing=existing,
            scheduled_check_in=body.scheduled_check_in,
            scheduled_check_out=body.scheduled_check_out,
            break_time=body.break_time,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    stored = await store.add_record(entry)
    logger.info(
        "Check-in %s for employee %s (%s, night=%s)",
        stored.check_in,
        employee.id,
        stored.status,
        stored.is_night_shift,
    )
    return AttendanceRecordRead.model_validate(stored)


@router.post("/check-out", response_model=AttendanceRecordRead)
async def check_out(
    body: CheckOutRequest,
    store: AttendanceStore = Depends(get_store),
    now: datetime = Depends(get_now),
) -> AttendanceRecordRead:
    """Close the employee's open record, wherever its business date falls."""
    employee = await _active_employee(store, body.employee_id)

    entry = await find_open_record(store, employee.id, now.date())
    closed = await store.close_record(transitions.check_out(entry, now))
    logger.info("Check-out %s for employee %s (%s)", closed.check_out, employee.id, closed.status)
    return AttendanceRecordRead.model_validate(closed)


@router.get("/open/{employee_id}", response_model=AttendanceRecordRead)
async def open_record(
    employee_id: int,
    store: AttendanceStore = Depends(get_store),
    now: datetime = Depends(get_now),
) -> AttendanceRecordRead:
    """Return the employee's currently open record."""
    await _active_employee(store, employee_id)
    entry = await find_open_record(store, employee_id, now.date())
    if entry is None:
        raise HTTPException(status_code=404, detail="No open attendance record")
    return AttendanceRecordRead.model_validate(entry)
