"""
Domain exceptions and the global exception handlers that map them to
JSON responses (prevents stack-trace leakage to clients).
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


# ── Domain errors ───────────────────────────────────────────────────
class WorktimeError(Exception):
    """Base class for every error raised by the worktime engine."""


class RecordStoreError(WorktimeError):
    """The record store could not be read or written."""


class AggregationError(WorktimeError):
    """A payroll aggregation could not be completed."""


class FacilityNotFound(WorktimeError):
    def __init__(self, facility_id: int):
        super().__init__(f"Facility {facility_id} not found")
        self.facility_id = facility_id


class EmployeeNotFound(WorktimeError):
    def __init__(self, employee_id: int):
        super().__init__(f"Employee {employee_id} not found")
        self.employee_id = employee_id


class AttendanceStateError(WorktimeError):
    """An attendance record cannot make the requested transition."""


class AlreadyCheckedIn(AttendanceStateError):
    pass


class NotCheckedIn(AttendanceStateError):
    pass


class AlreadyCheckedOut(AttendanceStateError):
    pass


# ── Handlers ────────────────────────────────────────────────────────
def _error(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "success": False},
    )


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return _error(exc.status_code, exc.detail)


async def _not_found_handler(_request: Request, exc: WorktimeError) -> JSONResponse:
    return _error(404, str(exc))


async def _attendance_state_handler(_request: Request, exc: AttendanceStateError) -> JSONResponse:
    logger.info("Rejected attendance transition: %s", exc)
    return _error(409, str(exc))


async def _aggregation_error_handler(_request: Request, exc: WorktimeError) -> JSONResponse:
    logger.error("Record store failure: %s", exc, exc_info=True)
    return _error(503, "Attendance records are temporarily unavailable")


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return _error(409, "Database constraint violation")


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return _error(500, "Internal database error")


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return _error(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(FacilityNotFound, _not_found_handler)  # type: ignore[arg-type]
    app.add_exception_handler(EmployeeNotFound, _not_found_handler)  # type: ignore[arg-type]
    app.add_exception_handler(AttendanceStateError, _attendance_state_handler)  # type: ignore[arg-type]
    app.add_exception_handler(AggregationError, _aggregation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RecordStoreError, _aggregation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
