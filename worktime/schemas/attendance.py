"""Pydantic schemas for check-in / check-out."""

from __future__ import annotations

import re
from datetime import date

from pydantic import BaseModel, field_validator

_CLOCK_RE = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")


def _validate_clock(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    if not v:
        return None
    if not _CLOCK_RE.match(v):
        raise ValueError("Time must be HH:MM or HH:MM:SS")
    return v


# ── Check-in / Check-out ────────────────────────────────────────────
class CheckInRequest(BaseModel):
    employee_id: int
    scheduled_check_in: str | None = None
    scheduled_check_out: str | None = None
    break_time: str | None = None

    @field_validator("scheduled_check_in", "scheduled_check_out", "break_time")
    @classmethod
    def _clock(cls, v: str | None) -> str | None:
        return _validate_clock(v)


class CheckOutRequest(BaseModel):
    employee_id: int


# ── Attendance ──────────────────────────────────────────────────────
class AttendanceRecordRead(BaseModel):
    id: int | None
    employee_id: int
    date: date
    check_in: str | None
    check_out: str | None
    scheduled_check_in: str | None = None
    scheduled_check_out: str | None = None
    break_time: str | None = None
    is_night_shift: bool
    status: str

    model_config = {"from_attributes": True}
