"""
AttendanceRecord model: one row per employee per business date.

Created on check-in with ``check_out`` NULL and closed exactly once on
check-out. Rows are never removed; ``is_deleted`` hides them instead.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (Boolean, Column, DateTime, ForeignKey, Integer, String,
                        UniqueConstraint)
from sqlalchemy.orm import relationship

from worktime.db.base import Base


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (UniqueConstraint("employee_id", "date", name="uq_attendance_records_employee_date"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_id: int = Column(Integer, ForeignKey("employees.id"), nullable=False)  # type: ignore[assignment]
    date: str = Column(String(10), nullable=False, index=True)  # type: ignore[assignment]  # YYYY-MM-DD
    check_in: str | None = Column(String(8), nullable=True)  # type: ignore[assignment]  # HH:MM:SS
    check_out: str | None = Column(String(8), nullable=True)  # type: ignore[assignment]
    scheduled_check_in: str | None = Column(String(8), nullable=True)  # type: ignore[assignment]
    scheduled_check_out: str | None = Column(String(8), nullable=True)  # type: ignore[assignment]
    break_time: str | None = Column(String(8), nullable=True)  # type: ignore[assignment]  # HH:MM
    is_night_shift: bool = Column(Boolean, default=False, server_default="false")  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default="present",
        server_default="present",
    )  # present | late | early-leave | absent
    is_deleted: bool = Column(Boolean, default=False, server_default="false")  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    employee = relationship("Employee", back_populates="attendance_records")
