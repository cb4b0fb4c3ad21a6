"""
Company, Facility & Employee models: reference data read by the engine.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (Boolean, Column, DateTime, ForeignKey, Integer,
                        String)
from sqlalchemy.orm import relationship

from worktime.db.base import Base


class Company(Base):
    __tablename__ = "companies"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    # Special companies never earn holiday-bucket pay
    special: bool = Column(Boolean, default=False, server_default="false")  # type: ignore[assignment]

    employees = relationship("Employee", back_populates="company")


class Facility(Base):
    __tablename__ = "facilities"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]

    employees = relationship("Employee", back_populates="facility")


class Employee(Base):
    __tablename__ = "employees"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_code: str | None = Column(String(50), nullable=True, index=True)  # type: ignore[assignment]
    last_name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    first_name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    category: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    salary_type: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default="hourly",
        server_default="hourly",
    )  # hourly | monthly
    cutoff_type: str = Column(  # type: ignore[assignment]
        String(2),
        nullable=False,
        default="20",
        server_default="20",
    )  # 10 | 20
    facility_id: int | None = Column(Integer, ForeignKey("facilities.id"), nullable=True, index=True)  # type: ignore[assignment]
    company_id: int | None = Column(Integer, ForeignKey("companies.id"), nullable=True)  # type: ignore[assignment]
    is_active: bool = Column(Boolean, default=True, server_default="true")  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    facility = relationship("Facility", back_populates="employees")
    company = relationship("Company", back_populates="employees")
    attendance_records = relationship(
        "AttendanceRecord",
        back_populates="employee",
        cascade="all, delete-orphan",
    )
