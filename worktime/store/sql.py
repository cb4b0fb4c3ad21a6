"""
SQLAlchemy implementation of ``AttendanceStore`` over an ``AsyncSession``.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from worktime.core.exceptions import (AlreadyCheckedIn, AlreadyCheckedOut,
                                      RecordStoreError)
from worktime.engine.domain import AttendanceEntry, EmployeeProfile, FacilityInfo
from worktime.models.attendance import AttendanceRecord
from worktime.models.employee import Employee, Facility
from worktime.store.base import AttendanceStore

logger = logging.getLogger(__name__)


def _to_profile(emp: Employee) -> EmployeeProfile:
    return EmployeeProfile(
        id=emp.id,
        name=f"{emp.last_name} {emp.first_name}".strip(),
        employee_code=emp.employee_code,
        category=emp.category,
        salary_type=emp.salary_type or "hourly",
        cutoff_type=emp.cutoff_type or "20",
        facility_id=emp.facility_id,
        facility_name=emp.facility.name if emp.facility else None,
        company_special=bool(emp.company and emp.company.special),
        is_active=bool(emp.is_active),
    )


def _to_entry(rec: AttendanceRecord) -> AttendanceEntry:
    return AttendanceEntry(
        id=rec.id,
        employee_id=rec.employee_id,
        date=date.fromisoformat(rec.date),
        check_in=rec.check_in,
        check_out=rec.check_out,
        scheduled_check_in=rec.scheduled_check_in,
        scheduled_check_out=rec.scheduled_check_out,
        break_time=rec.break_time,
        is_night_shift=bool(rec.is_night_shift),
        status=rec.status,
    )


class SqlAttendanceStore(AttendanceStore):
    def __init__(self, session: AsyncSession):
        self._db = session

    async def get_facility(self, facility_id: int) -> Optional[FacilityInfo]:
        try:
            result = await self._db.execute(select(Facility).where(Facility.id == facility_id))
        except SQLAlchemyError as exc:
            raise RecordStoreError(f"Could not load facility {facility_id}") from exc
        facility = result.scalar_one_or_none()
        if facility is None:
            return None
        return FacilityInfo(id=facility.id, name=facility.name)

    async def list_facility_employees(self, facility_id: int) -> list[EmployeeProfile]:
        try:
            result = await self._db.execute(
                select(Employee)
                .options(selectinload(Employee.facility), selectinload(Employee.company))
                .where(Employee.facility_id == facility_id, Employee.is_active.is_(True))
                .order_by(Employee.id)
            )
        except SQLAlchemyError as exc:
            raise RecordStoreError(f"Could not load employees of facility {facility_id}") from exc
        return [_to_profile(emp) for emp in result.scalars().all()]

    async def get_employee(self, employee_id: int) -> Optional[EmployeeProfile]:
        try:
            result = await self._db.execute(
                select(Employee)
                .options(selectinload(Employee.facility), selectinload(Employee.company))
                .where(Employee.id == employee_id)
            )
        except SQLAlchemyError as exc:
            raise RecordStoreError(f"Could not load employee {employee_id}") from exc
        emp = result.scalar_one_or_none()
        return _to_profile(emp) if emp is not None else None

    async def list_attendance(
        self,
        employee_ids: Iterable[int],
        start: date,
        end: date,
    ) -> list[AttendanceEntry]:
        ids = list(employee_ids)
        if not ids:
            return []
        try:
            result = await self._db.execute(
                select(AttendanceRecord)
                .where(
                    AttendanceRecord.employee_id.in_(ids),
                    AttendanceRecord.date >= start.isoformat(),
                    AttendanceRecord.date <= end.isoformat(),
                    AttendanceRecord.is_deleted.is_(False),
                )
                .order_by(AttendanceRecord.employee_id, AttendanceRecord.date)
            )
        except SQLAlchemyError as exc:
            raise RecordStoreError("Could not load attendance records") from exc
        return [_to_entry(rec) for rec in result.scalars().all()]

    async def find_records(self, employee_id: int, dates: Iterable[date]) -> list[AttendanceEntry]:
        wanted = [d.isoformat() for d in dates]
        try:
            result = await self._db.execute(
                select(AttendanceRecord)
                .where(
                    AttendanceRecord.employee_id == employee_id,
                    AttendanceRecord.date.in_(wanted),
                    AttendanceRecord.is_deleted.is_(False),
                )
                .order_by(AttendanceRecord.date)
            )
        except SQLAlchemyError as exc:
            raise RecordStoreError(f"Could not load records of employee {employee_id}") from exc
        return [_to_entry(rec) for rec in result.scalars().all()]

    async def add_record(self, entry: AttendanceEntry) -> AttendanceEntry:
        record = AttendanceRecord(
            employee_id=entry.employee_id,
            date=entry.date.isoformat(),
            check_in=entry.check_in,
            check_out=entry.check_out,
            scheduled_check_in=entry.scheduled_check_in,
            scheduled_check_out=entry.scheduled_check_out,
            break_time=entry.break_time,
            is_night_shift=entry.is_night_shift,
            status=entry.status,
        )
        try:
            self._db.add(record)
            await self._db.commit()
            await self._db.refresh(record)
        except IntegrityError as exc:
            await self._db.rollback()
            raise AlreadyCheckedIn(
                f"Employee {entry.employee_id} already has a record for {entry.date}"
            ) from exc
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise RecordStoreError("Could not store check-in") from exc
        logger.info("Check-in stored for employee %s on %s", entry.employee_id, record.date)
        return _to_entry(record)

    async def close_record(self, entry: AttendanceEntry) -> AttendanceEntry:
        try:
            result = await self._db.execute(
                select(AttendanceRecord).where(AttendanceRecord.id == entry.id).with_for_update()
            )
            record = result.scalar_one()
            if record.check_out is not None:
                await self._db.rollback()
                raise AlreadyCheckedOut(f"Record for {record.date} is already checked out")
            record.check_out = entry.check_out
            record.status = entry.status
            await self._db.commit()
            await self._db.refresh(record)
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise RecordStoreError(f"Could not store check-out for record {entry.id}") from exc
        logger.info("Check-out stored for employee %s on %s", entry.employee_id, record.date)
        return _to_entry(record)
