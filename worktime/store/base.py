from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable, Optional

from worktime.engine.domain import AttendanceEntry, EmployeeProfile, FacilityInfo


class AttendanceStore(ABC):
    """Narrow read/write interface the engine uses for persisted records.

    Implementations raise ``RecordStoreError`` when the backing store fails.
    Soft-deleted records are never returned.
    """

    @abstractmethod
    async def get_facility(self, facility_id: int) -> Optional[FacilityInfo]:
        raise NotImplementedError

    @abstractmethod
    async def list_facility_employees(self, facility_id: int) -> list[EmployeeProfile]:
        """Active employees assigned to the facility."""
        raise NotImplementedError

    @abstractmethod
    async def get_employee(self, employee_id: int) -> Optional[EmployeeProfile]:
        raise NotImplementedError

    @abstractmethod
    async def list_attendance(
        self,
        employee_ids: Iterable[int],
        start: date,
        end: date,
    ) -> list[AttendanceEntry]:
        """Records of the given employees with ``start <= date <= end``."""
        raise NotImplementedError

    @abstractmethod
    async def find_records(self, employee_id: int, dates: Iterable[date]) -> list[AttendanceEntry]:
        raise NotImplementedError

    @abstractmethod
    async def add_record(self, entry: AttendanceEntry) -> AttendanceEntry:
        raise NotImplementedError

    @abstractmethod
    async def close_record(self, entry: AttendanceEntry) -> AttendanceEntry:
        """Persist ``check_out`` and ``status`` of an already stored record."""
        raise NotImplementedError
