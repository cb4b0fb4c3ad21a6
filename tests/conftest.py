"""
Shared test fixtures for the worktime test suite.

API tests run against an in-memory aiosqlite database; engine tests use
``InMemoryStore`` and a fake holiday source so nothing touches the network.
"""

import os
import sys
from dataclasses import replace
from datetime import date, datetime
from typing import AsyncGenerator, Iterable, Optional

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from worktime.api.v1.deps import get_db, get_holiday_cache, get_now
from worktime.db.base import Base
from worktime.engine.domain import AttendanceEntry, EmployeeProfile, FacilityInfo
from worktime.engine.holidays import HolidayCache, HolidaySource
from worktime.main import app
from worktime.store.base import AttendanceStore


# ── Fakes ───────────────────────────────────────────────────────────
class FakeHolidaySource(HolidaySource):
    """Serves canned holidays; years listed in ``failing`` raise."""

    def __init__(self, holidays: Optional[dict[int, set[date]]] = None, failing: Iterable[int] = ()):
        self.holidays = holidays or {}
        self.failing = set(failing)
        self.calls: list[int] = []

    async def fetch(self, year: int) -> set[date]:
        self.calls.append(year)
        if year in self.failing:
            raise ValueError(f"no data for {year}")
        return set(self.holidays.get(year, set()))


class InMemoryStore(AttendanceStore):
    def __init__(self):
        self.facilities: dict[int, FacilityInfo] = {}
        self.employees: dict[int, EmployeeProfile] = {}
        self.records: list[AttendanceEntry] = []
        self.queries: list[tuple] = []

    def add_employee(self, profile: EmployeeProfile) -> EmployeeProfile:
        self.employees[profile.id] = profile
        return profile

    async def get_facility(self, facility_id):
        return self.facilities.get(facility_id)

    async def list_facility_employees(self, facility_id):
        return [e for e in self.employees.values() if e.facility_id == facility_id and e.is_active]

    async def get_employee(self, employee_id):
        return self.employees.get(employee_id)

    async def list_attendance(self, employee_ids, start, end):
        ids = set(employee_ids)
        self.queries.append((ids, start, end))
        return [r for r in self.records if r.employee_id in ids and start <= r.date <= end]

    async def find_records(self, employee_id, dates):
        wanted = set(dates)
        return [r for r in self.records if r.employee_id == employee_id and r.date in wanted]

    async def add_record(self, entry):
        stored = replace(entry, id=len(self.records) + 1)
        self.records.append(stored)
        return stored

    async def close_record(self, entry):
        self.records = [entry if r.id == entry.id else r for r in self.records]
        return entry


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


# ── Engine fixtures ─────────────────────────────────────────────────
@pytest.fixture
def memory_store() -> InMemoryStore:
    store = InMemoryStore()
    store.facilities[1] = FacilityInfo(id=1, name="Iwade")
    return store


@pytest.fixture
def fake_source():
    """Factory for ``FakeHolidaySource`` instances."""
    return FakeHolidaySource


@pytest.fixture
def holiday_source() -> FakeHolidaySource:
    return FakeHolidaySource()


@pytest.fixture
def holiday_cache(holiday_source: FakeHolidaySource) -> HolidayCache:
    return HolidayCache(holiday_source, ttl_seconds=3600, timeout=1.0)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 3, 4, 8, 55, 0))


# ── Database fixtures ───────────────────────────────────────────────
@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh in-memory database per test."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    await test_engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for seeding and direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory, holiday_cache, clock) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_holiday_cache] = lambda: holiday_cache
    app.dependency_overrides[get_now] = clock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
