"""
FastAPI dependencies: database session, record store, holiday cache, clock.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from worktime.core.config import settings
from worktime.db.session import async_session_factory
from worktime.engine.holidays import HolidayCache
from worktime.store.base import AttendanceStore
from worktime.store.sql import SqlAttendanceStore


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_store(db: AsyncSession = Depends(get_db)) -> AttendanceStore:
    return SqlAttendanceStore(db)


# ── Holiday cache (one per process, created in lifespan) ────────────
def get_holiday_cache(request: Request) -> HolidayCache:
    return request.app.state.holiday_cache


# ── Clock ───────────────────────────────────────────────────────────
def get_now() -> datetime:
    """Current wall-clock time in the configured zone."""
    return datetime.now(ZoneInfo(settings.TIMEZONE))
