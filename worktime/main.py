"""
Worktime: application entry point.

This is the **only** file that assembles the app. Time computation
lives in `engine/`, persistence in `store/` and `models/`, HTTP in `api/`.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from worktime.api.v1.api import api_router
from worktime.core.config import settings
from worktime.core.exceptions import register_exception_handlers
from worktime.db.base import Base
from worktime.db.session import engine
from worktime.engine.holidays import HolidayCache, HttpHolidaySource

# Ensure all models are imported so metadata.create_all can see them
from worktime.models.attendance import AttendanceRecord  # noqa: F401
from worktime.models.employee import Company, Employee, Facility  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    if getattr(app.state, "holiday_cache", None) is None:
        app.state.holiday_cache = HolidayCache(HttpHolidaySource())

    logger.info("Worktime v%s started", settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Attendance time computation and payroll hour buckets",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    application.state.holiday_cache = None

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    # Mount API v1
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return application


app = create_app()
