"""
V1 API router: mounts the attendance and report endpoints.
"""

from fastapi import APIRouter

from worktime.api.v1.endpoints import attendance, reports

api_router = APIRouter()

# Check-in, check-out, open record
api_router.include_router(attendance.router)

# Payroll report, CSV export, health
api_router.include_router(reports.router)
