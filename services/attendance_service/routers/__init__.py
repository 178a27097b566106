"""Attendance service routers package."""

from services.attendance_service.routers.check_in import router as check_in_router

__all__ = ["check_in_router"]
