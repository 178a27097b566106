"""Attendance Service schemas package."""

from services.attendance_service.schemas.check_in import (  # noqa: F401
    CheckInRequest,
    CheckInResponse,
)

__all__ = ["CheckInRequest", "CheckInResponse"]
