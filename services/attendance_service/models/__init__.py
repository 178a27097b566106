"""Attendance Service models package."""

from services.attendance_service.models.check_in import (
    ACTIVITY_CHECK_IN,
    SESSION_CHECK_IN,
    ActivityCheckIn,
    SessionCheckIn,
)
from services.attendance_service.models.enums import (
    CheckInMethod,
    CheckInStatus,
    CheckInTargetKind,
)

__all__ = [
    "ACTIVITY_CHECK_IN",
    "SESSION_CHECK_IN",
    "ActivityCheckIn",
    "CheckInMethod",
    "CheckInStatus",
    "CheckInTargetKind",
    "SessionCheckIn",
]
