"""Sessions Service models package."""

from services.sessions_service.models.enums import (
    SEAT_HOLDING_STATUSES,
    ActivityType,
    RegistrationStatus,
)
from services.sessions_service.models.registration import (
    ACTIVE_REGISTRATION,
    ActivityRegistration,
)
from services.sessions_service.models.schedule import Activity, TrainingSession

__all__ = [
    "ACTIVE_REGISTRATION",
    "SEAT_HOLDING_STATUSES",
    "Activity",
    "ActivityRegistration",
    "ActivityType",
    "RegistrationStatus",
    "TrainingSession",
]
