"""Sessions Service schemas package."""

from services.sessions_service.schemas.registration import (  # noqa: F401
    RegistrationApprove,
    RegistrationCreate,
    RegistrationReject,
    RegistrationResponse,
)
from services.sessions_service.schemas.schedule import (  # noqa: F401
    ActivityCreate,
    ActivityResponse,
    CheckinTokenRequest,
    CheckinTokenResponse,
    TrainingSessionCreate,
    TrainingSessionResponse,
)

__all__ = [
    "ActivityCreate",
    "ActivityResponse",
    "CheckinTokenRequest",
    "CheckinTokenResponse",
    "RegistrationApprove",
    "RegistrationCreate",
    "RegistrationReject",
    "RegistrationResponse",
    "TrainingSessionCreate",
    "TrainingSessionResponse",
]
