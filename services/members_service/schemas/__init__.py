"""Members Service schemas package.

Re-exports all schemas so that router files use a single import namespace.

Schema files:
  - schemas/application.py: membership application payloads and responses
  - schemas/club.py       : club and coach administration
"""

from services.members_service.schemas.application import (  # noqa: F401
    AccessStatusResponse,
    ActivityLogEntry,
    ApplicationDetailResponse,
    ApplicationResponse,
    ApplicationSubmission,
    DocumentEntry,
    PersonalInfo,
    ReviewRequest,
)
from services.members_service.schemas.club import (  # noqa: F401
    AvailableClubResponse,
    ClubCreate,
    ClubResponse,
    CoachAssignment,
    CoachResponse,
)

__all__ = [
    "AccessStatusResponse",
    "ActivityLogEntry",
    "ApplicationDetailResponse",
    "ApplicationResponse",
    "ApplicationSubmission",
    "AvailableClubResponse",
    "ClubCreate",
    "ClubResponse",
    "CoachAssignment",
    "CoachResponse",
    "DocumentEntry",
    "PersonalInfo",
    "ReviewRequest",
]
