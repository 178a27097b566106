"""Members Service models package.

Re-exports all models and enums so that:
  - ``from services.members_service.models import Athlete`` works
  - Alembic env.py sees every table on import

Model definitions are split across:
  - models/member.py     : Profile, Club, Coach, Athlete
  - models/application.py: MembershipApplication and its activity log
"""

from services.members_service.models.application import (  # noqa: F401
    ACTIVE_APPLICATION,
    ApplicationActivityLog,
    MembershipApplication,
)
from services.members_service.models.enums import (  # noqa: F401
    ACTIVE_APPLICATION_STATUSES,
    ApplicationStatus,
    DocumentType,
    Gender,
    MembershipStatus,
    ReviewAction,
)
from services.members_service.models.member import (  # noqa: F401
    ATHLETE_MEMBERSHIP,
    CLUB_NAME,
    Athlete,
    Club,
    Coach,
    Profile,
)

__all__ = [
    "ACTIVE_APPLICATION",
    "ACTIVE_APPLICATION_STATUSES",
    "ATHLETE_MEMBERSHIP",
    "CLUB_NAME",
    "ApplicationActivityLog",
    "ApplicationStatus",
    "Athlete",
    "Club",
    "Coach",
    "DocumentType",
    "Gender",
    "MembershipApplication",
    "MembershipStatus",
    "Profile",
    "ReviewAction",
]
