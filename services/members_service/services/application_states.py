"""Legal transitions of a membership application.

Pure functions with no database dependencies so the transition table can be
checked in isolation. The service layer uses ``source_statuses`` to build
its conditional update, so the same table decides both the friendly
pre-check and the race.
"""

from libs.common.errors import AlreadyProcessedError
from services.members_service.models.enums import (
    ACTIVE_APPLICATION_STATUSES,
    ApplicationStatus,
    MembershipStatus,
    ReviewAction,
)

_TARGETS = {
    ReviewAction.APPROVE: ApplicationStatus.APPROVED,
    ReviewAction.REJECT: ApplicationStatus.REJECTED,
    ReviewAction.REQUEST_INFO: ApplicationStatus.INFO_REQUESTED,
}

_SOURCES = {
    ReviewAction.APPROVE: ACTIVE_APPLICATION_STATUSES,
    ReviewAction.REJECT: ACTIVE_APPLICATION_STATUSES,
    ReviewAction.REQUEST_INFO: (ApplicationStatus.PENDING,),
}

_MEMBERSHIP = {
    ApplicationStatus.PENDING: MembershipStatus.PENDING,
    ApplicationStatus.INFO_REQUESTED: MembershipStatus.PENDING,
    ApplicationStatus.APPROVED: MembershipStatus.ACTIVE,
    ApplicationStatus.REJECTED: MembershipStatus.REJECTED,
}


def source_statuses(action: ReviewAction) -> tuple[ApplicationStatus, ...]:
    """Statuses from which ``action`` may be applied."""
    return _SOURCES[action]


def next_status(
    current: ApplicationStatus, action: ReviewAction
) -> ApplicationStatus:
    """Return the status ``action`` moves ``current`` to.

    Raises AlreadyProcessedError when the application has already left the
    states ``action`` accepts.
    """
    if current not in _SOURCES[action]:
        raise AlreadyProcessedError(
            f"Application is already {current.value}",
            current_status=current.value,
        )
    return _TARGETS[action]


def membership_status_for(status: ApplicationStatus) -> MembershipStatus:
    return _MEMBERSHIP[status]
