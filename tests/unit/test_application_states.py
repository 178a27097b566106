"""Unit tests for the application transition table and name splitting.

Pure functions; no database involved.
"""

import pytest
from libs.common.errors import AlreadyProcessedError
from services.members_service.models import (
    ApplicationStatus,
    MembershipStatus,
    ReviewAction,
)
from services.members_service.services.application_states import (
    membership_status_for,
    next_status,
    source_statuses,
)
from services.members_service.services.applications import split_full_name


@pytest.mark.unit
@pytest.mark.parametrize(
    "current, action, expected",
    [
        (ApplicationStatus.PENDING, ReviewAction.APPROVE, ApplicationStatus.APPROVED),
        (ApplicationStatus.PENDING, ReviewAction.REJECT, ApplicationStatus.REJECTED),
        (
            ApplicationStatus.PENDING,
            ReviewAction.REQUEST_INFO,
            ApplicationStatus.INFO_REQUESTED,
        ),
        (
            ApplicationStatus.INFO_REQUESTED,
            ReviewAction.APPROVE,
            ApplicationStatus.APPROVED,
        ),
        (
            ApplicationStatus.INFO_REQUESTED,
            ReviewAction.REJECT,
            ApplicationStatus.REJECTED,
        ),
    ],
)
def test_legal_transitions(current, action, expected):
    assert next_status(current, action) == expected


@pytest.mark.unit
@pytest.mark.parametrize(
    "terminal", [ApplicationStatus.APPROVED, ApplicationStatus.REJECTED]
)
@pytest.mark.parametrize("action", list(ReviewAction))
def test_terminal_statuses_accept_no_action(terminal, action):
    with pytest.raises(AlreadyProcessedError) as exc_info:
        next_status(terminal, action)
    assert exc_info.value.current_status == terminal.value


@pytest.mark.unit
def test_info_can_only_be_requested_once():
    with pytest.raises(AlreadyProcessedError):
        next_status(ApplicationStatus.INFO_REQUESTED, ReviewAction.REQUEST_INFO)


@pytest.mark.unit
def test_source_statuses_match_transition_table():
    for action in ReviewAction:
        for status in ApplicationStatus:
            allowed = status in source_statuses(action)
            if allowed:
                next_status(status, action)
            else:
                with pytest.raises(AlreadyProcessedError):
                    next_status(status, action)


@pytest.mark.unit
def test_membership_status_follows_application_status():
    assert membership_status_for(ApplicationStatus.PENDING) == MembershipStatus.PENDING
    assert (
        membership_status_for(ApplicationStatus.INFO_REQUESTED)
        == MembershipStatus.PENDING
    )
    assert membership_status_for(ApplicationStatus.APPROVED) == MembershipStatus.ACTIVE
    assert (
        membership_status_for(ApplicationStatus.REJECTED) == MembershipStatus.REJECTED
    )


@pytest.mark.unit
@pytest.mark.parametrize(
    "full_name, expected",
    [
        ("Somchai Jaidee", ("Somchai", "Jaidee")),
        ("  Anong   Siri Wattana ", ("Anong", "Siri Wattana")),
        ("Madonna", ("Madonna", "Madonna")),
    ],
)
def test_split_full_name(full_name, expected):
    assert split_full_name(full_name) == expected
