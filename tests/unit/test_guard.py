"""Unit tests for the active-record conflict guard."""

import pytest
from libs.common.errors import ConflictError
from libs.db.guard import (
    assert_no_active_conflict,
    find_active,
    guarded_insert,
)
from services.members_service.models import (
    ACTIVE_APPLICATION,
    ATHLETE_MEMBERSHIP,
    ApplicationStatus,
)
from services.sessions_service.models import ACTIVE_REGISTRATION, RegistrationStatus
from tests.factories import (
    ActivityFactory,
    ApplicationFactory,
    AthleteFactory,
    RegistrationFactory,
)


@pytest.mark.unit
def test_rule_requires_every_key_column():
    with pytest.raises(TypeError):
        ACTIVE_REGISTRATION.where(activity_id="only-half")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_active_clause_ignores_closed_records(db_session, world):
    db_session.add(
        ApplicationFactory.create(
            user_id="applicant-9",
            club_id=world.club_1,
            status=ApplicationStatus.REJECTED,
        )
    )
    await db_session.commit()

    found = await find_active(db_session, ACTIVE_APPLICATION, user_id="applicant-9")
    assert found is None
    await assert_no_active_conflict(
        db_session, ACTIVE_APPLICATION, user_id="applicant-9"
    )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unique_violation_becomes_conflict(db_session, world):
    with pytest.raises(ConflictError) as exc_info:
        await guarded_insert(
            db_session,
            ATHLETE_MEMBERSHIP,
            AthleteFactory.create(user_id=world.athlete_1_user, club_id=world.club_1),
        )

    assert exc_info.value.extra["kind"] == ATHLETE_MEMBERSHIP.kind


@pytest.mark.asyncio
@pytest.mark.unit
async def test_partial_index_allows_new_row_after_cancel(db_session, world):
    activity = ActivityFactory.create(
        club_id=world.club_1, requires_registration=True
    )
    db_session.add(activity)
    await db_session.commit()
    activity_id = activity.id

    db_session.add(
        RegistrationFactory.create(
            activity_id=activity_id,
            athlete_id=world.athlete_1,
            status=RegistrationStatus.CANCELLED,
        )
    )
    await db_session.commit()

    fresh = await guarded_insert(
        db_session,
        ACTIVE_REGISTRATION,
        RegistrationFactory.create(
            activity_id=activity_id, athlete_id=world.athlete_1
        ),
    )
    await db_session.commit()

    with pytest.raises(ConflictError):
        await assert_no_active_conflict(
            db_session,
            ACTIVE_REGISTRATION,
            activity_id=activity_id,
            athlete_id=world.athlete_1,
        )
    assert fresh.status == RegistrationStatus.PENDING
