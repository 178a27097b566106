"""
Unit tests for the membership application workflow.

Covers submission, the review state machine, athlete materialization on
approval and the derived membership status. Runs against the in-memory
SQLite database from the root conftest.
"""

import pytest
from libs.audit.models import AuditLog
from libs.common.errors import (
    AlreadyProcessedError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from libs.common.notifications import EventKind
from libs.db.guard import guarded_insert
from services.members_service.models import (
    ACTIVE_APPLICATION,
    ApplicationActivityLog,
    ApplicationStatus,
    Athlete,
    MembershipApplication,
    MembershipStatus,
    Profile,
    ReviewAction,
)
from services.members_service.services.applications import (
    delete_application,
    get_application,
    list_applications,
    list_my_applications,
    materialize_athlete,
    review_application,
    submit_application,
)
from services.members_service.services.membership import get_access_status
from sqlalchemy import func, select, update
from tests.conftest import FailingDispatcher
from tests.factories import (
    ApplicationFactory,
    ClubFactory,
    ProfileFactory,
    documents,
    personal_info,
)

APPLICANT = "applicant-1"


async def _submit(db, world, dispatcher, user_id=APPLICANT, club_id=None, **info):
    application = await submit_application(
        db,
        user_id=user_id,
        club_id=club_id or world.club_1,
        personal_info=personal_info(**info),
        documents=documents(),
        dispatcher=dispatcher,
        email=f"{user_id}@test.com",
    )
    return application.id


async def _count(db, model, *where):
    result = await db.execute(select(func.count(model.id)).where(*where))
    return result.scalar_one()


async def _membership_status(db, user_id):
    result = await db.execute(
        select(Profile.membership_status).where(Profile.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def _log_actions(db, application_id):
    result = await db.execute(
        select(ApplicationActivityLog.action)
        .where(ApplicationActivityLog.application_id == application_id)
        .order_by(ApplicationActivityLog.created_at)
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_submit_creates_pending_application(db_session, world, dispatcher):
    app_id = await _submit(db_session, world, dispatcher)

    application = await db_session.get(MembershipApplication, app_id)
    assert application.status == ApplicationStatus.PENDING
    assert application.club_id == world.club_1
    assert application.profile_id is None
    assert await _log_actions(db_session, app_id) == ["submitted"]

    assert await _membership_status(db_session, APPLICANT) == MembershipStatus.PENDING
    assert dispatcher.kinds == [EventKind.APPLICATION_SUBMITTED]
    assert dispatcher.last(EventKind.APPLICATION_SUBMITTED)["application_id"] == str(
        app_id
    )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_second_open_application_is_a_conflict(db_session, world, dispatcher):
    await _submit(db_session, world, dispatcher)

    with pytest.raises(ConflictError):
        await _submit(db_session, world, dispatcher, club_id=world.club_2)

    open_count = await _count(
        db_session,
        MembershipApplication,
        MembershipApplication.user_id == APPLICANT,
        MembershipApplication.status == ApplicationStatus.PENDING,
    )
    assert open_count == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_storage_rejects_second_open_application(db_session, world):
    """The partial unique index holds even when the pre-check is bypassed."""
    db_session.add(
        ApplicationFactory.create(
            user_id=APPLICANT,
            club_id=world.club_1,
            status=ApplicationStatus.INFO_REQUESTED,
        )
    )
    await db_session.commit()

    with pytest.raises(ConflictError):
        await guarded_insert(
            db_session,
            ACTIVE_APPLICATION,
            ApplicationFactory.create(user_id=APPLICANT, club_id=world.club_2),
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_new_application_allowed_after_rejection(db_session, world, dispatcher):
    db_session.add(
        ApplicationFactory.create(
            user_id=APPLICANT,
            club_id=world.club_1,
            status=ApplicationStatus.REJECTED,
            rejection_reason="Incomplete documents",
        )
    )
    await db_session.commit()

    app_id = await _submit(db_session, world, dispatcher, club_id=world.club_2)

    application = await db_session.get(MembershipApplication, app_id)
    assert application.status == ApplicationStatus.PENDING


@pytest.mark.asyncio
@pytest.mark.unit
async def test_submit_to_club_without_coach(db_session, world, dispatcher):
    club = ClubFactory.create(name="Empty Club")
    db_session.add(club)
    await db_session.commit()

    with pytest.raises(ValidationError) as exc_info:
        await _submit(db_session, world, dispatcher, club_id=club.id)

    assert exc_info.value.field == "club_id"
    assert dispatcher.events == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_submit_to_unknown_club(db_session, world, dispatcher):
    import uuid

    with pytest.raises(NotFoundError):
        await _submit(db_session, world, dispatcher, club_id=uuid.uuid4())


@pytest.mark.asyncio
@pytest.mark.unit
async def test_dispatcher_failure_does_not_fail_submission(db_session, world):
    app_id = await _submit(db_session, world, FailingDispatcher())

    application = await db_session.get(MembershipApplication, app_id)
    assert application.status == ApplicationStatus.PENDING


# ---------------------------------------------------------------------------
# Review
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_approval_materializes_athlete_once(db_session, world, dispatcher):
    """Submit, approve, then a second approve is refused."""
    app_id = await _submit(db_session, world, dispatcher)
    coach = await world.scope(db_session, world.coach_1_user)

    application = await review_application(
        db_session, coach, app_id, ReviewAction.APPROVE, dispatcher=dispatcher
    )

    assert application.status == ApplicationStatus.APPROVED
    assert application.reviewed_by == world.coach_1_user
    assert application.reviewed_at is not None

    result = await db_session.execute(
        select(Athlete).where(
            Athlete.user_id == APPLICANT, Athlete.club_id == world.club_1
        )
    )
    athlete = result.scalar_one()
    assert application.profile_id == athlete.id
    assert (athlete.first_name, athlete.last_name) == ("Somchai", "Jaidee")
    assert athlete.email == f"{APPLICANT}@test.com"
    assert athlete.phone_number == "081-234-5678"

    assert await _log_actions(db_session, app_id) == [
        "submitted",
        "approved",
        "profile_created",
    ]
    assert await _membership_status(db_session, APPLICANT) == MembershipStatus.ACTIVE
    approved = dispatcher.last(EventKind.APPLICATION_APPROVED)
    assert approved["profile_id"] == str(athlete.id)

    with pytest.raises(AlreadyProcessedError) as exc_info:
        await review_application(
            db_session, coach, app_id, ReviewAction.APPROVE, dispatcher=dispatcher
        )
    assert exc_info.value.current_status == "approved"
    assert await _count(db_session, Athlete, Athlete.user_id == APPLICANT) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_materialize_is_idempotent(db_session, world, dispatcher):
    app_id = await _submit(db_session, world, dispatcher)
    admin = await world.scope(db_session, world.admin_user)
    await review_application(
        db_session, admin, app_id, ReviewAction.APPROVE, dispatcher=dispatcher
    )

    application = await db_session.get(MembershipApplication, app_id)
    first_profile = application.profile_id
    athlete = await materialize_athlete(db_session, application)
    await db_session.commit()

    assert athlete.id == first_profile
    assert await _count(db_session, Athlete, Athlete.user_id == APPLICANT) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_approval_links_existing_athlete(db_session, world, dispatcher):
    app_id = await _submit(db_session, world, dispatcher, user_id=world.athlete_1_user)
    coach = await world.scope(db_session, world.coach_1_user)

    application = await review_application(
        db_session, coach, app_id, ReviewAction.APPROVE, dispatcher=dispatcher
    )

    assert application.profile_id == world.athlete_1
    count = await _count(db_session, Athlete, Athlete.user_id == world.athlete_1_user)
    assert count == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_failed_materialization_keeps_application_pending(
    db_session, world, dispatcher
):
    app_id = await _submit(db_session, world, dispatcher, date_of_birth=None)
    coach = await world.scope(db_session, world.coach_1_user)

    with pytest.raises(ValidationError) as exc_info:
        await review_application(
            db_session, coach, app_id, ReviewAction.APPROVE, dispatcher=dispatcher
        )
    assert exc_info.value.field == "date_of_birth"

    application = await db_session.get(MembershipApplication, app_id)
    await db_session.refresh(application)
    assert application.status == ApplicationStatus.PENDING
    assert application.profile_id is None
    assert application.reviewed_by is None
    assert await _count(db_session, Athlete, Athlete.user_id == APPLICANT) == 0
    assert await _log_actions(db_session, app_id) == ["submitted"]
    assert await _membership_status(db_session, APPLICANT) == MembershipStatus.PENDING
    assert EventKind.APPLICATION_APPROVED not in dispatcher.kinds


@pytest.mark.asyncio
@pytest.mark.unit
async def test_losing_reviewer_gets_already_processed(db_session, world, dispatcher):
    app_id = await _submit(db_session, world, dispatcher)
    coach = await world.scope(db_session, world.coach_1_user)

    # Load the pending row, then let a competing reviewer reject it behind
    # the session's back.
    await db_session.get(MembershipApplication, app_id)
    await db_session.execute(
        update(MembershipApplication)
        .where(MembershipApplication.id == app_id)
        .values(status=ApplicationStatus.REJECTED, rejection_reason="Too late")
        .execution_options(synchronize_session=False)
    )
    await db_session.commit()

    with pytest.raises(AlreadyProcessedError) as exc_info:
        await review_application(
            db_session, coach, app_id, ReviewAction.APPROVE, dispatcher=dispatcher
        )

    assert exc_info.value.current_status == "rejected"
    assert await _count(db_session, Athlete, Athlete.user_id == APPLICANT) == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_coach_of_other_club_cannot_review(db_session, world, dispatcher):
    app_id = await _submit(db_session, world, dispatcher)
    other_coach = await world.scope(db_session, world.coach_2_user)

    with pytest.raises(AuthorizationError):
        await review_application(
            db_session, other_coach, app_id, ReviewAction.APPROVE, dispatcher=dispatcher
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_athlete_cannot_review(db_session, world, dispatcher):
    app_id = await _submit(db_session, world, dispatcher)
    athlete = await world.scope(db_session, world.athlete_1_user)

    with pytest.raises(AuthorizationError):
        await review_application(
            db_session, athlete, app_id, ReviewAction.APPROVE, dispatcher=dispatcher
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_reject_requires_reason(db_session, world, dispatcher):
    app_id = await _submit(db_session, world, dispatcher)
    coach = await world.scope(db_session, world.coach_1_user)

    with pytest.raises(ValidationError):
        await review_application(
            db_session,
            coach,
            app_id,
            ReviewAction.REJECT,
            dispatcher=dispatcher,
            reason="   ",
        )

    application = await review_application(
        db_session,
        coach,
        app_id,
        ReviewAction.REJECT,
        dispatcher=dispatcher,
        reason="Documents are unreadable",
    )
    assert application.status == ApplicationStatus.REJECTED
    assert application.rejection_reason == "Documents are unreadable"
    assert await _membership_status(db_session, APPLICANT) == MembershipStatus.REJECTED
    rejected = dispatcher.last(EventKind.APPLICATION_REJECTED)
    assert rejected["reason"] == "Documents are unreadable"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_request_info_then_approve(db_session, world, dispatcher):
    app_id = await _submit(db_session, world, dispatcher)
    coach = await world.scope(db_session, world.coach_1_user)

    application = await review_application(
        db_session,
        coach,
        app_id,
        ReviewAction.REQUEST_INFO,
        dispatcher=dispatcher,
        reason="Please upload a clearer ID card",
    )
    assert application.status == ApplicationStatus.INFO_REQUESTED
    assert application.review_notes == "Please upload a clearer ID card"
    assert await _membership_status(db_session, APPLICANT) == MembershipStatus.PENDING

    application = await review_application(
        db_session, coach, app_id, ReviewAction.APPROVE, dispatcher=dispatcher
    )
    assert application.status == ApplicationStatus.APPROVED
    assert await _log_actions(db_session, app_id) == [
        "submitted",
        "info_requested",
        "approved",
        "profile_created",
    ]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_review_unknown_application(db_session, world, dispatcher):
    import uuid

    admin = await world.scope(db_session, world.admin_user)
    with pytest.raises(NotFoundError):
        await review_application(
            db_session, admin, uuid.uuid4(), ReviewAction.APPROVE, dispatcher=dispatcher
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_suspended_member_stays_suspended(db_session, world, dispatcher):
    db_session.add(
        ProfileFactory.create(
            user_id=APPLICANT, membership_status=MembershipStatus.SUSPENDED
        )
    )
    await db_session.commit()

    app_id = await _submit(db_session, world, dispatcher)
    admin = await world.scope(db_session, world.admin_user)
    await review_application(
        db_session, admin, app_id, ReviewAction.APPROVE, dispatcher=dispatcher
    )

    status = await _membership_status(db_session, APPLICANT)
    assert status == MembershipStatus.SUSPENDED
    access = await get_access_status(db_session, APPLICANT)
    assert access["has_access"] is False
    assert access["reason"] == "suspended"


# ---------------------------------------------------------------------------
# Reads and administration
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_list_applications_is_scoped(db_session, world, dispatcher):
    first = await _submit(db_session, world, dispatcher)
    second = await _submit(
        db_session, world, dispatcher, user_id="applicant-2", club_id=world.club_2
    )

    coach_1 = await world.scope(db_session, world.coach_1_user)
    visible = await list_applications(db_session, coach_1)
    assert [a.id for a in visible] == [first]

    with pytest.raises(AuthorizationError):
        await list_applications(db_session, coach_1, club_id=world.club_2)

    admin = await world.scope(db_session, world.admin_user)
    assert {a.id for a in await list_applications(db_session, admin)} == {
        first,
        second,
    }
    assert (
        await list_applications(db_session, admin, status=ApplicationStatus.APPROVED)
        == []
    )

    athlete = await world.scope(db_session, world.athlete_1_user)
    with pytest.raises(AuthorizationError):
        await list_applications(db_session, athlete)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_application_owner_and_reviewers(db_session, world, dispatcher):
    app_id = await _submit(db_session, world, dispatcher)

    owner = await world.scope(db_session, APPLICANT)
    application = await get_application(db_session, owner, app_id)
    assert [entry.action for entry in application.activity_log] == ["submitted"]

    coach = await world.scope(db_session, world.coach_1_user)
    assert (await get_application(db_session, coach, app_id)).id == app_id

    stranger = await world.scope(db_session, world.athlete_2_user)
    with pytest.raises(AuthorizationError):
        await get_application(db_session, stranger, app_id)

    mine = await list_my_applications(db_session, APPLICANT)
    assert [a.id for a in mine] == [app_id]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_application_is_admin_only_and_audited(
    db_session, world, dispatcher
):
    app_id = await _submit(db_session, world, dispatcher)

    coach = await world.scope(db_session, world.coach_1_user)
    with pytest.raises(AuthorizationError):
        await delete_application(db_session, coach, app_id)

    admin = await world.scope(db_session, world.admin_user)
    await delete_application(db_session, admin, app_id)

    assert await db_session.get(MembershipApplication, app_id) is None
    assert await _count(
        db_session,
        ApplicationActivityLog,
        ApplicationActivityLog.application_id == app_id,
    ) == 0
    assert await _membership_status(db_session, APPLICANT) is None

    result = await db_session.execute(
        select(AuditLog).where(AuditLog.action == "application_deleted")
    )
    entry = result.scalar_one()
    assert entry.entity_id == str(app_id)
    assert entry.actor_id == world.admin_user


@pytest.mark.asyncio
@pytest.mark.unit
async def test_access_status_follows_applications(db_session, world, dispatcher):
    no_app = await get_access_status(db_session, APPLICANT)
    assert no_app == {
        "has_access": False,
        "membership_status": None,
        "reason": "no_application",
    }

    app_id = await _submit(db_session, world, dispatcher)
    pending = await get_access_status(db_session, APPLICANT)
    assert pending["has_access"] is False
    assert pending["reason"] == "pending"
    assert pending["club_name"] == "Bangkok Sharks"

    coach = await world.scope(db_session, world.coach_1_user)
    await review_application(
        db_session, coach, app_id, ReviewAction.APPROVE, dispatcher=dispatcher
    )
    active = await get_access_status(db_session, APPLICANT)
    assert active["has_access"] is True
    assert active["membership_status"] == MembershipStatus.ACTIVE

    staff = await get_access_status(db_session, world.coach_1_user)
    assert staff["has_access"] is True
