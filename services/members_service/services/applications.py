"""Membership application state machine.

submit -> pending -> (info_requested ->) approved | rejected

Approval materializes the applicant's athlete record in the same
transaction as the status change; if materialization fails the transaction
is rolled back and the application keeps its prior status.
"""

import uuid
from datetime import date
from typing import Any, Optional

from libs.audit.service import record_audit
from libs.auth.models import ActorScope
from libs.common.datetime_utils import utc_now
from libs.common.errors import (
    AlreadyProcessedError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from libs.common.logging import get_logger
from libs.common.notifications import EventKind, NotificationDispatcher, dispatch_event
from libs.db.guard import assert_no_active_conflict, guarded_insert
from services.members_service.models import (
    ACTIVE_APPLICATION,
    ATHLETE_MEMBERSHIP,
    ApplicationActivityLog,
    ApplicationStatus,
    Athlete,
    Club,
    Coach,
    MembershipApplication,
    Profile,
    ReviewAction,
)
from services.members_service.services.application_states import (
    next_status,
    source_statuses,
)
from services.members_service.services.membership import (
    get_or_create_profile,
    refresh_membership_status,
)
from services.members_service.services.scope import (
    ensure_club_access,
    ensure_record_access,
)
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)

REQUIRED_PERSONAL_FIELDS = ("full_name", "gender", "date_of_birth", "phone_number")

_REVIEW_EVENTS = {
    ReviewAction.APPROVE: EventKind.APPLICATION_APPROVED,
    ReviewAction.REJECT: EventKind.APPLICATION_REJECTED,
    ReviewAction.REQUEST_INFO: EventKind.APPLICATION_INFO_REQUESTED,
}

_REVIEW_LOG_ACTIONS = {
    ReviewAction.APPROVE: "approved",
    ReviewAction.REJECT: "rejected",
    ReviewAction.REQUEST_INFO: "info_requested",
}


def split_full_name(full_name: str) -> tuple[str, str]:
    """Split on the first whitespace run: (first name, rest).

    A single-token name is used for both parts.
    """
    parts = full_name.strip().split(None, 1)
    if len(parts) == 2:
        return parts[0], parts[1]
    return parts[0], parts[0]


def _parse_birth_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(
            "date_of_birth must be an ISO date (YYYY-MM-DD)", field="date_of_birth"
        )


async def _log_activity(
    db: AsyncSession,
    application_id: uuid.UUID,
    action: str,
    by_user: str,
    details: Optional[dict] = None,
) -> None:
    db.add(
        ApplicationActivityLog(
            application_id=application_id,
            action=action,
            by_user=by_user,
            details=details,
        )
    )


async def count_club_coaches(db: AsyncSession, club_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count(Coach.id)).where(Coach.club_id == club_id)
    )
    return result.scalar_one()


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


async def submit_application(
    db: AsyncSession,
    *,
    user_id: str,
    club_id: uuid.UUID,
    personal_info: dict,
    documents: list,
    dispatcher: NotificationDispatcher,
    email: Optional[str] = None,
) -> MembershipApplication:
    """Create a pending application for ``user_id`` to join ``club_id``.

    Raises:
        NotFoundError: the club does not exist.
        ValidationError: the club has no coach and so cannot review.
        ConflictError: the user already has an open application (any club).
    """
    club = await db.get(Club, club_id)
    if club is None:
        raise NotFoundError("Club not found", club_id=str(club_id))

    if await count_club_coaches(db, club_id) == 0:
        raise ValidationError(
            "This club is not accepting applications yet", field="club_id"
        )

    await assert_no_active_conflict(db, ACTIVE_APPLICATION, user_id=user_id)

    await get_or_create_profile(db, user_id, email)

    application = MembershipApplication(
        user_id=user_id,
        club_id=club_id,
        status=ApplicationStatus.PENDING,
        personal_info=personal_info,
        documents=documents,
    )
    await guarded_insert(db, ACTIVE_APPLICATION, application)
    application_id = application.id

    await _log_activity(
        db, application_id, "submitted", user_id, {"club_id": str(club_id)}
    )
    await refresh_membership_status(db, user_id)
    await db.commit()
    await db.refresh(application)

    logger.info(
        "Membership application submitted",
        extra={
            "extra_fields": {
                "application_id": str(application_id),
                "user_id": user_id,
                "club_id": str(club_id),
            }
        },
    )
    await dispatch_event(
        dispatcher,
        EventKind.APPLICATION_SUBMITTED,
        {
            "application_id": str(application_id),
            "user_id": user_id,
            "club_id": str(club_id),
        },
    )
    return application


# ---------------------------------------------------------------------------
# Review
# ---------------------------------------------------------------------------


async def materialize_athlete(
    db: AsyncSession, application: MembershipApplication
) -> Athlete:
    """Create (or link) the athlete record an approved application implies.

    Idempotent: if an athlete already exists for the applicant in the
    application's club it is linked and returned unchanged. Nothing is
    committed here.
    """
    user_id = application.user_id
    club_id = application.club_id

    result = await db.execute(
        select(Athlete).where(Athlete.user_id == user_id, Athlete.club_id == club_id)
    )
    athlete = result.scalar_one_or_none()
    if athlete is not None:
        application.profile_id = athlete.id
        return athlete

    info = application.personal_info or {}
    for field in REQUIRED_PERSONAL_FIELDS:
        value = info.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"personal_info.{field} is required", field=field)

    first_name, last_name = split_full_name(info["full_name"])
    athlete = Athlete(
        user_id=user_id,
        club_id=club_id,
        first_name=first_name,
        last_name=last_name,
        nickname=info.get("nickname"),
        gender=str(info["gender"]),
        date_of_birth=_parse_birth_date(info["date_of_birth"]),
        phone_number=info["phone_number"],
        email=await _applicant_email(db, user_id),
        health_notes=info.get("medical_conditions"),
    )
    await guarded_insert(db, ATHLETE_MEMBERSHIP, athlete)
    application.profile_id = athlete.id
    return athlete


async def _applicant_email(db: AsyncSession, user_id: str) -> Optional[str]:
    result = await db.execute(select(Profile.email).where(Profile.user_id == user_id))
    return result.scalar_one_or_none()


async def _current_status(
    db: AsyncSession, application_id: uuid.UUID
) -> Optional[ApplicationStatus]:
    result = await db.execute(
        select(MembershipApplication.status).where(
            MembershipApplication.id == application_id
        )
    )
    return result.scalar_one_or_none()


async def review_application(
    db: AsyncSession,
    scope: ActorScope,
    application_id: uuid.UUID,
    action: ReviewAction,
    *,
    dispatcher: NotificationDispatcher,
    reason: Optional[str] = None,
    notes: Optional[str] = None,
) -> MembershipApplication:
    """Apply ``action`` to an open application.

    The status change is a single conditional UPDATE guarded on the source
    statuses; a reviewer that loses a race gets AlreadyProcessedError.
    """
    application = await db.get(MembershipApplication, application_id)
    if application is None:
        raise NotFoundError("Application not found")

    ensure_club_access(scope, application.club_id)

    reason = reason.strip() if reason else None
    if action in (ReviewAction.REJECT, ReviewAction.REQUEST_INFO) and not reason:
        raise ValidationError(
            f"A reason is required to {action.value.replace('_', ' ')}",
            field="reason",
        )

    target = next_status(application.status, action)

    user_id = application.user_id
    club_id = application.club_id
    prior_status = application.status
    now = utc_now()

    values: dict[str, Any] = {
        "status": target,
        "reviewed_by": scope.user_id,
        "reviewed_at": now,
        "updated_at": now,
    }
    if action == ReviewAction.REJECT:
        values["rejection_reason"] = reason
    if action == ReviewAction.REQUEST_INFO:
        values["review_notes"] = reason
    elif notes:
        values["review_notes"] = notes

    result = await db.execute(
        update(MembershipApplication)
        .where(
            MembershipApplication.id == application_id,
            MembershipApplication.status.in_(source_statuses(action)),
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        current = await _current_status(db, application_id)
        raise AlreadyProcessedError(
            "Application has already been processed",
            current_status=current.value if current else None,
        )

    log_details: dict[str, Any] = {"from": prior_status.value}
    if reason:
        log_details["reason"] = reason
    await _log_activity(
        db, application_id, _REVIEW_LOG_ACTIONS[action], scope.user_id, log_details
    )

    athlete_id = None
    if action == ReviewAction.APPROVE:
        try:
            athlete = await materialize_athlete(db, application)
        except DomainError as exc:
            await db.rollback()
            logger.warning(
                "Approval rolled back: athlete materialization failed: %s",
                exc.message,
                extra={
                    "extra_fields": {
                        "application_id": str(application_id),
                        "restored_status": prior_status.value,
                    }
                },
            )
            raise
        athlete_id = athlete.id
        await _log_activity(
            db,
            application_id,
            "profile_created",
            scope.user_id,
            {"profile_id": str(athlete_id)},
        )

    await refresh_membership_status(db, user_id)
    await db.commit()
    await db.refresh(application)

    logger.info(
        "Membership application %s",
        _REVIEW_LOG_ACTIONS[action],
        extra={
            "extra_fields": {
                "application_id": str(application_id),
                "reviewed_by": scope.user_id,
                "from": prior_status.value,
                "to": target.value,
            }
        },
    )

    payload: dict[str, Any] = {
        "application_id": str(application_id),
        "user_id": user_id,
        "club_id": str(club_id),
        "status": target.value,
    }
    if athlete_id is not None:
        payload["profile_id"] = str(athlete_id)
    if reason:
        payload["reason"] = reason
    await dispatch_event(dispatcher, _REVIEW_EVENTS[action], payload)
    return application


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def list_my_applications(
    db: AsyncSession, user_id: str
) -> list[MembershipApplication]:
    result = await db.execute(
        select(MembershipApplication)
        .where(MembershipApplication.user_id == user_id)
        .order_by(MembershipApplication.created_at.desc())
    )
    return list(result.scalars().all())


async def list_applications(
    db: AsyncSession,
    scope: ActorScope,
    status: Optional[ApplicationStatus] = None,
    club_id: Optional[uuid.UUID] = None,
) -> list[MembershipApplication]:
    """Applications visible to a reviewer, newest first."""
    if scope.is_athlete:
        raise AuthorizationError(
            "Only coaches and administrators can list applications"
        )

    query = select(MembershipApplication)
    if club_id is not None:
        ensure_club_access(scope, club_id)
        query = query.where(MembershipApplication.club_id == club_id)
    elif scope.club_ids is not None:
        if not scope.club_ids:
            return []
        query = query.where(MembershipApplication.club_id.in_(scope.club_ids))
    if status is not None:
        query = query.where(MembershipApplication.status == status)

    result = await db.execute(query.order_by(MembershipApplication.created_at.desc()))
    return list(result.scalars().all())


async def get_application(
    db: AsyncSession, scope: ActorScope, application_id: uuid.UUID
) -> MembershipApplication:
    result = await db.execute(
        select(MembershipApplication)
        .where(MembershipApplication.id == application_id)
        .options(selectinload(MembershipApplication.activity_log))
    )
    application = result.scalar_one_or_none()
    if application is None:
        raise NotFoundError("Application not found")
    ensure_record_access(scope, application.club_id, application.user_id)
    return application


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------


async def delete_application(
    db: AsyncSession, scope: ActorScope, application_id: uuid.UUID
) -> None:
    """Hard-delete an application. Administrative only; audited."""
    if not scope.is_admin:
        raise AuthorizationError("Administrator access required")

    application = await db.get(MembershipApplication, application_id)
    if application is None:
        raise NotFoundError("Application not found")

    user_id = application.user_id
    record_audit(
        db,
        actor_id=scope.user_id,
        action="application_deleted",
        entity_type="membership_application",
        entity_id=application_id,
        description=f"Deleted membership application of {user_id}",
        changes={
            "club_id": application.club_id,
            "status": application.status.value,
            "profile_id": application.profile_id,
        },
    )
    await db.delete(application)
    await db.flush()
    await refresh_membership_status(db, user_id)
    await db.commit()
