"""Activity registration approval state machine.

pending -> approved | rejected      (coach or admin of the activity's club)
pending -> cancelled                (the registered athlete)

Every transition is a single conditional UPDATE on the source status; the
loser of a race gets AlreadyProcessedError. Hard removal is separate from
the state machine and always audited.
"""

import uuid
from typing import Any, Optional

from libs.audit.service import record_audit
from libs.auth.models import ActorScope
from libs.common.datetime_utils import utc_now
from libs.common.errors import (
    AlreadyProcessedError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ScopeMismatchError,
    ValidationError,
)
from libs.common.logging import get_logger
from libs.common.notifications import EventKind, NotificationDispatcher, dispatch_event
from libs.db.guard import assert_no_active_conflict, guarded_insert
from services.members_service.models import Athlete
from services.members_service.services.athletes import resolve_actor_athlete
from services.members_service.services.scope import ensure_club_access
from services.sessions_service.models import (
    ACTIVE_REGISTRATION,
    SEAT_HOLDING_STATUSES,
    Activity,
    ActivityRegistration,
    RegistrationStatus,
)
from services.sessions_service.services.schedule import get_activity
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def next_registration_status(
    current: RegistrationStatus, target: RegistrationStatus
) -> RegistrationStatus:
    """Every transition leaves ``pending``; nothing leaves a terminal status."""
    if current != RegistrationStatus.PENDING:
        raise AlreadyProcessedError(
            f"Registration is already {current.value}",
            current_status=current.value,
        )
    if target == RegistrationStatus.PENDING:
        raise ValueError("pending is not a transition target")
    return target


async def _get_registration(
    db: AsyncSession, registration_id: uuid.UUID
) -> ActivityRegistration:
    registration = await db.get(ActivityRegistration, registration_id)
    if registration is None:
        raise NotFoundError("Registration not found")
    return registration


async def count_seats_taken(db: AsyncSession, activity_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count(ActivityRegistration.id)).where(
            ActivityRegistration.activity_id == activity_id,
            ActivityRegistration.status.in_(SEAT_HOLDING_STATUSES),
        )
    )
    return result.scalar_one()


async def register_for_activity(
    db: AsyncSession,
    scope: ActorScope,
    activity_id: uuid.UUID,
    *,
    dispatcher: NotificationDispatcher,
    notes: Optional[str] = None,
) -> ActivityRegistration:
    """Request a place on an activity for the caller's athlete record."""
    activity = await get_activity(db, activity_id)
    if not activity.requires_registration:
        raise ValidationError(
            "This activity does not take registrations", field="activity_id"
        )

    athlete = await resolve_actor_athlete(db, scope.user_id, activity.club_id)
    if athlete.club_id != activity.club_id:
        raise ScopeMismatchError(
            "You can only register for your own club's activities"
        )
    athlete_id = athlete.id

    await assert_no_active_conflict(
        db, ACTIVE_REGISTRATION, activity_id=activity_id, athlete_id=athlete_id
    )

    if activity.max_participants is not None:
        # Lock the activity row so concurrent registrations count seats in turn.
        await db.execute(
            select(Activity).where(Activity.id == activity_id).with_for_update()
        )
        taken = await count_seats_taken(db, activity_id)
        if taken >= activity.max_participants:
            raise ConflictError(
                "This activity is full", max_participants=activity.max_participants
            )

    registration = ActivityRegistration(
        activity_id=activity_id,
        athlete_id=athlete_id,
        status=RegistrationStatus.PENDING,
        athlete_notes=notes,
    )
    await guarded_insert(db, ACTIVE_REGISTRATION, registration)
    await db.commit()
    await db.refresh(registration)

    logger.info(
        "Registration created",
        extra={
            "extra_fields": {
                "registration_id": str(registration.id),
                "activity_id": str(activity_id),
                "athlete_id": str(athlete_id),
            }
        },
    )
    await dispatch_event(
        dispatcher,
        EventKind.REGISTRATION_CREATED,
        {
            "registration_id": str(registration.id),
            "activity_id": str(activity_id),
            "athlete_id": str(athlete_id),
        },
    )
    return registration


async def _transition(
    db: AsyncSession,
    registration: ActivityRegistration,
    target: RegistrationStatus,
    values: dict[str, Any],
) -> None:
    """Conditionally move ``registration`` out of pending. Does not commit."""
    next_registration_status(registration.status, target)
    registration_id = registration.id

    result = await db.execute(
        update(ActivityRegistration)
        .where(
            ActivityRegistration.id == registration_id,
            ActivityRegistration.status == RegistrationStatus.PENDING,
        )
        .values(status=target, updated_at=utc_now(), **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        current = await db.execute(
            select(ActivityRegistration.status).where(
                ActivityRegistration.id == registration_id
            )
        )
        status = current.scalar_one_or_none()
        raise AlreadyProcessedError(
            "Registration has already been processed",
            current_status=status.value if status else None,
        )


def _payload(registration: ActivityRegistration, **extra: Any) -> dict[str, Any]:
    payload = {
        "registration_id": str(registration.id),
        "activity_id": str(registration.activity_id),
        "athlete_id": str(registration.athlete_id),
        "status": registration.status.value,
    }
    payload.update(extra)
    return payload


async def cancel_registration(
    db: AsyncSession,
    scope: ActorScope,
    registration_id: uuid.UUID,
    *,
    dispatcher: NotificationDispatcher,
) -> ActivityRegistration:
    """The registered athlete withdraws a pending registration."""
    registration = await _get_registration(db, registration_id)
    athlete = await db.get(Athlete, registration.athlete_id)
    if athlete is None or not scope.owns(athlete.user_id):
        raise AuthorizationError("You can only cancel your own registration")

    await _transition(db, registration, RegistrationStatus.CANCELLED, {})
    await db.commit()
    await db.refresh(registration)

    logger.info(
        "Registration cancelled",
        extra={"extra_fields": {"registration_id": str(registration_id)}},
    )
    await dispatch_event(
        dispatcher, EventKind.REGISTRATION_CANCELLED, _payload(registration)
    )
    return registration


async def _reviewable(
    db: AsyncSession, scope: ActorScope, registration_id: uuid.UUID
) -> tuple[ActivityRegistration, Activity]:
    registration = await _get_registration(db, registration_id)
    activity = await get_activity(db, registration.activity_id)
    ensure_club_access(scope, activity.club_id)
    return registration, activity


async def approve_registration(
    db: AsyncSession,
    scope: ActorScope,
    registration_id: uuid.UUID,
    *,
    dispatcher: NotificationDispatcher,
    notes: Optional[str] = None,
) -> ActivityRegistration:
    registration, _ = await _reviewable(db, scope, registration_id)
    now = utc_now()
    await _transition(
        db,
        registration,
        RegistrationStatus.APPROVED,
        {"reviewed_by": scope.user_id, "reviewed_at": now, "coach_notes": notes},
    )
    record_audit(
        db,
        actor_id=scope.user_id,
        action="registration_approved",
        entity_type="activity_registration",
        entity_id=registration_id,
        description="Approved activity registration",
        changes={"status": {"from": "pending", "to": "approved"}, "notes": notes},
    )
    await db.commit()
    await db.refresh(registration)

    logger.info(
        "Registration approved",
        extra={
            "extra_fields": {
                "registration_id": str(registration_id),
                "by": scope.user_id,
            }
        },
    )
    await dispatch_event(
        dispatcher, EventKind.REGISTRATION_APPROVED, _payload(registration)
    )
    return registration


async def reject_registration(
    db: AsyncSession,
    scope: ActorScope,
    registration_id: uuid.UUID,
    *,
    dispatcher: NotificationDispatcher,
    reason: Optional[str] = None,
) -> ActivityRegistration:
    registration, _ = await _reviewable(db, scope, registration_id)

    reason = reason.strip() if reason else None
    if not reason:
        raise ValidationError("A reason is required to reject", field="reason")

    await _transition(
        db,
        registration,
        RegistrationStatus.REJECTED,
        {
            "reviewed_by": scope.user_id,
            "reviewed_at": utc_now(),
            "rejection_reason": reason,
        },
    )
    record_audit(
        db,
        actor_id=scope.user_id,
        action="registration_rejected",
        entity_type="activity_registration",
        entity_id=registration_id,
        description="Rejected activity registration",
        changes={"status": {"from": "pending", "to": "rejected"}, "reason": reason},
    )
    await db.commit()
    await db.refresh(registration)

    logger.info(
        "Registration rejected",
        extra={
            "extra_fields": {
                "registration_id": str(registration_id),
                "by": scope.user_id,
            }
        },
    )
    await dispatch_event(
        dispatcher,
        EventKind.REGISTRATION_REJECTED,
        _payload(registration, reason=reason),
    )
    return registration


async def remove_athlete_from_activity(
    db: AsyncSession,
    scope: ActorScope,
    registration_id: uuid.UUID,
    *,
    dispatcher: NotificationDispatcher,
) -> None:
    """Hard-delete a registration whatever its status. Audited."""
    registration, activity = await _reviewable(db, scope, registration_id)
    snapshot = {
        "activity_id": registration.activity_id,
        "athlete_id": registration.athlete_id,
        "status": registration.status.value,
        "athlete_notes": registration.athlete_notes,
        "coach_notes": registration.coach_notes,
        "rejection_reason": registration.rejection_reason,
        "registered_at": registration.registered_at.isoformat(),
    }
    payload = _payload(registration)

    record_audit(
        db,
        actor_id=scope.user_id,
        action="registration_removed",
        entity_type="activity_registration",
        entity_id=registration_id,
        description=f"Removed athlete from activity {activity.title}",
        changes={"deleted": snapshot},
    )
    await db.delete(registration)
    await db.commit()

    logger.info(
        "Athlete removed from activity",
        extra={
            "extra_fields": {
                "registration_id": str(registration_id),
                "activity_id": str(activity.id),
                "by": scope.user_id,
            }
        },
    )
    await dispatch_event(dispatcher, EventKind.REGISTRATION_REMOVED, payload)


async def list_activity_registrations(
    db: AsyncSession, scope: ActorScope, activity_id: uuid.UUID
) -> list[ActivityRegistration]:
    activity = await get_activity(db, activity_id)
    ensure_club_access(scope, activity.club_id)
    result = await db.execute(
        select(ActivityRegistration)
        .where(ActivityRegistration.activity_id == activity_id)
        .order_by(ActivityRegistration.registered_at)
    )
    return list(result.scalars().all())
