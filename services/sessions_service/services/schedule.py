"""Creating activities and training sessions, and issuing check-in tokens."""

import secrets
import uuid
from datetime import timedelta
from typing import Optional, Union

from libs.auth.models import ActorScope
from libs.common.datetime_utils import utc_now
from libs.common.errors import NotFoundError
from libs.common.logging import get_logger
from services.members_service.models import Club
from services.members_service.services.scope import ensure_club_access
from services.sessions_service.models import Activity, TrainingSession
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

CheckinTarget = Union[Activity, TrainingSession]

TOKEN_BYTES = 16


async def _require_club(db: AsyncSession, scope: ActorScope, club_id: uuid.UUID):
    if await db.get(Club, club_id) is None:
        raise NotFoundError("Club not found")
    ensure_club_access(scope, club_id)


async def get_activity(db: AsyncSession, activity_id: uuid.UUID) -> Activity:
    activity = await db.get(Activity, activity_id)
    if activity is None:
        raise NotFoundError("Activity not found")
    return activity


async def get_training_session(
    db: AsyncSession, session_id: uuid.UUID
) -> TrainingSession:
    session = await db.get(TrainingSession, session_id)
    if session is None:
        raise NotFoundError("Training session not found")
    return session


async def create_activity(db: AsyncSession, scope: ActorScope, **fields) -> Activity:
    """Create an activity in a club the caller coaches (or any, for admins)."""
    await _require_club(db, scope, fields["club_id"])
    activity = Activity(created_by=scope.user_id, **fields)
    db.add(activity)
    await db.commit()
    await db.refresh(activity)

    logger.info(
        "Created activity %s",
        activity.title,
        extra={
            "extra_fields": {
                "activity_id": str(activity.id),
                "club_id": str(activity.club_id),
                "by": scope.user_id,
            }
        },
    )
    return activity


async def create_training_session(
    db: AsyncSession, scope: ActorScope, **fields
) -> TrainingSession:
    await _require_club(db, scope, fields["club_id"])
    session = TrainingSession(created_by=scope.user_id, **fields)
    db.add(session)
    await db.commit()
    await db.refresh(session)

    logger.info(
        "Created training session on %s",
        session.session_date,
        extra={
            "extra_fields": {
                "session_id": str(session.id),
                "club_id": str(session.club_id),
                "by": scope.user_id,
            }
        },
    )
    return session


async def generate_checkin_token(
    db: AsyncSession,
    scope: ActorScope,
    target: CheckinTarget,
    expires_in_minutes: Optional[int] = None,
) -> CheckinTarget:
    """Issue a fresh token for ``target``, replacing any previous one."""
    ensure_club_access(scope, target.club_id)

    target.checkin_token = secrets.token_urlsafe(TOKEN_BYTES)
    target.checkin_token_expires_at = (
        utc_now() + timedelta(minutes=expires_in_minutes)
        if expires_in_minutes
        else None
    )
    await db.commit()
    await db.refresh(target)

    logger.info(
        "Issued check-in token for %s %s",
        type(target).__name__,
        target.id,
        extra={"extra_fields": {"by": scope.user_id}},
    )
    return target
