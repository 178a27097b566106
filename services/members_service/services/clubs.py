"""Clubs and coach assignment."""

import uuid
from typing import Optional

from libs.audit.service import record_audit
from libs.auth.models import ActorScope, Role
from libs.common.errors import AuthorizationError, ConflictError, NotFoundError
from libs.common.logging import get_logger
from libs.db.guard import assert_no_active_conflict, guarded_insert
from services.members_service.models import CLUB_NAME, Club, Coach
from services.members_service.services.membership import get_or_create_profile
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def list_available_clubs(db: AsyncSession) -> list[dict]:
    """All clubs with their coach count, alphabetically.

    A club accepts applications only once it has at least one coach to
    review them.
    """
    query = (
        select(Club, func.count(Coach.id))
        .outerjoin(Coach, Coach.club_id == Club.id)
        .group_by(Club.id)
        .order_by(Club.name)
    )
    result = await db.execute(query)

    clubs = []
    for club, coach_count in result.all():
        clubs.append(
            {
                "id": club.id,
                "name": club.name,
                "sport_type": club.sport_type,
                "description": club.description,
                "created_at": club.created_at,
                "coach_count": coach_count,
                "accepting_applications": coach_count > 0,
            }
        )
    return clubs


async def create_club(
    db: AsyncSession,
    scope: ActorScope,
    *,
    name: str,
    sport_type: str,
    description: Optional[str] = None,
) -> Club:
    if not scope.is_admin:
        raise AuthorizationError("Administrator access required")

    name = name.strip()
    await assert_no_active_conflict(db, CLUB_NAME, name=name)
    club = Club(name=name, sport_type=sport_type.strip(), description=description)
    await guarded_insert(db, CLUB_NAME, club)
    await db.commit()
    await db.refresh(club)

    logger.info(
        "Created club %s",
        club.name,
        extra={"extra_fields": {"club_id": str(club.id), "by": scope.user_id}},
    )
    return club


async def assign_coach(
    db: AsyncSession,
    scope: ActorScope,
    club_id: uuid.UUID,
    *,
    user_id: str,
    display_name: Optional[str] = None,
) -> Coach:
    """Make ``user_id`` a coach of ``club_id``.

    A coach belongs to exactly one club. Re-assigning to the same club
    returns the existing coach row; assigning to a different club is a
    conflict.
    """
    if not scope.is_admin:
        raise AuthorizationError("Administrator access required")

    club = await db.get(Club, club_id)
    if club is None:
        raise NotFoundError("Club not found")

    result = await db.execute(select(Coach).where(Coach.user_id == user_id))
    existing = result.scalar_one_or_none()
    if existing is not None:
        if existing.club_id == club_id:
            return existing
        raise ConflictError(
            "Coach is already assigned to another club",
            club_id=str(existing.club_id),
        )

    profile = await get_or_create_profile(db, user_id)
    if profile.role != Role.ADMIN:
        profile.role = Role.COACH
    if display_name and not profile.full_name:
        profile.full_name = display_name

    coach = Coach(user_id=user_id, club_id=club_id, display_name=display_name)
    db.add(coach)
    await db.flush()
    record_audit(
        db,
        actor_id=scope.user_id,
        action="coach_assigned",
        entity_type="coach",
        entity_id=coach.id,
        description=f"Assigned {user_id} as coach of {club.name}",
        changes={"club_id": club_id, "user_id": user_id},
    )
    await db.commit()
    await db.refresh(coach)

    logger.info(
        "Assigned coach %s to club %s",
        user_id,
        club_id,
        extra={"extra_fields": {"coach_id": str(coach.id), "by": scope.user_id}},
    )
    return coach
