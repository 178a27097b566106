import uuid

from libs.common.errors import NotFoundError
from services.members_service.models import Athlete
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


async def get_athlete(db: AsyncSession, athlete_id: uuid.UUID) -> Athlete:
    athlete = await db.get(Athlete, athlete_id)
    if athlete is None:
        raise NotFoundError("Athlete not found")
    return athlete


async def resolve_actor_athlete(
    db: AsyncSession, user_id: str, club_id: uuid.UUID
) -> Athlete:
    """The user's athlete record for ``club_id``.

    Falls back to any athlete record the user has so the caller's club check
    reports the mismatch instead of a missing profile.
    """
    result = await db.execute(
        select(Athlete)
        .where(Athlete.user_id == user_id)
        .order_by((Athlete.club_id == club_id).desc(), Athlete.created_at)
        .limit(1)
    )
    athlete = result.scalar_one_or_none()
    if athlete is None:
        raise NotFoundError("No athlete profile found for this user")
    return athlete
