"""Identity & scope resolution.

Every workflow operation receives an ``ActorScope``; the helpers here turn
the authenticated user id into one and check it against a target record.
"""

import uuid
from typing import Optional

from fastapi import Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import ActorScope, AuthUser, Role
from libs.common.errors import AuthorizationError
from libs.db.session import get_async_db
from services.members_service.models import Coach, Profile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


async def resolve_scope(db: AsyncSession, actor_id: str) -> ActorScope:
    """Resolve role and club scope for ``actor_id``.

    Admins get the wildcard scope (``club_ids=None``). A coach is scoped to
    the one club their coach row belongs to; a coach role without such a row
    has an empty scope. Everyone else is an athlete acting on their own
    records only.
    """
    result = await db.execute(select(Profile.role).where(Profile.user_id == actor_id))
    role = result.scalar_one_or_none() or Role.ATHLETE

    if role == Role.ADMIN:
        return ActorScope(user_id=actor_id, role=role, club_ids=None)

    if role == Role.COACH:
        result = await db.execute(
            select(Coach.club_id).where(Coach.user_id == actor_id)
        )
        club_ids = frozenset(result.scalars().all())
        return ActorScope(user_id=actor_id, role=role, club_ids=club_ids)

    return ActorScope(user_id=actor_id, role=Role.ATHLETE, club_ids=frozenset())


async def get_actor_scope(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
) -> ActorScope:
    """FastAPI dependency resolving the caller's scope."""
    return await resolve_scope(db, current_user.user_id)


async def require_admin_scope(
    scope: ActorScope = Depends(get_actor_scope),
) -> ActorScope:
    if not scope.is_admin:
        raise AuthorizationError("Administrator access required")
    return scope


async def require_staff_scope(
    scope: ActorScope = Depends(get_actor_scope),
) -> ActorScope:
    """Coaches and admins only."""
    if scope.is_athlete:
        raise AuthorizationError("Coach or administrator access required")
    return scope


def ensure_club_access(scope: ActorScope, club_id: uuid.UUID) -> None:
    if not scope.includes_club(club_id):
        raise AuthorizationError("You do not have access to this club")


def ensure_record_access(
    scope: ActorScope, club_id: uuid.UUID, owner_id: Optional[str]
) -> None:
    """Athletes pass on ownership; coaches and admins on club scope."""
    if scope.is_athlete:
        if not scope.owns(owner_id):
            raise AuthorizationError("You do not have access to this record")
        return
    ensure_club_access(scope, club_id)
