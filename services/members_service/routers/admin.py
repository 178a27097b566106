"""Administrative endpoints: clubs, coach assignment, application cleanup."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.models import ActorScope
from libs.db.session import get_async_db
from services.members_service.schemas import (
    ClubCreate,
    ClubResponse,
    CoachAssignment,
    CoachResponse,
)
from services.members_service.services.applications import delete_application
from services.members_service.services.clubs import assign_coach, create_club
from services.members_service.services.scope import require_admin_scope
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/clubs", response_model=ClubResponse, status_code=status.HTTP_201_CREATED
)
async def create_club_endpoint(
    club_in: ClubCreate,
    scope: ActorScope = Depends(require_admin_scope),
    db: AsyncSession = Depends(get_async_db),
):
    return await create_club(
        db,
        scope,
        name=club_in.name,
        sport_type=club_in.sport_type,
        description=club_in.description,
    )


@router.post(
    "/clubs/{club_id}/coaches",
    response_model=CoachResponse,
    status_code=status.HTTP_201_CREATED,
)
async def assign_coach_endpoint(
    club_id: uuid.UUID,
    assignment: CoachAssignment,
    scope: ActorScope = Depends(require_admin_scope),
    db: AsyncSession = Depends(get_async_db),
):
    return await assign_coach(
        db,
        scope,
        club_id,
        user_id=assignment.user_id,
        display_name=assignment.display_name,
    )


@router.delete(
    "/applications/{application_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def delete_application_endpoint(
    application_id: uuid.UUID,
    scope: ActorScope = Depends(require_admin_scope),
    db: AsyncSession = Depends(get_async_db),
):
    """Hard-delete an application (cleanup only; audited)."""
    await delete_application(db, scope, application_id)
