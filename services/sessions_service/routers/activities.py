"""Activity endpoints: scheduling, check-in tokens and registrations."""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from libs.auth.models import ActorScope
from libs.common.notifications import NotificationDispatcher, get_dispatcher
from libs.db.session import get_async_db
from services.members_service.services.scope import (
    get_actor_scope,
    require_staff_scope,
)
from services.sessions_service.schemas import (
    ActivityCreate,
    ActivityResponse,
    CheckinTokenRequest,
    CheckinTokenResponse,
    RegistrationCreate,
    RegistrationResponse,
)
from services.sessions_service.services import registrations, schedule
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/activities", tags=["activities"])


@router.post("", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
async def create_activity(
    activity_in: ActivityCreate,
    scope: ActorScope = Depends(require_staff_scope),
    db: AsyncSession = Depends(get_async_db),
):
    return await schedule.create_activity(db, scope, **activity_in.model_dump())


@router.post("/{activity_id}/checkin-token", response_model=CheckinTokenResponse)
async def generate_activity_token(
    activity_id: uuid.UUID,
    token_in: Optional[CheckinTokenRequest] = None,
    scope: ActorScope = Depends(require_staff_scope),
    db: AsyncSession = Depends(get_async_db),
):
    """Issue a new check-in token; the previous one stops working."""
    activity = await schedule.get_activity(db, activity_id)
    activity = await schedule.generate_checkin_token(
        db,
        scope,
        activity,
        expires_in_minutes=token_in.expires_in_minutes if token_in else None,
    )
    return CheckinTokenResponse(
        target_id=activity.id,
        token=activity.checkin_token,
        expires_at=activity.checkin_token_expires_at,
    )


@router.post(
    "/{activity_id}/registrations",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_for_activity(
    activity_id: uuid.UUID,
    registration_in: Optional[RegistrationCreate] = None,
    scope: ActorScope = Depends(get_actor_scope),
    db: AsyncSession = Depends(get_async_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return await registrations.register_for_activity(
        db,
        scope,
        activity_id,
        notes=registration_in.notes if registration_in else None,
        dispatcher=dispatcher,
    )


@router.get(
    "/{activity_id}/registrations", response_model=List[RegistrationResponse]
)
async def list_activity_registrations(
    activity_id: uuid.UUID,
    scope: ActorScope = Depends(require_staff_scope),
    db: AsyncSession = Depends(get_async_db),
):
    return await registrations.list_activity_registrations(db, scope, activity_id)
