"""Registration transitions."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, status
from libs.auth.models import ActorScope
from libs.common.notifications import NotificationDispatcher, get_dispatcher
from libs.db.session import get_async_db
from services.members_service.services.scope import (
    get_actor_scope,
    require_staff_scope,
)
from services.sessions_service.schemas import (
    RegistrationApprove,
    RegistrationReject,
    RegistrationResponse,
)
from services.sessions_service.services import registrations as service
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/registrations", tags=["registrations"])


@router.post("/{registration_id}/cancel", response_model=RegistrationResponse)
async def cancel_registration(
    registration_id: uuid.UUID,
    scope: ActorScope = Depends(get_actor_scope),
    db: AsyncSession = Depends(get_async_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return await service.cancel_registration(
        db, scope, registration_id, dispatcher=dispatcher
    )


@router.post("/{registration_id}/approve", response_model=RegistrationResponse)
async def approve_registration(
    registration_id: uuid.UUID,
    approve_in: Optional[RegistrationApprove] = None,
    scope: ActorScope = Depends(require_staff_scope),
    db: AsyncSession = Depends(get_async_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return await service.approve_registration(
        db,
        scope,
        registration_id,
        notes=approve_in.notes if approve_in else None,
        dispatcher=dispatcher,
    )


@router.post("/{registration_id}/reject", response_model=RegistrationResponse)
async def reject_registration(
    registration_id: uuid.UUID,
    reject_in: RegistrationReject,
    scope: ActorScope = Depends(require_staff_scope),
    db: AsyncSession = Depends(get_async_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return await service.reject_registration(
        db, scope, registration_id, reason=reject_in.reason, dispatcher=dispatcher
    )


@router.delete("/{registration_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_athlete_from_activity(
    registration_id: uuid.UUID,
    scope: ActorScope = Depends(require_staff_scope),
    db: AsyncSession = Depends(get_async_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Remove an athlete from an activity regardless of registration status."""
    await service.remove_athlete_from_activity(
        db, scope, registration_id, dispatcher=dispatcher
    )
