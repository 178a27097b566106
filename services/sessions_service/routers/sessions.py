"""Training session endpoints."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, status
from libs.auth.models import ActorScope
from libs.db.session import get_async_db
from services.members_service.services.scope import require_staff_scope
from services.sessions_service.schemas import (
    CheckinTokenRequest,
    CheckinTokenResponse,
    TrainingSessionCreate,
    TrainingSessionResponse,
)
from services.sessions_service.services import schedule
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post(
    "", response_model=TrainingSessionResponse, status_code=status.HTTP_201_CREATED
)
async def create_training_session(
    session_in: TrainingSessionCreate,
    scope: ActorScope = Depends(require_staff_scope),
    db: AsyncSession = Depends(get_async_db),
):
    return await schedule.create_training_session(
        db, scope, **session_in.model_dump()
    )


@router.post("/{session_id}/checkin-token", response_model=CheckinTokenResponse)
async def generate_session_token(
    session_id: uuid.UUID,
    token_in: Optional[CheckinTokenRequest] = None,
    scope: ActorScope = Depends(require_staff_scope),
    db: AsyncSession = Depends(get_async_db),
):
    session = await schedule.get_training_session(db, session_id)
    session = await schedule.generate_checkin_token(
        db,
        scope,
        session,
        expires_in_minutes=token_in.expires_in_minutes if token_in else None,
    )
    return CheckinTokenResponse(
        target_id=session.id,
        token=session.checkin_token,
        expires_at=session.checkin_token_expires_at,
    )
