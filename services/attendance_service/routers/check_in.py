"""Check-in endpoints for activities and training sessions."""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, Response, status
from libs.auth.models import ActorScope
from libs.common.errors import AuthorizationError
from libs.common.notifications import NotificationDispatcher, get_dispatcher
from libs.common.rate_limit import check_in_limit
from libs.db.session import get_async_db
from services.attendance_service.models import CheckInMethod, CheckInTargetKind
from services.attendance_service.schemas import CheckInRequest, CheckInResponse
from services.attendance_service.services import check_in as service
from services.members_service.services.athletes import resolve_actor_athlete
from services.members_service.services.scope import (
    ensure_club_access,
    get_actor_scope,
    require_staff_scope,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/attendance", tags=["attendance"])


def _to_response(record, already_checked_in: bool = False) -> CheckInResponse:
    return CheckInResponse(
        id=record.id,
        target_id=record.target_id,
        athlete_id=record.athlete_id,
        status=record.status,
        method=record.method,
        checked_in_at=record.checked_in_at,
        already_checked_in=already_checked_in,
    )


async def _record_check_in(
    kind: CheckInTargetKind,
    target_id: uuid.UUID,
    check_in_in: CheckInRequest,
    response: Response,
    scope: ActorScope,
    db: AsyncSession,
    dispatcher: NotificationDispatcher,
) -> CheckInResponse:
    target = await service.load_target(db, kind, target_id)
    method = check_in_in.method

    if scope.is_athlete or check_in_in.athlete_id is None:
        athlete = await resolve_actor_athlete(db, scope.user_id, target.club_id)
        if check_in_in.athlete_id is not None and check_in_in.athlete_id != athlete.id:
            raise AuthorizationError("Athletes can only check themselves in")
        athlete_id = athlete.id
        if scope.is_athlete:
            method = CheckInMethod.QR
    else:
        ensure_club_access(scope, target.club_id)
        athlete_id = check_in_in.athlete_id

    result = await service.check_in(
        db,
        kind,
        target_id,
        athlete_id,
        check_in_in.token,
        method=method,
        dispatcher=dispatcher,
    )
    if result.already_checked_in:
        response.status_code = status.HTTP_200_OK
    return _to_response(result.record, result.already_checked_in)


@router.post(
    "/activities/{activity_id}/check-in",
    response_model=CheckInResponse,
    status_code=status.HTTP_201_CREATED,
)
@check_in_limit
async def check_in_to_activity(
    request: Request,
    response: Response,
    activity_id: uuid.UUID,
    check_in_in: CheckInRequest,
    scope: ActorScope = Depends(get_actor_scope),
    db: AsyncSession = Depends(get_async_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Check in to an activity. Repeats return the original check-in (200)."""
    return await _record_check_in(
        CheckInTargetKind.ACTIVITY,
        activity_id,
        check_in_in,
        response,
        scope,
        db,
        dispatcher,
    )


@router.post(
    "/sessions/{session_id}/check-in",
    response_model=CheckInResponse,
    status_code=status.HTTP_201_CREATED,
)
@check_in_limit
async def check_in_to_session(
    request: Request,
    response: Response,
    session_id: uuid.UUID,
    check_in_in: CheckInRequest,
    scope: ActorScope = Depends(get_actor_scope),
    db: AsyncSession = Depends(get_async_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return await _record_check_in(
        CheckInTargetKind.SESSION,
        session_id,
        check_in_in,
        response,
        scope,
        db,
        dispatcher,
    )


@router.get(
    "/activities/{activity_id}/check-ins", response_model=List[CheckInResponse]
)
async def list_activity_check_ins(
    activity_id: uuid.UUID,
    scope: ActorScope = Depends(require_staff_scope),
    db: AsyncSession = Depends(get_async_db),
):
    records = await service.list_check_ins(
        db, scope, CheckInTargetKind.ACTIVITY, activity_id
    )
    return [_to_response(record) for record in records]


@router.get("/sessions/{session_id}/check-ins", response_model=List[CheckInResponse])
async def list_session_check_ins(
    session_id: uuid.UUID,
    scope: ActorScope = Depends(require_staff_scope),
    db: AsyncSession = Depends(get_async_db),
):
    records = await service.list_check_ins(
        db, scope, CheckInTargetKind.SESSION, session_id
    )
    return [_to_response(record) for record in records]


async def _my_check_in(
    kind: CheckInTargetKind,
    target_id: uuid.UUID,
    scope: ActorScope,
    db: AsyncSession,
) -> Optional[CheckInResponse]:
    target = await service.load_target(db, kind, target_id)
    athlete = await resolve_actor_athlete(db, scope.user_id, target.club_id)
    record = await service.get_my_check_in(db, kind, target_id, athlete.id)
    return _to_response(record, True) if record is not None else None


@router.get(
    "/activities/{activity_id}/check-ins/me",
    response_model=Optional[CheckInResponse],
)
async def get_my_activity_check_in(
    activity_id: uuid.UUID,
    scope: ActorScope = Depends(get_actor_scope),
    db: AsyncSession = Depends(get_async_db),
):
    """The caller's check-in for an activity, or null."""
    return await _my_check_in(CheckInTargetKind.ACTIVITY, activity_id, scope, db)


@router.get(
    "/sessions/{session_id}/check-ins/me",
    response_model=Optional[CheckInResponse],
)
async def get_my_session_check_in(
    session_id: uuid.UUID,
    scope: ActorScope = Depends(get_actor_scope),
    db: AsyncSession = Depends(get_async_db),
):
    return await _my_check_in(CheckInTargetKind.SESSION, session_id, scope, db)
