"""Membership application endpoints."""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import ActorScope, AuthUser
from libs.common.notifications import NotificationDispatcher, get_dispatcher
from libs.common.rate_limit import submission_limit
from libs.db.session import get_async_db
from services.members_service.models import ApplicationStatus
from services.members_service.schemas import (
    ApplicationDetailResponse,
    ApplicationResponse,
    ApplicationSubmission,
    ReviewRequest,
)
from services.members_service.services import applications as service
from services.members_service.services.scope import get_actor_scope
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/applications", tags=["applications"])


@router.post(
    "", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED
)
@submission_limit
async def submit_application(
    request: Request,
    submission: ApplicationSubmission,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Apply to join a club. Only one open application per user."""
    return await service.submit_application(
        db,
        user_id=current_user.user_id,
        email=current_user.email,
        club_id=submission.club_id,
        personal_info=submission.personal_info.model_dump(mode="json"),
        documents=[doc.model_dump(mode="json") for doc in submission.documents],
        dispatcher=dispatcher,
    )


@router.get("/me", response_model=List[ApplicationResponse])
async def list_my_applications(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await service.list_my_applications(db, current_user.user_id)


@router.get("", response_model=List[ApplicationResponse])
async def list_applications(
    status_filter: Optional[ApplicationStatus] = Query(
        default=None, alias="status"
    ),
    club_id: Optional[uuid.UUID] = None,
    scope: ActorScope = Depends(get_actor_scope),
    db: AsyncSession = Depends(get_async_db),
):
    """Applications the caller may review. Coaches see their own club only."""
    return await service.list_applications(
        db, scope, status=status_filter, club_id=club_id
    )


@router.get("/{application_id}", response_model=ApplicationDetailResponse)
async def get_application(
    application_id: uuid.UUID,
    scope: ActorScope = Depends(get_actor_scope),
    db: AsyncSession = Depends(get_async_db),
):
    return await service.get_application(db, scope, application_id)


@router.post("/{application_id}/review", response_model=ApplicationResponse)
async def review_application(
    application_id: uuid.UUID,
    review: ReviewRequest,
    scope: ActorScope = Depends(get_actor_scope),
    db: AsyncSession = Depends(get_async_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Approve, reject or request more information on an application."""
    return await service.review_application(
        db,
        scope,
        application_id,
        review.action,
        reason=review.reason,
        notes=review.notes,
        dispatcher=dispatcher,
    )
