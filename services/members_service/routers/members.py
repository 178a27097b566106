"""Member self-service endpoints."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.members_service.schemas import AccessStatusResponse
from services.members_service.services.membership import get_access_status
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/members", tags=["members"])


@router.get("/me/access", response_model=AccessStatusResponse)
async def get_my_access(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Whether the caller can use member features, and why not if not."""
    return await get_access_status(db, current_user.user_id)
