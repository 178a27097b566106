"""Public club directory."""

from typing import List

from fastapi import APIRouter, Depends
from libs.db.session import get_async_db
from services.members_service.schemas import AvailableClubResponse
from services.members_service.services.clubs import list_available_clubs
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/clubs", tags=["clubs"])


@router.get("", response_model=List[AvailableClubResponse])
async def get_available_clubs(db: AsyncSession = Depends(get_async_db)):
    """List clubs and whether each is currently accepting applications."""
    return await list_available_clubs(db)
