import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ClubCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    sport_type: str = Field(..., min_length=2, max_length=50)
    description: Optional[str] = None


class ClubResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    sport_type: str
    description: Optional[str] = None
    created_at: datetime


class AvailableClubResponse(ClubResponse):
    coach_count: int = 0
    accepting_applications: bool = False


class CoachAssignment(BaseModel):
    user_id: str = Field(..., min_length=1)
    display_name: Optional[str] = None


class CoachResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: str
    club_id: uuid.UUID
    display_name: Optional[str] = None
    created_at: datetime
