import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.sessions_service.models import RegistrationStatus


class RegistrationCreate(BaseModel):
    notes: Optional[str] = Field(default=None, max_length=1000)


class RegistrationApprove(BaseModel):
    notes: Optional[str] = Field(default=None, max_length=1000)


class RegistrationReject(BaseModel):
    reason: str = Field(..., min_length=1, max_length=1000)


class RegistrationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    activity_id: uuid.UUID
    athlete_id: uuid.UUID
    status: RegistrationStatus
    athlete_notes: Optional[str] = None
    coach_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    registered_at: datetime
    updated_at: datetime
