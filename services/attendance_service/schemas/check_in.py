import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.attendance_service.models import CheckInMethod, CheckInStatus


class CheckInRequest(BaseModel):
    token: Optional[str] = Field(default=None, max_length=200)
    method: CheckInMethod = CheckInMethod.QR
    # Coaches and admins checking in someone else.
    athlete_id: Optional[uuid.UUID] = None


class CheckInResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    target_id: uuid.UUID
    athlete_id: uuid.UUID
    status: CheckInStatus
    method: CheckInMethod
    checked_in_at: datetime
    already_checked_in: bool = False
