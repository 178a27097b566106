import uuid
from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from services.sessions_service.models import ActivityType


class _ScheduleBase(BaseModel):
    club_id: uuid.UUID
    title: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    start_time: time
    end_time: time
    location: str = Field(..., min_length=1, max_length=200)

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class ActivityCreate(_ScheduleBase):
    title: str = Field(..., min_length=1, max_length=200)
    activity_type: ActivityType = ActivityType.TRAINING
    activity_date: date
    max_participants: Optional[int] = Field(default=None, ge=1)
    requires_registration: bool = False
    checkin_window_before: Optional[int] = Field(default=None, ge=0, le=1440)
    checkin_window_after: Optional[int] = Field(default=None, ge=0, le=1440)


class TrainingSessionCreate(_ScheduleBase):
    session_date: date


class ActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    club_id: uuid.UUID
    title: str
    description: Optional[str] = None
    activity_type: ActivityType
    activity_date: date
    start_time: time
    end_time: time
    location: str
    max_participants: Optional[int] = None
    requires_registration: bool
    checkin_window_before: Optional[int] = None
    checkin_window_after: Optional[int] = None
    checkin_token_expires_at: Optional[datetime] = None
    created_by: str
    created_at: datetime


class TrainingSessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    club_id: uuid.UUID
    title: Optional[str] = None
    description: Optional[str] = None
    session_date: date
    start_time: time
    end_time: time
    location: str
    checkin_token_expires_at: Optional[datetime] = None
    created_by: str
    created_at: datetime


class CheckinTokenRequest(BaseModel):
    # Omit for a token that never expires.
    expires_in_minutes: Optional[int] = Field(default=None, ge=1, le=10080)


class CheckinTokenResponse(BaseModel):
    target_id: uuid.UUID
    token: str
    expires_at: Optional[datetime] = None
