"""Membership application request and response schemas."""

import re
import uuid
from datetime import date, datetime
from typing import Any, Optional

from libs.common.datetime_utils import utc_now
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from services.members_service.models.enums import (
    ApplicationStatus,
    DocumentType,
    Gender,
    MembershipStatus,
    ReviewAction,
)

PHONE_PATTERN = re.compile(r"^0\d{2}-\d{3}-\d{4}$")

MIN_APPLICANT_AGE = 5
MAX_APPLICANT_AGE = 100


def _age_on(birth: date, today: date) -> int:
    years = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        years -= 1
    return years


# === Submission ===


class PersonalInfo(BaseModel):
    """Applicant details, stored verbatim on the application."""

    full_name: str = Field(..., min_length=2, max_length=100)
    nickname: Optional[str] = Field(default=None, max_length=50)
    gender: Gender
    date_of_birth: date
    phone_number: str
    address: str = Field(..., min_length=10, max_length=500)
    emergency_contact: str
    blood_type: Optional[str] = None
    medical_conditions: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("full_name")
    @classmethod
    def strip_full_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("full_name must be at least 2 characters")
        return value

    @field_validator("phone_number", "emergency_contact")
    @classmethod
    def check_phone(cls, value: str) -> str:
        value = value.strip()
        if not PHONE_PATTERN.match(value):
            raise ValueError("phone numbers must look like 0XX-XXX-XXXX")
        return value

    @field_validator("date_of_birth")
    @classmethod
    def check_age(cls, value: date) -> date:
        age = _age_on(value, utc_now().date())
        if age < MIN_APPLICANT_AGE or age > MAX_APPLICANT_AGE:
            raise ValueError(
                f"applicant age must be between {MIN_APPLICANT_AGE} "
                f"and {MAX_APPLICANT_AGE}"
            )
        return value


class DocumentEntry(BaseModel):
    type: DocumentType
    url: str = Field(..., min_length=1)
    file_name: str = Field(..., min_length=1)
    file_size: int = Field(..., gt=0)
    uploaded_at: Optional[datetime] = None


class ApplicationSubmission(BaseModel):
    club_id: uuid.UUID
    personal_info: PersonalInfo
    documents: list[DocumentEntry]

    @model_validator(mode="after")
    def require_each_document_once(self):
        provided = [doc.type for doc in self.documents]
        if sorted(provided) != sorted(DocumentType):
            raise ValueError(
                "documents must contain exactly one each of: "
                + ", ".join(t.value for t in DocumentType)
            )
        return self


# === Review ===


class ReviewRequest(BaseModel):
    action: ReviewAction
    reason: Optional[str] = Field(default=None, max_length=1000)
    notes: Optional[str] = Field(default=None, max_length=1000)


# === Responses ===


class ActivityLogEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    action: str
    by_user: str
    details: Optional[dict[str, Any]] = None
    created_at: datetime


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: str
    club_id: uuid.UUID
    status: ApplicationStatus
    personal_info: dict[str, Any]
    documents: list[dict[str, Any]]
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    review_notes: Optional[str] = None
    profile_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime


class ApplicationDetailResponse(ApplicationResponse):
    activity_log: list[ActivityLogEntry] = []


class AccessStatusResponse(BaseModel):
    has_access: bool
    membership_status: Optional[MembershipStatus] = None
    reason: Optional[str] = None
    application_id: Optional[uuid.UUID] = None
    club_name: Optional[str] = None
    rejection_reason: Optional[str] = None
