"""Scheduled club activities and training sessions.

Both carry an optional check-in verification token; schedules are stored as
a local date plus wall-clock times on the club's clock.
"""

import uuid
from datetime import date, datetime, time
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.sessions_service.models.enums import ActivityType, enum_values
from sqlalchemy import Boolean, Date
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, String, Text, Time, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class Activity(Base):
    __tablename__ = "activities"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    club_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clubs.id", ondelete="CASCADE"), index=True, nullable=False
    )
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    activity_type: Mapped[ActivityType] = mapped_column(
        SAEnum(
            ActivityType,
            name="activity_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
        default=ActivityType.TRAINING,
    )

    # === Schedule (club-local) ===
    activity_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    location: Mapped[str] = mapped_column(String, nullable=False)

    # === Registration ===
    max_participants: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    requires_registration: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    # === Check-in ===
    checkin_token: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    checkin_token_expires_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(), nullable=True
    )
    # Minutes before start / after end during which check-in is accepted.
    checkin_window_before: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )
    checkin_window_after: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )

    created_by: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<Activity {self.title} {self.activity_date}>"


class TrainingSession(Base):
    __tablename__ = "training_sessions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    club_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clubs.id", ondelete="CASCADE"), index=True, nullable=False
    )
    title: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    session_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    location: Mapped[str] = mapped_column(String, nullable=False)

    checkin_token: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    checkin_token_expires_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(), nullable=True
    )

    created_by: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<TrainingSession {self.session_date} {self.start_time}>"
