"""Check-in records. Immutable once written; one per (target, athlete)."""

import uuid
from datetime import datetime

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.guard import ConflictRule
from libs.db.types import UTCDateTime
from services.attendance_service.models.enums import (
    CheckInMethod,
    CheckInStatus,
    enum_values,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column


def _status_column():
    return mapped_column(
        SAEnum(
            CheckInStatus,
            name="check_in_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )


def _method_column():
    return mapped_column(
        SAEnum(
            CheckInMethod,
            name="check_in_method_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
        default=CheckInMethod.QR,
    )


class ActivityCheckIn(Base):
    __tablename__ = "activity_check_ins"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    activity_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("activities.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    athlete_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("athletes.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    status: Mapped[CheckInStatus] = _status_column()
    method: Mapped[CheckInMethod] = _method_column()
    checked_in_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=utc_now
    )

    __table_args__ = (
        UniqueConstraint(
            "activity_id", "athlete_id", name="uq_activity_check_ins_activity_athlete"
        ),
    )

    @property
    def target_id(self) -> uuid.UUID:
        return self.activity_id


class SessionCheckIn(Base):
    __tablename__ = "session_check_ins"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("training_sessions.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    athlete_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("athletes.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    status: Mapped[CheckInStatus] = _status_column()
    method: Mapped[CheckInMethod] = _method_column()
    checked_in_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=utc_now
    )

    __table_args__ = (
        UniqueConstraint(
            "session_id", "athlete_id", name="uq_session_check_ins_session_athlete"
        ),
    )

    @property
    def target_id(self) -> uuid.UUID:
        return self.session_id


ACTIVITY_CHECK_IN = ConflictRule(
    kind="activity_check_in",
    model=ActivityCheckIn,
    key_columns=("activity_id", "athlete_id"),
    message="Athlete has already checked in to this activity",
)

SESSION_CHECK_IN = ConflictRule(
    kind="session_check_in",
    model=SessionCheckIn,
    key_columns=("session_id", "athlete_id"),
    message="Athlete has already checked in to this session",
)
