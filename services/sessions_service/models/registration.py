import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.guard import ConflictRule
from libs.db.types import UTCDateTime
from services.sessions_service.models.enums import RegistrationStatus, enum_values
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

_NOT_CANCELLED_SQL = "status <> 'cancelled'"


class ActivityRegistration(Base):
    """An athlete's request for a place on a registration-gated activity."""

    __tablename__ = "activity_registrations"

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
    status: Mapped[RegistrationStatus] = mapped_column(
        SAEnum(
            RegistrationStatus,
            name="registration_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
        default=RegistrationStatus.PENDING,
    )
    athlete_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    coach_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(), nullable=True
    )

    registered_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        Index(
            "uq_activity_registrations_active",
            "activity_id",
            "athlete_id",
            unique=True,
            postgresql_where=text(_NOT_CANCELLED_SQL),
            sqlite_where=text(_NOT_CANCELLED_SQL),
        ),
    )

    def __repr__(self):
        return (
            f"<ActivityRegistration {self.activity_id}/{self.athlete_id} "
            f"{self.status}>"
        )


ACTIVE_REGISTRATION = ConflictRule(
    kind="activity_registration",
    model=ActivityRegistration,
    key_columns=("activity_id", "athlete_id"),
    active_clause=lambda: ActivityRegistration.status != RegistrationStatus.CANCELLED,
    message="Athlete is already registered for this activity",
)
