"""Identity and club membership models: profiles, clubs, coaches, athletes."""

import uuid
from datetime import date, datetime
from typing import Optional

from libs.auth.models import Role
from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.guard import ConflictRule
from libs.db.types import UTCDateTime
from services.members_service.models.enums import MembershipStatus, enum_values
from sqlalchemy import Date
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship


class Profile(Base):
    """One row per authenticated user; carries role and membership flag."""

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(
        String, unique=True, index=True, nullable=False
    )
    email: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    full_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    role: Mapped[Role] = mapped_column(
        SAEnum(
            Role,
            name="user_role_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
        default=Role.ATHLETE,
    )
    membership_status: Mapped[Optional[MembershipStatus]] = mapped_column(
        SAEnum(
            MembershipStatus,
            name="membership_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<Profile {self.user_id} role={self.role}>"


class Club(Base):
    __tablename__ = "clubs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    sport_type: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utc_now)

    coaches: Mapped[list["Coach"]] = relationship(
        "Coach", back_populates="club", lazy="selectin"
    )

    def __repr__(self):
        return f"<Club {self.name}>"


class Coach(Base):
    """A coach belongs to exactly one club."""

    __tablename__ = "coaches"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(
        String, unique=True, index=True, nullable=False
    )
    club_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clubs.id", ondelete="CASCADE"), index=True, nullable=False
    )
    display_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utc_now)

    club: Mapped["Club"] = relationship("Club", back_populates="coaches")

    def __repr__(self):
        return f"<Coach {self.user_id} club={self.club_id}>"


class Athlete(Base):
    """Club-scoped athlete record.

    Created only by approving a membership application; at most one per
    (user, club).
    """

    __tablename__ = "athletes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    club_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clubs.id", ondelete="CASCADE"), index=True, nullable=False
    )

    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    nickname: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    gender: Mapped[str] = mapped_column(String, nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    phone_number: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    health_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        UniqueConstraint("user_id", "club_id", name="uq_athletes_user_club"),
    )

    def __repr__(self):
        return f"<Athlete {self.first_name} {self.last_name} club={self.club_id}>"


CLUB_NAME = ConflictRule(
    kind="club",
    model=Club,
    key_columns=("name",),
    message="A club with this name already exists",
)

ATHLETE_MEMBERSHIP = ConflictRule(
    kind="athlete",
    model=Athlete,
    key_columns=("user_id", "club_id"),
    message="An athlete record already exists for this user in this club",
)
