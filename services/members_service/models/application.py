"""Membership application and its per-application activity log."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.guard import ConflictRule
from libs.db.types import JSONType, UTCDateTime
from services.members_service.models.enums import (
    ACTIVE_APPLICATION_STATUSES,
    ApplicationStatus,
    enum_values,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

_ACTIVE_STATUS_SQL = "status IN ('pending', 'info_requested')"


class MembershipApplication(Base):
    __tablename__ = "membership_applications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    club_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clubs.id", ondelete="CASCADE"), index=True, nullable=False
    )
    status: Mapped[ApplicationStatus] = mapped_column(
        SAEnum(
            ApplicationStatus,
            name="application_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
        default=ApplicationStatus.PENDING,
    )

    personal_info: Mapped[dict] = mapped_column(JSONType, nullable=False)
    documents: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)

    # Review
    reviewed_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(), nullable=True
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    review_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Set once the approval has materialized an athlete
    profile_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("athletes.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utc_now, onupdate=utc_now
    )

    club = relationship("Club", lazy="selectin")
    activity_log: Mapped[list["ApplicationActivityLog"]] = relationship(
        "ApplicationActivityLog",
        back_populates="application",
        order_by="ApplicationActivityLog.created_at",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        # At most one open application per user, across all clubs.
        Index(
            "uq_membership_applications_active_user",
            "user_id",
            unique=True,
            postgresql_where=text(_ACTIVE_STATUS_SQL),
            sqlite_where=text(_ACTIVE_STATUS_SQL),
        ),
    )

    def __repr__(self):
        return f"<MembershipApplication {self.id} {self.status}>"


class ApplicationActivityLog(Base):
    __tablename__ = "application_activity_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    application_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("membership_applications.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    by_user: Mapped[str] = mapped_column(String, nullable=False)
    details: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utc_now)

    application: Mapped["MembershipApplication"] = relationship(
        "MembershipApplication", back_populates="activity_log"
    )


ACTIVE_APPLICATION = ConflictRule(
    kind="membership_application",
    model=MembershipApplication,
    key_columns=("user_id",),
    active_clause=lambda: MembershipApplication.status.in_(
        ACTIVE_APPLICATION_STATUSES
    ),
    message="You already have an application awaiting review",
)
