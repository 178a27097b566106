"""initial workflow schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUMS = {
    "user_role_enum": ("admin", "coach", "athlete"),
    "membership_status_enum": ("pending", "active", "rejected", "suspended"),
    "application_status_enum": ("pending", "info_requested", "approved", "rejected"),
    "activity_type_enum": ("training", "competition", "practice", "other"),
    "registration_status_enum": ("pending", "approved", "rejected", "cancelled"),
    "check_in_status_enum": ("on_time", "late"),
    "check_in_method_enum": ("qr", "manual"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    """Upgrade schema - clubs, applications, activities, registrations, check-ins."""
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for name, values in ENUMS.items():
            postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("role", _enum("user_role_enum"), nullable=False),
        sa.Column("membership_status", _enum("membership_status_enum"), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id", name="pk_profiles"),
    )
    op.create_index("ix_profiles_user_id", "profiles", ["user_id"], unique=True)

    op.create_table(
        "clubs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("sport_type", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id", name="pk_clubs"),
        sa.UniqueConstraint("name", name="uq_clubs_name"),
    )

    op.create_table(
        "coaches",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("club_id", sa.Uuid(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id", name="pk_coaches"),
        sa.ForeignKeyConstraint(
            ["club_id"], ["clubs.id"], name="fk_coaches_club_id_clubs", ondelete="CASCADE"
        ),
    )
    op.create_index("ix_coaches_user_id", "coaches", ["user_id"], unique=True)
    op.create_index("ix_coaches_club_id", "coaches", ["club_id"])

    op.create_table(
        "athletes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("club_id", sa.Uuid(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("nickname", sa.String(), nullable=True),
        sa.Column("gender", sa.String(), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("phone_number", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("health_notes", sa.Text(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id", name="pk_athletes"),
        sa.ForeignKeyConstraint(
            ["club_id"], ["clubs.id"], name="fk_athletes_club_id_clubs", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("user_id", "club_id", name="uq_athletes_user_club"),
    )
    op.create_index("ix_athletes_user_id", "athletes", ["user_id"])
    op.create_index("ix_athletes_club_id", "athletes", ["club_id"])

    op.create_table(
        "membership_applications",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("club_id", sa.Uuid(), nullable=False),
        sa.Column("status", _enum("application_status_enum"), nullable=False),
        sa.Column("personal_info", sa.JSON().with_variant(postgresql.JSONB(), "postgresql"), nullable=False),
        sa.Column("documents", sa.JSON().with_variant(postgresql.JSONB(), "postgresql"), nullable=False),
        sa.Column("reviewed_by", sa.String(), nullable=True),
        _timestamp("reviewed_at", nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("review_notes", sa.Text(), nullable=True),
        sa.Column("profile_id", sa.Uuid(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id", name="pk_membership_applications"),
        sa.ForeignKeyConstraint(
            ["club_id"],
            ["clubs.id"],
            name="fk_membership_applications_club_id_clubs",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["profile_id"],
            ["athletes.id"],
            name="fk_membership_applications_profile_id_athletes",
            ondelete="SET NULL",
        ),
    )
    op.create_index(
        "ix_membership_applications_user_id", "membership_applications", ["user_id"]
    )
    op.create_index(
        "ix_membership_applications_club_id", "membership_applications", ["club_id"]
    )
    # At most one open application per user.
    op.create_index(
        "uq_membership_applications_active_user",
        "membership_applications",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("status IN ('pending', 'info_requested')"),
        sqlite_where=sa.text("status IN ('pending', 'info_requested')"),
    )

    op.create_table(
        "application_activity_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("application_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("by_user", sa.String(), nullable=False),
        sa.Column("details", sa.JSON().with_variant(postgresql.JSONB(), "postgresql"), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id", name="pk_application_activity_logs"),
        sa.ForeignKeyConstraint(
            ["application_id"],
            ["membership_applications.id"],
            name="fk_application_activity_logs_application_id_membership_applications",
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        "ix_application_activity_logs_application_id",
        "application_activity_logs",
        ["application_id"],
    )

    op.create_table(
        "activities",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("club_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("activity_type", _enum("activity_type_enum"), nullable=False),
        sa.Column("activity_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("location", sa.String(), nullable=False),
        sa.Column("max_participants", sa.Integer(), nullable=True),
        sa.Column("requires_registration", sa.Boolean(), nullable=False),
        sa.Column("checkin_token", sa.String(), nullable=True),
        _timestamp("checkin_token_expires_at", nullable=True),
        sa.Column("checkin_window_before", sa.Integer(), nullable=True),
        sa.Column("checkin_window_after", sa.Integer(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id", name="pk_activities"),
        sa.ForeignKeyConstraint(
            ["club_id"], ["clubs.id"], name="fk_activities_club_id_clubs", ondelete="CASCADE"
        ),
    )
    op.create_index("ix_activities_club_id", "activities", ["club_id"])
    op.create_index("ix_activities_activity_date", "activities", ["activity_date"])

    op.create_table(
        "training_sessions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("club_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("session_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("location", sa.String(), nullable=False),
        sa.Column("checkin_token", sa.String(), nullable=True),
        _timestamp("checkin_token_expires_at", nullable=True),
        sa.Column("created_by", sa.String(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id", name="pk_training_sessions"),
        sa.ForeignKeyConstraint(
            ["club_id"],
            ["clubs.id"],
            name="fk_training_sessions_club_id_clubs",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_training_sessions_club_id", "training_sessions", ["club_id"])
    op.create_index(
        "ix_training_sessions_session_date", "training_sessions", ["session_date"]
    )

    op.create_table(
        "activity_registrations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("activity_id", sa.Uuid(), nullable=False),
        sa.Column("athlete_id", sa.Uuid(), nullable=False),
        sa.Column("status", _enum("registration_status_enum"), nullable=False),
        sa.Column("athlete_notes", sa.Text(), nullable=True),
        sa.Column("coach_notes", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("reviewed_by", sa.String(), nullable=True),
        _timestamp("reviewed_at", nullable=True),
        _timestamp("registered_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id", name="pk_activity_registrations"),
        sa.ForeignKeyConstraint(
            ["activity_id"],
            ["activities.id"],
            name="fk_activity_registrations_activity_id_activities",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["athlete_id"],
            ["athletes.id"],
            name="fk_activity_registrations_athlete_id_athletes",
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        "ix_activity_registrations_activity_id",
        "activity_registrations",
        ["activity_id"],
    )
    op.create_index(
        "ix_activity_registrations_athlete_id", "activity_registrations", ["athlete_id"]
    )
    # At most one non-cancelled registration per (activity, athlete).
    op.create_index(
        "uq_activity_registrations_active",
        "activity_registrations",
        ["activity_id", "athlete_id"],
        unique=True,
        postgresql_where=sa.text("status <> 'cancelled'"),
        sqlite_where=sa.text("status <> 'cancelled'"),
    )

    op.create_table(
        "activity_check_ins",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("activity_id", sa.Uuid(), nullable=False),
        sa.Column("athlete_id", sa.Uuid(), nullable=False),
        sa.Column("status", _enum("check_in_status_enum"), nullable=False),
        sa.Column("method", _enum("check_in_method_enum"), nullable=False),
        _timestamp("checked_in_at"),
        sa.PrimaryKeyConstraint("id", name="pk_activity_check_ins"),
        sa.ForeignKeyConstraint(
            ["activity_id"],
            ["activities.id"],
            name="fk_activity_check_ins_activity_id_activities",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["athlete_id"],
            ["athletes.id"],
            name="fk_activity_check_ins_athlete_id_athletes",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint(
            "activity_id", "athlete_id", name="uq_activity_check_ins_activity_athlete"
        ),
    )
    op.create_index(
        "ix_activity_check_ins_activity_id", "activity_check_ins", ["activity_id"]
    )
    op.create_index(
        "ix_activity_check_ins_athlete_id", "activity_check_ins", ["athlete_id"]
    )

    op.create_table(
        "session_check_ins",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("session_id", sa.Uuid(), nullable=False),
        sa.Column("athlete_id", sa.Uuid(), nullable=False),
        sa.Column("status", _enum("check_in_status_enum"), nullable=False),
        sa.Column("method", _enum("check_in_method_enum"), nullable=False),
        _timestamp("checked_in_at"),
        sa.PrimaryKeyConstraint("id", name="pk_session_check_ins"),
        sa.ForeignKeyConstraint(
            ["session_id"],
            ["training_sessions.id"],
            name="fk_session_check_ins_session_id_training_sessions",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["athlete_id"],
            ["athletes.id"],
            name="fk_session_check_ins_athlete_id_athletes",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint(
            "session_id", "athlete_id", name="uq_session_check_ins_session_athlete"
        ),
    )
    op.create_index(
        "ix_session_check_ins_session_id", "session_check_ins", ["session_id"]
    )
    op.create_index(
        "ix_session_check_ins_athlete_id", "session_check_ins", ["athlete_id"]
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("actor_id", sa.String(), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("changes", sa.JSON().with_variant(postgresql.JSONB(), "postgresql"), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id", name="pk_audit_logs"),
    )
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity_type", "entity_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])


def downgrade() -> None:
    """Downgrade schema - drop every workflow table and enum type."""
    for table in (
        "audit_logs",
        "session_check_ins",
        "activity_check_ins",
        "activity_registrations",
        "training_sessions",
        "activities",
        "application_activity_logs",
        "membership_applications",
        "athletes",
        "coaches",
        "clubs",
        "profiles",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for name in ENUMS:
            postgresql.ENUM(name=name).drop(bind, checkfirst=True)
