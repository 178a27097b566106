"""Profile bookkeeping and the derived membership status."""

from typing import Optional

from libs.auth.models import Role
from libs.common.logging import get_logger
from services.members_service.models import (
    ApplicationStatus,
    Club,
    MembershipApplication,
    MembershipStatus,
    Profile,
)
from services.members_service.services.application_states import (
    membership_status_for,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def get_or_create_profile(
    db: AsyncSession, user_id: str, email: Optional[str] = None
) -> Profile:
    """Return the user's profile, staging a new athlete profile if missing."""
    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    profile = result.scalar_one_or_none()
    if profile is not None:
        if email and not profile.email:
            profile.email = email
        return profile

    profile = Profile(user_id=user_id, email=email, role=Role.ATHLETE)
    db.add(profile)
    await db.flush()
    logger.info(
        "Created profile for user %s",
        user_id,
        extra={"extra_fields": {"user_id": user_id}},
    )
    return profile


async def derive_membership_status(
    db: AsyncSession, user_id: str
) -> Optional[MembershipStatus]:
    """Membership status implied by the user's applications.

    An approved application anywhere keeps the member active; otherwise the
    latest application decides. No application means no status.
    """
    approved = await db.execute(
        select(MembershipApplication.id)
        .where(
            MembershipApplication.user_id == user_id,
            MembershipApplication.status == ApplicationStatus.APPROVED,
        )
        .limit(1)
    )
    if approved.scalar_one_or_none() is not None:
        return MembershipStatus.ACTIVE

    latest = await db.execute(
        select(MembershipApplication.status)
        .where(MembershipApplication.user_id == user_id)
        .order_by(
            MembershipApplication.created_at.desc(), MembershipApplication.id.desc()
        )
        .limit(1)
    )
    status = latest.scalar_one_or_none()
    return membership_status_for(status) if status is not None else None


async def refresh_membership_status(
    db: AsyncSession, user_id: str
) -> Optional[MembershipStatus]:
    """Rewrite ``Profile.membership_status`` inside the caller's transaction.

    Suspended members stay suspended; suspension is lifted by an
    administrator, not by the application workflow.
    """
    profile = await get_or_create_profile(db, user_id)
    if profile.membership_status == MembershipStatus.SUSPENDED:
        return profile.membership_status

    status = await derive_membership_status(db, user_id)
    if profile.membership_status != status:
        logger.info(
            "Membership status for %s: %s -> %s",
            user_id,
            profile.membership_status.value if profile.membership_status else None,
            status.value if status else None,
        )
        profile.membership_status = status
    return status


async def get_access_status(db: AsyncSession, user_id: str) -> dict:
    """Whether the user may use member-only features, and why not."""
    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    profile = result.scalar_one_or_none()

    if profile is not None and profile.role != Role.ATHLETE:
        return {"has_access": True, "membership_status": profile.membership_status}

    if profile is not None and profile.membership_status == MembershipStatus.SUSPENDED:
        return {
            "has_access": False,
            "membership_status": MembershipStatus.SUSPENDED,
            "reason": "suspended",
        }

    result = await db.execute(
        select(MembershipApplication, Club.name)
        .join(Club, Club.id == MembershipApplication.club_id)
        .where(MembershipApplication.user_id == user_id)
        .order_by(
            MembershipApplication.created_at.desc(), MembershipApplication.id.desc()
        )
    )
    rows = result.all()
    if not rows:
        return {
            "has_access": False,
            "membership_status": None,
            "reason": "no_application",
        }

    for application, club_name in rows:
        if application.status == ApplicationStatus.APPROVED:
            return {
                "has_access": True,
                "membership_status": MembershipStatus.ACTIVE,
                "application_id": application.id,
                "club_name": club_name,
            }

    latest, club_name = rows[0]
    access = {
        "has_access": False,
        "membership_status": membership_status_for(latest.status),
        "reason": latest.status.value,
        "application_id": latest.id,
        "club_name": club_name,
    }
    if latest.status == ApplicationStatus.REJECTED:
        access["rejection_reason"] = latest.rejection_reason
    return access
