"""Check-in verification.

A check-in is accepted only when the athlete belongs to the target's club
and, for QR check-ins, presents the target's current token. The first
successful check-in per (target, athlete) is final; repeats report the
original record instead of writing a new one.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from libs.auth.models import ActorScope
from libs.common.datetime_utils import utc_now
from libs.common.errors import (
    AlreadyCheckedInError,
    ConflictError,
    InvalidTokenError,
    ScopeMismatchError,
    ValidationError,
)
from libs.common.logging import get_logger
from libs.common.notifications import EventKind, NotificationDispatcher, dispatch_event
from libs.db.guard import ConflictRule, find_active, guarded_insert
from services.attendance_service.models import (
    ACTIVITY_CHECK_IN,
    SESSION_CHECK_IN,
    ActivityCheckIn,
    CheckInMethod,
    CheckInTargetKind,
    SessionCheckIn,
)
from services.attendance_service.services.classifier import (
    classify_check_in,
    effective_start,
    within_check_in_window,
)
from services.members_service.services.athletes import get_athlete
from services.members_service.services.scope import ensure_club_access
from services.sessions_service.models import Activity, TrainingSession
from services.sessions_service.services.schedule import (
    get_activity,
    get_training_session,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

CheckInRecord = Union[ActivityCheckIn, SessionCheckIn]
CheckInTarget = Union[Activity, TrainingSession]


@dataclass
class CheckInResult:
    record: CheckInRecord
    already_checked_in: bool = False


@dataclass(frozen=True)
class _CheckInTable:
    rule: ConflictRule
    model: type
    key_column: str


_TARGETS = {
    CheckInTargetKind.ACTIVITY: _CheckInTable(
        ACTIVITY_CHECK_IN, ActivityCheckIn, "activity_id"
    ),
    CheckInTargetKind.SESSION: _CheckInTable(
        SESSION_CHECK_IN, SessionCheckIn, "session_id"
    ),
}


async def load_target(
    db: AsyncSession, kind: CheckInTargetKind, target_id: uuid.UUID
) -> CheckInTarget:
    if kind == CheckInTargetKind.ACTIVITY:
        return await get_activity(db, target_id)
    return await get_training_session(db, target_id)


def _schedule_of(target: CheckInTarget):
    if isinstance(target, Activity):
        return target.activity_date, target.start_time, target.end_time
    return target.session_date, target.start_time, target.end_time


def verify_token(
    target: CheckInTarget, presented_token: Optional[str], now: datetime
) -> None:
    """Exact-match the presented token against the target's current one."""
    expected = target.checkin_token
    if not expected:
        return
    if presented_token != expected:
        raise InvalidTokenError("Check-in code is not valid")
    expires_at = target.checkin_token_expires_at
    if expires_at is not None and now > expires_at:
        raise InvalidTokenError("Check-in code has expired")


async def _existing(
    db: AsyncSession, table: _CheckInTable, target_id: uuid.UUID, athlete_id: uuid.UUID
) -> Optional[CheckInRecord]:
    return await find_active(
        db, table.rule, **{table.key_column: target_id, "athlete_id": athlete_id}
    )


def _duplicate(record: CheckInRecord, raise_on_duplicate: bool) -> CheckInResult:
    if raise_on_duplicate:
        raise AlreadyCheckedInError(
            "Athlete has already checked in", checked_in_at=record.checked_in_at
        )
    return CheckInResult(record=record, already_checked_in=True)


async def check_in(
    db: AsyncSession,
    kind: CheckInTargetKind,
    target_id: uuid.UUID,
    athlete_id: uuid.UUID,
    presented_token: Optional[str],
    *,
    dispatcher: NotificationDispatcher,
    method: CheckInMethod = CheckInMethod.QR,
    now: Optional[datetime] = None,
    raise_on_duplicate: bool = False,
) -> CheckInResult:
    """Record ``athlete_id`` as present at the target.

    Steps, in order: target and athlete must exist; their clubs must match;
    a QR check-in must present the target's current, unexpired token; a
    repeat returns (or, with ``raise_on_duplicate``, raises with) the
    original record; an activity's check-in window must be open; the new
    record is classified on time or late against the scheduled start.

    ``now`` defaults to the current instant.
    """
    now = now or utc_now()
    if now.tzinfo is None:
        raise ValidationError("Check-in time must be timezone-aware", field="now")
    table = _TARGETS[kind]

    target = await load_target(db, kind, target_id)
    athlete = await get_athlete(db, athlete_id)

    if athlete.club_id != target.club_id:
        raise ScopeMismatchError(
            "Athlete does not belong to this club", target=kind.value
        )

    if method == CheckInMethod.QR:
        verify_token(target, presented_token, now)

    existing = await _existing(db, table, target_id, athlete_id)
    if existing is not None:
        return _duplicate(existing, raise_on_duplicate)

    day, start_time, end_time = _schedule_of(target)
    if isinstance(target, Activity) and not within_check_in_window(
        now,
        day,
        start_time,
        end_time,
        target.checkin_window_before,
        target.checkin_window_after,
    ):
        raise ValidationError("Check-in is not open for this activity")

    status = classify_check_in(effective_start(day, start_time), now)
    record = table.model(
        **{table.key_column: target_id},
        athlete_id=athlete_id,
        status=status,
        method=method,
        checked_in_at=now,
    )
    try:
        await guarded_insert(db, table.rule, record)
    except ConflictError:
        # Lost the race to a concurrent check-in; report the winner's record.
        existing = await _existing(db, table, target_id, athlete_id)
        if existing is None:
            raise
        return _duplicate(existing, raise_on_duplicate)

    await db.commit()
    await db.refresh(record)

    logger.info(
        "Check-in recorded",
        extra={
            "extra_fields": {
                "target": kind.value,
                "target_id": str(target_id),
                "athlete_id": str(athlete_id),
                "status": status.value,
                "method": method.value,
            }
        },
    )
    await dispatch_event(
        dispatcher,
        EventKind.CHECK_IN_RECORDED,
        {
            "target": kind.value,
            "target_id": str(target_id),
            "athlete_id": str(athlete_id),
            "status": status.value,
            "timestamp": record.checked_in_at.isoformat(),
        },
    )
    return CheckInResult(record=record)


async def list_check_ins(
    db: AsyncSession,
    scope: ActorScope,
    kind: CheckInTargetKind,
    target_id: uuid.UUID,
) -> list[CheckInRecord]:
    target = await load_target(db, kind, target_id)
    ensure_club_access(scope, target.club_id)

    table = _TARGETS[kind]
    result = await db.execute(
        select(table.model)
        .where(getattr(table.model, table.key_column) == target_id)
        .order_by(table.model.checked_in_at)
    )
    return list(result.scalars().all())


async def get_my_check_in(
    db: AsyncSession,
    kind: CheckInTargetKind,
    target_id: uuid.UUID,
    athlete_id: uuid.UUID,
) -> Optional[CheckInRecord]:
    await load_target(db, kind, target_id)
    return await _existing(db, _TARGETS[kind], target_id, athlete_id)
