"""Duplicate/conflict guard for state-creating inserts.

A ``ConflictRule`` names one "at most one active record per key" invariant.
The storage layer enforces it with a unique constraint or partial unique
index; this module gives services a friendly pre-check and maps a
constraint violation on insert to the same ``ConflictError``.

Usage:
    ACTIVE_REGISTRATION = ConflictRule(
        kind="activity_registration",
        model=ActivityRegistration,
        key_columns=("activity_id", "athlete_id"),
        active_clause=lambda: ActivityRegistration.status != "cancelled",
        message="Athlete is already registered for this activity",
    )

    await assert_no_active_conflict(db, ACTIVE_REGISTRATION,
                                    activity_id=a_id, athlete_id=ath_id)
    await guarded_insert(db, ACTIVE_REGISTRATION, registration)
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from libs.common.errors import ConflictError
from libs.common.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_UNIQUE_VIOLATION_SQLSTATE = "23505"


@dataclass(frozen=True)
class ConflictRule:
    kind: str
    model: type
    key_columns: tuple[str, ...]
    message: str
    active_clause: Optional[Callable[[], ColumnElement]] = None

    def where(self, **key: Any) -> list[ColumnElement]:
        missing = set(self.key_columns) - set(key)
        if missing:
            raise TypeError(f"{self.kind} key is missing {sorted(missing)}")
        clauses = [getattr(self.model, col) == key[col] for col in self.key_columns]
        if self.active_clause is not None:
            clauses.append(self.active_clause())
        return clauses

    def key_of(self, instance: Any) -> dict[str, Any]:
        return {col: getattr(instance, col) for col in self.key_columns}


async def find_active(db: AsyncSession, rule: ConflictRule, **key: Any):
    """Return the active record for ``key`` or None."""
    result = await db.execute(select(rule.model).where(*rule.where(**key)).limit(1))
    return result.scalar_one_or_none()


async def assert_no_active_conflict(
    db: AsyncSession, rule: ConflictRule, **key: Any
) -> None:
    """Raise ConflictError if an active record already exists for ``key``.

    This is the fast path only; ``guarded_insert`` relies on the storage
    constraint for the actual guarantee.
    """
    existing = await find_active(db, rule, **key)
    if existing is not None:
        raise ConflictError(rule.message, kind=rule.kind)


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == _UNIQUE_VIOLATION_SQLSTATE:
        return True
    return "unique constraint" in str(orig).lower()


async def guarded_insert(db: AsyncSession, rule: ConflictRule, instance: T) -> T:
    """Add and flush ``instance``; a uniqueness violation becomes ConflictError.

    On violation the session's unit of work is rolled back, so callers must
    not rely on other pending changes or on attributes of previously loaded
    objects afterwards.
    """
    key = rule.key_of(instance)
    db.add(instance)
    try:
        await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        if not is_unique_violation(exc):
            raise
        logger.info(
            "Uniqueness constraint rejected insert",
            extra={
                "extra_fields": {
                    "kind": rule.kind,
                    "key": {k: str(v) for k, v in key.items()},
                }
            },
        )
        raise ConflictError(rule.message, kind=rule.kind) from exc
    return instance
