"""Shared fixtures: a seeded two-club world, auth overrides, event capture."""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Optional

import pytest
import pytest_asyncio
from libs.auth.dependencies import get_current_user
from libs.auth.models import ActorScope, AuthUser, Role
from libs.common.notifications import EventKind, get_dispatcher
from services.gateway_service.app.main import app
from services.members_service.services.scope import resolve_scope
from tests.factories import AthleteFactory, ClubFactory, CoachFactory, ProfileFactory

# ---------------------------------------------------------------------------
# Dispatchers
# ---------------------------------------------------------------------------


class RecordingDispatcher:
    """Collects every event instead of delivering it."""

    def __init__(self):
        self.events: list[tuple[EventKind, dict[str, Any]]] = []

    async def notify(self, event_kind: EventKind, payload: dict[str, Any]) -> None:
        self.events.append((event_kind, payload))

    @property
    def kinds(self) -> list[EventKind]:
        return [kind for kind, _ in self.events]

    def last(self, kind: EventKind) -> dict[str, Any]:
        for event_kind, payload in reversed(self.events):
            if event_kind == kind:
                return payload
        raise AssertionError(f"no {kind.value} event recorded")


class FailingDispatcher:
    async def notify(self, event_kind: EventKind, payload: dict[str, Any]) -> None:
        raise RuntimeError("event sink unavailable")


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture(autouse=True)
def _route_events_to_recorder(dispatcher):
    """HTTP requests deliver events to the test's recording dispatcher."""
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    yield
    app.dependency_overrides.pop(get_dispatcher, None)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


def make_user(user_id: str, email: Optional[str] = None) -> AuthUser:
    return AuthUser(user_id=user_id, email=email or f"{user_id}@test.com")


@contextmanager
def override_auth(target_app, user: AuthUser):
    """Authenticate every request made inside the block as ``user``."""
    target_app.dependency_overrides[get_current_user] = lambda: user
    try:
        yield
    finally:
        target_app.dependency_overrides.pop(get_current_user, None)


# ---------------------------------------------------------------------------
# Seeded world
# ---------------------------------------------------------------------------


@dataclass
class World:
    """Two clubs, each with one coach and one athlete, plus an admin.

    Ids are captured as plain values so tests never touch ORM instances
    that a rolled-back service call may have expired.
    """

    club_1: Any
    club_2: Any
    admin_user: str
    coach_1_user: str
    coach_2_user: str
    athlete_1_user: str
    athlete_1: Any
    athlete_2_user: str
    athlete_2: Any

    async def scope(self, db, user_id: str) -> ActorScope:
        return await resolve_scope(db, user_id)


@pytest_asyncio.fixture
async def world(db_session) -> World:
    club_1 = ClubFactory.create(name="Bangkok Sharks", sport_type="swimming")
    club_2 = ClubFactory.create(name="Chiang Mai Runners", sport_type="athletics")
    db_session.add_all([club_1, club_2])
    await db_session.flush()

    admin = ProfileFactory.create(user_id="admin-1", role=Role.ADMIN)
    coach_1 = ProfileFactory.create(user_id="coach-1", role=Role.COACH)
    coach_2 = ProfileFactory.create(user_id="coach-2", role=Role.COACH)
    athlete_1_profile = ProfileFactory.create(user_id="athlete-1")
    athlete_2_profile = ProfileFactory.create(user_id="athlete-2")
    db_session.add_all(
        [admin, coach_1, coach_2, athlete_1_profile, athlete_2_profile]
    )
    await db_session.flush()
    db_session.add_all(
        [
            CoachFactory.create(user_id="coach-1", club_id=club_1.id),
            CoachFactory.create(user_id="coach-2", club_id=club_2.id),
        ]
    )

    athlete_1 = AthleteFactory.create(user_id="athlete-1", club_id=club_1.id)
    athlete_2 = AthleteFactory.create(user_id="athlete-2", club_id=club_2.id)
    db_session.add_all([athlete_1, athlete_2])
    await db_session.commit()

    return World(
        club_1=club_1.id,
        club_2=club_2.id,
        admin_user="admin-1",
        coach_1_user="coach-1",
        coach_2_user="coach-2",
        athlete_1_user="athlete-1",
        athlete_1=athlete_1.id,
        athlete_2_user="athlete-2",
        athlete_2=athlete_2.id,
    )
