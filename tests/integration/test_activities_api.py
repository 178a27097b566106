"""Integration tests for scheduling and activity registrations."""

from datetime import date, timedelta

import pytest
from services.gateway_service.app.main import app
from tests.conftest import make_user, override_auth
from tests.factories import ActivityFactory


def _activity_body(club_id, **overrides):
    body = {
        "club_id": str(club_id),
        "title": "Saturday Time Trial",
        "activity_type": "competition",
        "activity_date": (date.today() + timedelta(days=3)).isoformat(),
        "start_time": "09:00:00",
        "end_time": "11:00:00",
        "location": "Main Pool",
        "requires_registration": True,
        "max_participants": 10,
    }
    body.update(overrides)
    return body


async def _seed_activity(db_session, club_id, **overrides):
    activity = ActivityFactory.create(
        club_id=club_id, requires_registration=True, **overrides
    )
    db_session.add(activity)
    await db_session.commit()
    return activity.id


@pytest.mark.asyncio
@pytest.mark.integration
async def test_coach_schedules_activity_for_own_club(client, world):
    with override_auth(app, make_user(world.coach_1_user)):
        response = await client.post(
            "/api/v1/activities", json=_activity_body(world.club_1)
        )
        assert response.status_code == 201, response.text
        created = response.json()
        assert created["created_by"] == world.coach_1_user
        assert created["requires_registration"] is True
        assert "checkin_token" not in created

        response = await client.post(
            "/api/v1/activities", json=_activity_body(world.club_2)
        )
        assert response.status_code == 403

        response = await client.post(
            "/api/v1/activities",
            json=_activity_body(world.club_1, end_time="08:00:00"),
        )
        assert response.status_code == 422

    with override_auth(app, make_user(world.athlete_1_user)):
        response = await client.post(
            "/api/v1/activities", json=_activity_body(world.club_1)
        )
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_coach_schedules_training_session(client, world):
    body = {
        "club_id": str(world.club_1),
        "session_date": (date.today() + timedelta(days=1)).isoformat(),
        "start_time": "17:00:00",
        "end_time": "19:00:00",
        "location": "Lane 4",
    }
    with override_auth(app, make_user(world.coach_1_user)):
        response = await client.post("/api/v1/sessions", json=body)
        assert response.status_code == 201, response.text
        session_id = response.json()["id"]

        response = await client.post(f"/api/v1/sessions/{session_id}/checkin-token")
    assert response.status_code == 200
    assert response.json()["target_id"] == session_id
    assert response.json()["token"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkin_token_is_replaced(client, world, db_session):
    activity_id = await _seed_activity(db_session, world.club_1)
    url = f"/api/v1/activities/{activity_id}/checkin-token"

    with override_auth(app, make_user(world.coach_1_user)):
        first = await client.post(url, json={"expires_in_minutes": 30})
        second = await client.post(url)

    assert first.status_code == 200
    assert first.json()["expires_at"] is not None
    assert second.status_code == 200
    assert second.json()["expires_at"] is None
    assert first.json()["token"] != second.json()["token"]

    with override_auth(app, make_user(world.coach_2_user)):
        response = await client.post(url)
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_registration_lifecycle(client, world, db_session):
    activity_id = await _seed_activity(db_session, world.club_1)

    with override_auth(app, make_user(world.athlete_1_user)):
        response = await client.post(
            f"/api/v1/activities/{activity_id}/registrations",
            json={"notes": "Can bring my own kickboard"},
        )
        assert response.status_code == 201, response.text
        registration = response.json()
        assert registration["status"] == "pending"

        response = await client.post(
            f"/api/v1/activities/{activity_id}/registrations"
        )
        assert response.status_code == 409

        # Athletes cannot review.
        response = await client.post(
            f"/api/v1/registrations/{registration['id']}/approve"
        )
        assert response.status_code == 403

    with override_auth(app, make_user(world.coach_1_user)):
        response = await client.get(f"/api/v1/activities/{activity_id}/registrations")
        assert [r["id"] for r in response.json()] == [registration["id"]]

        response = await client.post(
            f"/api/v1/registrations/{registration['id']}/reject", json={}
        )
        assert response.status_code == 422

        response = await client.post(
            f"/api/v1/registrations/{registration['id']}/approve",
            json={"notes": "See you there"},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        assert response.json()["coach_notes"] == "See you there"

        response = await client.post(
            f"/api/v1/registrations/{registration['id']}/approve"
        )
        assert response.status_code == 409
        assert response.json()["code"] == "ALREADY_PROCESSED"

        response = await client.delete(f"/api/v1/registrations/{registration['id']}")
        assert response.status_code == 204

        response = await client.get(f"/api/v1/activities/{activity_id}/registrations")
        assert response.json() == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_athlete_cancels_registration(client, world, db_session):
    activity_id = await _seed_activity(db_session, world.club_1)

    with override_auth(app, make_user(world.athlete_1_user)):
        response = await client.post(
            f"/api/v1/activities/{activity_id}/registrations"
        )
        registration_id = response.json()["id"]

        response = await client.post(
            f"/api/v1/registrations/{registration_id}/cancel"
        )
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    with override_auth(app, make_user(world.athlete_2_user)):
        response = await client.post(
            f"/api/v1/activities/{activity_id}/registrations"
        )
    assert response.status_code == 403
    assert response.json()["code"] == "SCOPE_MISMATCH"
