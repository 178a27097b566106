"""Integration tests for the club directory and club administration."""

import pytest
from services.gateway_service.app.main import app
from tests.conftest import make_user, override_auth


@pytest.mark.asyncio
@pytest.mark.integration
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers.get("X-Request-ID")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_available_clubs(client, world):
    response = await client.get("/api/v1/clubs")

    assert response.status_code == 200
    clubs = response.json()
    assert [c["name"] for c in clubs] == ["Bangkok Sharks", "Chiang Mai Runners"]
    assert all(c["coach_count"] == 1 for c in clubs)
    assert all(c["accepting_applications"] for c in clubs)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_creates_club_and_assigns_coach(client, world):
    with override_auth(app, make_user(world.admin_user)):
        response = await client.post(
            "/api/v1/admin/clubs",
            json={"name": "Phuket Paddlers", "sport_type": "canoeing"},
        )
        assert response.status_code == 201, response.text
        club_id = response.json()["id"]

        response = await client.post(
            "/api/v1/admin/clubs",
            json={"name": "Phuket Paddlers", "sport_type": "canoeing"},
        )
        assert response.status_code == 409

    response = await client.get("/api/v1/clubs")
    paddlers = next(c for c in response.json() if c["id"] == club_id)
    assert paddlers["accepting_applications"] is False

    with override_auth(app, make_user(world.admin_user)):
        response = await client.post(
            f"/api/v1/admin/clubs/{club_id}/coaches",
            json={"user_id": "coach-3", "display_name": "Coach Nok"},
        )
        assert response.status_code == 201, response.text
        assert response.json()["club_id"] == club_id

        # A coach belongs to exactly one club.
        response = await client.post(
            f"/api/v1/admin/clubs/{world.club_1}/coaches",
            json={"user_id": "coach-3"},
        )
        assert response.status_code == 409

    response = await client.get("/api/v1/clubs")
    paddlers = next(c for c in response.json() if c["id"] == club_id)
    assert paddlers["accepting_applications"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_club_administration_is_admin_only(client, world):
    with override_auth(app, make_user(world.coach_1_user)):
        response = await client.post(
            "/api/v1/admin/clubs",
            json={"name": "Rogue Club", "sport_type": "swimming"},
        )

    assert response.status_code == 403
