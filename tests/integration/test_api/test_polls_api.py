"""Integration tests for poll management endpoints."""
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import StoreError
from tests.integration.test_api.helpers import create_poll, vote


@pytest.mark.integration
class TestCreatePoll:
    def test_create_poll(self, client, auth_headers, user_id):
        poll = create_poll(client, auth_headers, description="  Friday lunch  ")

        assert poll["title"] == "Where should we have lunch?"
        assert poll["description"] == "Friday lunch"
        assert poll["created_by"] == str(user_id)
        assert poll["is_active"] is True
        assert poll["max_votes_per_user"] == 1
        assert [(o["option_text"], o["order_index"]) for o in poll["options"]] == [
            ("Tacos", 0),
            ("Ramen", 1),
            ("Salad", 2),
        ]

    def test_create_requires_authentication(self, client):
        response = client.post("/api/v1/polls", json={"title": "No token", "options": ["A", "B"]})

        assert response.status_code == 401
        assert response.json() == {"detail": "Authentication required"}

    def test_token_from_cookie(self, client, auth_headers):
        token = auth_headers["Authorization"].split(" ", 1)[1]
        client.cookies.set("access_token", token)

        response = client.post("/api/v1/polls", json={"title": "Cookie poll", "options": ["A", "B"]})

        assert response.status_code == 201

    @pytest.mark.parametrize(
        "payload",
        [
            {"title": "ab", "options": ["A", "B"]},
            {"title": "One option", "options": ["A"]},
            {"title": "Too many", "options": [f"Option {i}" for i in range(11)]},
            {"title": "Duplicates", "options": ["Tacos", "TACOS"]},
            {"title": "Blank option", "options": ["Tacos", "   "]},
            {"title": "Bad quota", "options": ["A", "B"], "max_votes_per_user": 0},
        ],
    )
    def test_invalid_payloads(self, client, auth_headers, payload):
        response = client.post("/api/v1/polls", json=payload, headers=auth_headers)

        assert response.status_code == 422

    def test_expiration_window(self, client, auth_headers):
        too_soon = (datetime.now(timezone.utc) + timedelta(minutes=10)).isoformat()
        too_late = (datetime.now(timezone.utc) + timedelta(days=400)).isoformat()
        fine = (datetime.now(timezone.utc) + timedelta(days=7)).isoformat()

        for expires_at, expected in ((too_soon, 422), (too_late, 422), (fine, 201)):
            response = client.post(
                "/api/v1/polls",
                json={"title": "Expiring poll", "options": ["A", "B"], "expires_at": expires_at},
                headers=auth_headers,
            )
            assert response.status_code == expected


@pytest.mark.integration
class TestReadPolls:
    def test_get_poll_records_view(self, client, auth_headers):
        poll = create_poll(client, auth_headers)

        response = client.get(f"/api/v1/polls/{poll['id']}")
        client.get(f"/api/v1/polls/{poll['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert [o["option_text"] for o in response.json()["options"]] == ["Tacos", "Ramen", "Salad"]
        assert client.get(f"/api/v1/polls/{poll['id']}/stats").json()["total_views"] == 2

    def test_view_failure_does_not_fail_read(self, client, sql_store, auth_headers, monkeypatch):
        poll = create_poll(client, auth_headers)

        async def insert_view(*args, **kwargs):
            raise StoreError("views table locked")

        monkeypatch.setattr(sql_store, "insert_view", insert_view)

        response = client.get(f"/api/v1/polls/{poll['id']}")

        assert response.status_code == 200
        assert response.json()["id"] == poll["id"]

    def test_uppercase_id_accepted(self, client, auth_headers):
        poll = create_poll(client, auth_headers)

        response = client.get(f"/api/v1/polls/{poll['id'].upper()}")

        assert response.status_code == 200

    def test_list_polls_with_totals(self, client, auth_headers, other_auth_headers):
        poll = create_poll(client, auth_headers, title="Counted poll")
        vote(client, poll["id"], poll["options"][0]["id"], other_auth_headers)

        response = client.get("/api/v1/polls")

        assert response.status_code == 200
        data = response.json()
        assert data["pagination"] == {"page": 1, "limit": 10, "has_more": False}
        assert [(p["title"], p["total_votes"]) for p in data["polls"]] == [("Counted poll", 1)]

    def test_list_polls_search_and_limit(self, client, auth_headers):
        create_poll(client, auth_headers, title="Lunch spot")
        create_poll(client, auth_headers, title="Team offsite")

        found = client.get("/api/v1/polls", params={"search": "lunch"}).json()
        too_big = client.get("/api/v1/polls", params={"limit": 51})

        assert [p["title"] for p in found["polls"]] == ["Lunch spot"]
        assert too_big.status_code == 422

    def test_my_polls_include_inactive(self, client, auth_headers):
        poll = create_poll(client, auth_headers)
        client.patch(f"/api/v1/polls/{poll['id']}", json={"is_active": False}, headers=auth_headers)

        mine = client.get("/api/v1/users/me/polls", headers=auth_headers).json()
        public = client.get("/api/v1/polls").json()

        assert [p["id"] for p in mine] == [poll["id"]]
        assert public["polls"] == []


@pytest.mark.integration
class TestInactivePolls:
    """An inactive poll looks the same as a missing one to everybody but its creator."""

    @pytest.mark.parametrize("suffix", ["", "/stats", "/results"])
    def test_hidden_from_others(self, client, auth_headers, other_auth_headers, suffix):
        poll = create_poll(client, auth_headers, title="Secret poll")
        client.patch(f"/api/v1/polls/{poll['id']}", json={"is_active": False}, headers=auth_headers)

        for headers in (other_auth_headers, {}):
            response = client.get(f"/api/v1/polls/{poll['id']}{suffix}", headers=headers)

            assert response.status_code == 404
            assert response.json() == {"detail": "Poll not found"}
            assert "Secret poll" not in response.text
            assert "Tacos" not in response.text

    @pytest.mark.parametrize("suffix", ["", "/stats", "/results"])
    def test_visible_to_creator(self, client, auth_headers, suffix):
        poll = create_poll(client, auth_headers)
        client.patch(f"/api/v1/polls/{poll['id']}", json={"is_active": False}, headers=auth_headers)

        response = client.get(f"/api/v1/polls/{poll['id']}{suffix}", headers=auth_headers)

        assert response.status_code == 200


@pytest.mark.integration
class TestManagePolls:
    def test_creator_deactivates_poll(self, client, auth_headers, other_auth_headers):
        poll = create_poll(client, auth_headers)

        response = client.patch(f"/api/v1/polls/{poll['id']}", json={"is_active": False}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["is_active"] is False
        # Others no longer see it, and cannot vote on it
        assert client.get(f"/api/v1/polls/{poll['id']}", headers=other_auth_headers).status_code == 404
        assert vote(client, poll["id"], poll["options"][0]["id"], other_auth_headers).status_code == 404
        # The creator still does
        assert client.get(f"/api/v1/polls/{poll['id']}", headers=auth_headers).status_code == 200

    def test_non_creator_cannot_update(self, client, auth_headers, other_auth_headers):
        poll = create_poll(client, auth_headers)

        response = client.patch(f"/api/v1/polls/{poll['id']}", json={"title": "Hijacked"}, headers=other_auth_headers)

        assert response.status_code == 403

    def test_delete_poll(self, client, auth_headers, other_auth_headers):
        poll = create_poll(client, auth_headers)
        vote(client, poll["id"], poll["options"][0]["id"], other_auth_headers)

        assert client.delete(f"/api/v1/polls/{poll['id']}", headers=other_auth_headers).status_code == 403
        assert client.delete(f"/api/v1/polls/{poll['id']}", headers=auth_headers).status_code == 204
        assert client.get(f"/api/v1/polls/{poll['id']}").status_code == 404
        assert client.get("/api/v1/users/me/votes", headers=other_auth_headers).json() == []

    def test_delete_unknown_poll(self, client, auth_headers):
        response = client.delete(f"/api/v1/polls/{uuid.uuid4()}", headers=auth_headers)

        assert response.status_code == 404
