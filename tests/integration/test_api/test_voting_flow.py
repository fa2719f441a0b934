"""End-to-end integration tests for the voting flow."""
import uuid

import pytest

from tests.integration.test_api.helpers import create_poll, vote


@pytest.mark.integration
class TestCompleteVotingFlow:
    """Test the complete voting workflow."""

    def test_complete_voting_flow(self, client, auth_headers, other_auth_headers):
        """Create poll → check eligibility → vote → read stats and results."""
        poll = create_poll(client, auth_headers)
        poll_id = poll["id"]
        tacos, ramen, _ = (o["id"] for o in poll["options"])

        response = client.get(f"/api/v1/polls/{poll_id}/eligibility", headers=other_auth_headers)
        assert response.status_code == 200
        assert response.json() == {"poll_id": poll_id, "can_vote": True}

        response = vote(client, poll_id, tacos, other_auth_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert set(data["vote"]) == {"id", "poll_id", "option_id", "created_at"}
        assert data["vote"]["poll_id"] == poll_id
        assert data["vote"]["option_id"] == tacos

        response = vote(client, poll_id, ramen, auth_headers)
        assert response.status_code == 201

        response = client.get(f"/api/v1/polls/{poll_id}/eligibility", headers=other_auth_headers)
        assert response.json()["can_vote"] is False

        stats = client.get(f"/api/v1/polls/{poll_id}/stats").json()
        assert stats["total_votes"] == 2
        assert stats["unique_voters"] == 2
        assert [o["vote_count"] for o in stats["options"]] == [1, 1, 0]

        results = client.get(f"/api/v1/polls/{poll_id}/results").json()
        assert [o["vote_percentage"] for o in results["options"]] == [50.0, 50.0, 0.0]

    def test_second_vote_on_single_vote_poll(self, client, auth_headers):
        poll = create_poll(client, auth_headers)
        x, y, _ = (o["id"] for o in poll["options"])

        assert vote(client, poll["id"], x, auth_headers).status_code == 201
        response = vote(client, poll["id"], y, auth_headers)

        assert response.status_code == 409
        assert response.json() == {"detail": "You have already voted on this poll"}
        assert client.get(f"/api/v1/polls/{poll['id']}/stats").json()["total_votes"] == 1

    def test_multiple_votes_within_quota(self, client, auth_headers):
        poll = create_poll(client, auth_headers, allow_multiple_votes=True, max_votes_per_user=2)
        a, b, c = (o["id"] for o in poll["options"])

        assert vote(client, poll["id"], a, auth_headers).status_code == 201
        assert vote(client, poll["id"], b, auth_headers).status_code == 201
        response = vote(client, poll["id"], c, auth_headers)

        assert response.status_code == 409
        assert "maximum number of votes" in response.json()["detail"]

    def test_option_from_another_poll(self, client, auth_headers):
        poll = create_poll(client, auth_headers)
        other = create_poll(client, auth_headers, title="Another poll")

        response = vote(client, poll["id"], other["options"][0]["id"], auth_headers)

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid option for this poll"}

    def test_vote_requires_token_on_regular_poll(self, client, auth_headers):
        poll = create_poll(client, auth_headers)

        response = vote(client, poll["id"], poll["options"][0]["id"])

        assert response.status_code == 401

    def test_anonymous_poll_accepts_anonymous_votes(self, client, auth_headers):
        poll = create_poll(client, auth_headers, is_anonymous=True)

        response = vote(client, poll["id"], poll["options"][0]["id"])

        assert response.status_code == 201
        assert client.get(f"/api/v1/polls/{poll['id']}/stats").json()["total_votes"] == 1

    def test_identity_comes_from_token_not_body(self, client, auth_headers, user_id):
        poll = create_poll(client, auth_headers)

        response = client.post(
            f"/api/v1/polls/{poll['id']}/votes",
            json={"option_id": poll["options"][0]["id"], "user_id": str(uuid.uuid4())},
            headers=auth_headers,
        )
        assert response.status_code == 201

        history = client.get("/api/v1/users/me/votes", headers=auth_headers).json()
        assert [h["option_id"] for h in history] == [poll["options"][0]["id"]]

    def test_retract_and_vote_again(self, client, auth_headers):
        poll = create_poll(client, auth_headers)
        x, y, _ = (o["id"] for o in poll["options"])
        vote(client, poll["id"], x, auth_headers)

        response = client.request(
            "DELETE", f"/api/v1/polls/{poll['id']}/votes", json={"option_id": x}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["success"] is True

        assert vote(client, poll["id"], y, auth_headers).status_code == 201

    def test_retract_without_vote(self, client, auth_headers):
        poll = create_poll(client, auth_headers)

        response = client.request(
            "DELETE",
            f"/api/v1/polls/{poll['id']}/votes",
            json={"option_id": poll["options"][0]["id"]},
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json() == {"detail": "No vote to remove"}

    def test_voting_history(self, client, auth_headers):
        poll = create_poll(client, auth_headers, title="Best editor", options=["Vim", "Emacs"])
        vote(client, poll["id"], poll["options"][1]["id"], auth_headers)

        history = client.get("/api/v1/users/me/votes", headers=auth_headers).json()

        assert len(history) == 1
        assert history[0]["poll_title"] == "Best editor"
        assert history[0]["selected_option"] == "Emacs"
