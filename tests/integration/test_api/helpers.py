"""Request helpers shared by the API tests."""
from typing import List, Optional


def create_poll(client, headers, options: Optional[List[str]] = None, **fields) -> dict:
    """Create a poll through the API and return its JSON body."""
    payload = {"title": "Where should we have lunch?", "options": options or ["Tacos", "Ramen", "Salad"]}
    payload.update(fields)
    response = client.post("/api/v1/polls", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def vote(client, poll_id, option_id, headers=None):
    return client.post(f"/api/v1/polls/{poll_id}/votes", json={"option_id": option_id}, headers=headers or {})
