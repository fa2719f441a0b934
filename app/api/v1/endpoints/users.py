"""Endpoints scoped to the authenticated user."""
import uuid
from typing import List

from fastapi import APIRouter, Depends, Request

from app.api.deps import get_current_user_id, get_store
from app.core.rate_limit import RATE_LIMITS, limiter
from app.schemas import PollResponse, VoteHistoryItem
from app.services import list_user_polls, list_user_votes
from app.store import PollStore

router = APIRouter()


@router.get("/me/polls", response_model=List[PollResponse])
@limiter.limit(RATE_LIMITS["read"])
async def my_polls_endpoint(
    request: Request,
    user_id: uuid.UUID = Depends(get_current_user_id),
    store: PollStore = Depends(get_store),
):
    """Polls created by the caller, newest first, inactive ones included."""
    return await list_user_polls(store, user_id)


@router.get("/me/votes", response_model=List[VoteHistoryItem])
@limiter.limit(RATE_LIMITS["read"])
async def my_votes_endpoint(
    request: Request,
    user_id: uuid.UUID = Depends(get_current_user_id),
    store: PollStore = Depends(get_store),
):
    """
    The caller's voting history.

    Example:
        Response (200):
            [
                {
                    "id": "a41b...",
                    "voted_at": "2026-03-01T12:00:00Z",
                    "poll_id": "8c1f...",
                    "poll_title": "Where should we have lunch?",
                    "option_id": "5d2e...",
                    "selected_option": "Tacos"
                }
            ]
    """
    votes = await list_user_votes(store, user_id)
    return [VoteHistoryItem.model_validate(vote) for vote in votes]
