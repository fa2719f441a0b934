"""Poll endpoints."""
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from app.api.deps import get_current_user_id, get_optional_user_id, get_poll_id, get_store, get_voter_ip
from app.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, MAX_SEARCH_LENGTH
from app.core.rate_limit import RATE_LIMITS, limiter
from app.schemas import (
    EligibilityResponse,
    PollCreate,
    PollListResponse,
    PollResponse,
    PollResults,
    PollStats,
    PollUpdate,
    PollWithOptions,
)
from app.services import (
    can_vote,
    create_poll,
    delete_poll,
    get_poll_results,
    get_poll_stats,
    get_poll_with_options,
    list_active_polls,
    record_view,
    update_poll,
)
from app.store import PollStore

router = APIRouter()


@router.get("", response_model=PollListResponse)
@limiter.limit(RATE_LIMITS["read"])
async def list_polls_endpoint(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    search: Optional[str] = Query(None, max_length=MAX_SEARCH_LENGTH),
    store: PollStore = Depends(get_store),
):
    """
    List active polls, newest first.

    Each poll carries its total vote count. The counts for a page are
    fetched concurrently; if any of them fails the request fails with a 503
    rather than showing a misleading zero.

    Args:
        request: FastAPI Request (for rate limiting)
        page: 1-based page number
        limit: Page size (max 50)
        search: Optional case-insensitive title filter
        store: Poll store (injected)

    Returns:
        PollListResponse with polls and pagination info

    Example:
        Request:
            GET /api/v1/polls?page=1&limit=10&search=lunch

        Response (200):
            {
                "polls": [
                    {
                        "id": "8c1f...",
                        "title": "Where should we have lunch?",
                        "total_votes": 12,
                        ...
                    }
                ],
                "pagination": {"page": 1, "limit": 10, "has_more": false}
            }
    """
    return await list_active_polls(store, page=page, limit=limit, search=search)


@router.post("", response_model=PollWithOptions, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["create_poll"])
async def create_poll_endpoint(
    request: Request,
    poll: PollCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    store: PollStore = Depends(get_store),
):
    """
    Create a poll with its options (authenticated users only).

    The title, description and options are sanitized, options must be unique
    (case-insensitive) and their order is kept. If the options cannot be
    stored the poll itself is removed again.

    Args:
        request: FastAPI Request (for rate limiting)
        poll: PollCreate payload
        user_id: Authenticated creator (from the access token)
        store: Poll store (injected)

    Returns:
        PollWithOptions for the new poll

    Raises:
        401 if not authenticated
        422 if the payload fails validation
        503 if the store is unavailable

    Rate Limit:
        5 requests per 5 minutes per IP

    Example:
        Request:
            POST /api/v1/polls
            Authorization: Bearer eyJhbGc...
            {
                "title": "Where should we have lunch?",
                "options": ["Tacos", "Ramen", "Salad"],
                "allow_multiple_votes": true,
                "max_votes_per_user": 2
            }

        Response (201):
            {
                "id": "8c1f...",
                "title": "Where should we have lunch?",
                "options": [
                    {"id": "...", "option_text": "Tacos", "order_index": 0},
                    {"id": "...", "option_text": "Ramen", "order_index": 1},
                    {"id": "...", "option_text": "Salad", "order_index": 2}
                ],
                ...
            }
    """
    return await create_poll(store, user_id, poll)


@router.get("/{poll_id}", response_model=PollWithOptions)
@limiter.limit(RATE_LIMITS["read"])
async def get_poll_endpoint(
    request: Request,
    poll_id: uuid.UUID = Depends(get_poll_id),
    user_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    voter_ip: str = Depends(get_voter_ip),
    store: PollStore = Depends(get_store),
):
    """
    Get a poll with its options in display order.

    Inactive polls are only visible to their creator. Every successful read
    is recorded as a view.
    """
    poll = await get_poll_with_options(store, poll_id, viewer_id=user_id)
    await record_view(store, poll_id, user_id=user_id, viewer_ip=voter_ip)
    return poll


@router.patch("/{poll_id}", response_model=PollResponse)
@limiter.limit(RATE_LIMITS["manage_poll"])
async def update_poll_endpoint(
    request: Request,
    changes: PollUpdate,
    poll_id: uuid.UUID = Depends(get_poll_id),
    user_id: uuid.UUID = Depends(get_current_user_id),
    store: PollStore = Depends(get_store),
):
    """
    Update title, description, expiration or the active flag (creator only).

    Raises:
        401 if not authenticated
        403 if the caller did not create the poll
        404 if the poll does not exist
    """
    return await update_poll(store, poll_id, user_id, changes)


@router.delete("/{poll_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(RATE_LIMITS["manage_poll"])
async def delete_poll_endpoint(
    request: Request,
    poll_id: uuid.UUID = Depends(get_poll_id),
    user_id: uuid.UUID = Depends(get_current_user_id),
    store: PollStore = Depends(get_store),
):
    """Delete a poll with all its options and votes (creator only)."""
    await delete_poll(store, poll_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{poll_id}/eligibility", response_model=EligibilityResponse)
@limiter.limit(RATE_LIMITS["read"])
async def eligibility_endpoint(
    request: Request,
    poll_id: uuid.UUID = Depends(get_poll_id),
    user_id: uuid.UUID = Depends(get_current_user_id),
    store: PollStore = Depends(get_store),
):
    """
    Tell whether the caller may cast one more vote on the poll.

    The answer is advisory, meant for enabling or disabling the vote button.
    The vote endpoint re-checks everything.

    Raises:
        401 if not authenticated
        503 if the store is unavailable (never reported as False)
    """
    return EligibilityResponse(poll_id=poll_id, can_vote=await can_vote(store, poll_id, user_id))


@router.get("/{poll_id}/stats", response_model=PollStats)
@limiter.limit(RATE_LIMITS["read"])
async def stats_endpoint(
    request: Request,
    poll_id: uuid.UUID = Depends(get_poll_id),
    user_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    store: PollStore = Depends(get_store),
):
    """
    Get vote, view and voter counts for a poll.

    Like the poll itself, stats of an inactive poll are only visible to its
    creator; everyone else gets 404.

    Example:
        Response (200):
            {
                "total_votes": 3,
                "total_views": 10,
                "unique_voters": 2,
                "options": [
                    {"option_id": "...", "option_text": "Tacos", "vote_count": 2},
                    {"option_id": "...", "option_text": "Ramen", "vote_count": 1},
                    {"option_id": "...", "option_text": "Salad", "vote_count": 0}
                ]
            }
    """
    return await get_poll_stats(store, poll_id, viewer_id=user_id)


@router.get("/{poll_id}/results", response_model=PollResults)
@limiter.limit(RATE_LIMITS["read"])
async def results_endpoint(
    request: Request,
    poll_id: uuid.UUID = Depends(get_poll_id),
    user_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    store: PollStore = Depends(get_store),
):
    """
    Get per-option vote counts with percentages (0.0 while nobody has voted).

    Inactive polls answer 404 unless the caller created them.
    """
    return await get_poll_results(store, poll_id, viewer_id=user_id)
