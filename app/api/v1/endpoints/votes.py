"""Vote endpoints."""
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Request, status

from app.api.deps import get_current_user_id, get_optional_user_id, get_poll_id, get_store, get_voter_ip, parse_id
from app.core.rate_limit import RATE_LIMITS, limiter
from app.schemas import SuccessResponse, VoteDetail, VoteRequest, VoteResponse
from app.services import retract_vote, submit_vote
from app.store import PollStore

router = APIRouter()


@router.post("/{poll_id}/votes", response_model=VoteResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["vote"])
async def vote_endpoint(
    request: Request,
    vote_request: VoteRequest,
    poll_id: uuid.UUID = Depends(get_poll_id),
    user_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    voter_ip: str = Depends(get_voter_ip),
    store: PollStore = Depends(get_store),
) -> VoteResponse:
    """
    Cast a vote for one option of a poll.

    The voter is always the holder of the access token; the body only names
    the option. Anonymous polls also accept callers without a token. The
    client IP is stored with the vote.

    Args:
        request: FastAPI Request (for rate limiting)
        vote_request: VoteRequest with option_id
        poll_id: Poll to vote in
        user_id: Authenticated voter, None without a token
        voter_ip: Client address
        store: Poll store (injected)

    Returns:
        VoteResponse with the stored vote

    Raises:
        400 if an id is malformed or the option belongs to another poll
        401 if the poll is not anonymous and the caller is not authenticated
        404 if the poll (or option) does not exist or is inactive
        409 if the poll expired, the vote quota is used up, or the vote is
            a duplicate (including a duplicate submitted concurrently)
        503 if the store is unavailable

    Rate Limit:
        20 requests per minute per IP

    Example:
        Request:
            POST /api/v1/polls/8c1f.../votes
            Authorization: Bearer eyJhbGc...
            {
                "option_id": "5d2e..."
            }

        Response (201):
            {
                "success": true,
                "vote": {
                    "id": "a41b...",
                    "poll_id": "8c1f...",
                    "option_id": "5d2e...",
                    "created_at": "2026-03-01T12:00:00Z"
                }
            }

        Response (409):
            {
                "detail": "You have already voted on this poll"
            }
    """
    option_id = parse_id(vote_request.option_id, "option ID")
    vote = await submit_vote(store, poll_id, option_id, user_id, voter_ip=voter_ip)
    return VoteResponse(vote=VoteDetail.model_validate(vote))


@router.delete("/{poll_id}/votes", response_model=SuccessResponse)
@limiter.limit(RATE_LIMITS["vote"])
async def retract_vote_endpoint(
    request: Request,
    vote_request: VoteRequest,
    poll_id: uuid.UUID = Depends(get_poll_id),
    user_id: uuid.UUID = Depends(get_current_user_id),
    store: PollStore = Depends(get_store),
) -> SuccessResponse:
    """
    Remove the caller's vote for one option.

    Only the caller's own vote is ever touched. Votes on expired polls
    cannot be retracted.
    """
    option_id = parse_id(vote_request.option_id, "option ID")
    await retract_vote(store, poll_id, option_id, user_id)
    return SuccessResponse(message="Vote removed")
