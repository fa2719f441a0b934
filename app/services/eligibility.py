"""Voting eligibility.

A quick pre-check for the UI and for the vote workflow. It is advisory: the
unique constraint on votes stays the authoritative duplicate guard.
"""
import enum
import uuid
from datetime import datetime
from typing import Optional

from app.core.logging_config import get_logger
from app.core.utils import is_expired, utcnow
from app.store import PollRecord, PollStore

logger = get_logger(__name__)


class PollState(str, enum.Enum):
    """Lifecycle of a poll as seen by voters."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    DELETED = "deleted"


class Eligibility(str, enum.Enum):
    ELIGIBLE = "eligible"
    POLL_NOT_FOUND = "poll_not_found"
    POLL_INACTIVE = "poll_inactive"
    POLL_EXPIRED = "poll_expired"
    QUOTA_EXHAUSTED = "quota_exhausted"


def poll_state(poll: Optional[PollRecord], now: Optional[datetime] = None) -> PollState:
    """Tag a poll with its lifecycle state. An absent poll is DELETED."""
    if poll is None:
        return PollState.DELETED
    if not poll.is_active:
        return PollState.INACTIVE
    if is_expired(poll.expires_at, now):
        return PollState.EXPIRED
    return PollState.ACTIVE


def evaluate_eligibility(
    poll: Optional[PollRecord], existing_votes: int, now: Optional[datetime] = None
) -> Eligibility:
    """
    Decide whether a user holding ``existing_votes`` votes may vote once more.

    Pure function over already-loaded data.
    """
    state = poll_state(poll, now)
    if state is PollState.DELETED:
        return Eligibility.POLL_NOT_FOUND
    if state is PollState.INACTIVE:
        return Eligibility.POLL_INACTIVE
    if state is PollState.EXPIRED:
        return Eligibility.POLL_EXPIRED
    if existing_votes >= poll.max_votes_per_user:
        return Eligibility.QUOTA_EXHAUSTED
    return Eligibility.ELIGIBLE


async def check_eligibility(
    store: PollStore,
    poll_id: uuid.UUID,
    user_id: uuid.UUID,
    now: Optional[datetime] = None,
) -> Eligibility:
    """Load the poll and the user's vote count, then evaluate."""
    poll = await store.get_poll(poll_id)
    if poll is None:
        return Eligibility.POLL_NOT_FOUND

    existing_votes = await store.count_votes(poll_id, user_id)
    return evaluate_eligibility(poll, existing_votes, now or utcnow())


async def can_vote(
    store: PollStore,
    poll_id: uuid.UUID,
    user_id: uuid.UUID,
    now: Optional[datetime] = None,
) -> bool:
    """
    Whether the user may cast one more vote on the poll right now.

    Fails closed on the poll itself: absent, inactive and expired polls and an
    exhausted quota all answer False. A store failure is not an answer and
    propagates as StoreError, so callers can tell it apart and retry.
    """
    verdict = await check_eligibility(store, poll_id, user_id, now)
    if verdict is not Eligibility.ELIGIBLE:
        logger.debug("vote_not_eligible", poll_id=str(poll_id), user_id=str(user_id), reason=verdict.value)
    return verdict is Eligibility.ELIGIBLE
