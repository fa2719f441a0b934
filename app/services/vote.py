"""Vote business logic."""
import uuid
from datetime import datetime
from typing import List, Optional

from app.core.exceptions import (
    AuthenticationRequiredError,
    DuplicateOptionVoteError,
    DuplicateVoteError,
    InvalidOptionError,
    OptionNotFoundError,
    PollExpiredError,
    PollNotFoundError,
    VoteConflictError,
    VoteNotFoundError,
    VoteQuotaExceededError,
)
from app.core.logging_config import get_logger
from app.core.utils import utcnow
from app.services.eligibility import Eligibility, PollState, evaluate_eligibility, poll_state
from app.store import PollRecord, PollStore, UniqueViolationError, UserVoteRecord, VoteRecord

logger = get_logger(__name__)


def _raise_for_eligibility(poll: PollRecord, verdict: Eligibility) -> None:
    if verdict in (Eligibility.POLL_NOT_FOUND, Eligibility.POLL_INACTIVE):
        raise PollNotFoundError()
    if verdict is Eligibility.POLL_EXPIRED:
        raise PollExpiredError()
    if verdict is Eligibility.QUOTA_EXHAUSTED:
        # A single-vote poll reports every further attempt as "already voted"
        if not poll.allow_multiple_votes:
            raise DuplicateVoteError()
        raise VoteQuotaExceededError()


async def submit_vote(
    store: PollStore,
    poll_id: uuid.UUID,
    option_id: uuid.UUID,
    user_id: Optional[uuid.UUID],
    voter_ip: Optional[str] = None,
    now: Optional[datetime] = None,
) -> VoteRecord:
    """
    Cast a vote on a poll.

    The checks before the insert give fast, precise errors. They are not
    atomic with the insert, so the store's unique constraint on
    (poll_id, user_id, option_id) has the final word on duplicates.

    Args:
        store: Poll store
        poll_id: Poll being voted on
        option_id: Chosen option, must belong to the poll
        user_id: Authenticated voter, None for an anonymous caller
        voter_ip: Client address, recorded with the vote
        now: Evaluation time, defaults to the current UTC time

    Returns:
        The persisted vote

    Raises:
        PollNotFoundError: Poll is absent or inactive
        AuthenticationRequiredError: No identity and the poll is not anonymous
        PollExpiredError: Poll has expired
        OptionNotFoundError: Option does not exist
        InvalidOptionError: Option belongs to another poll
        DuplicateVoteError: User already voted on a single-vote poll
        VoteQuotaExceededError: User used up max_votes_per_user
        DuplicateOptionVoteError: User already voted for this option
        VoteConflictError: A concurrent request inserted the same vote first
    """
    now = now or utcnow()

    poll = await store.get_poll(poll_id)
    if poll is None or not poll.is_active:
        raise PollNotFoundError()

    if user_id is None and not poll.is_anonymous:
        raise AuthenticationRequiredError()

    # Anonymous votes carry no identity to count against a quota
    existing_votes = await store.count_votes(poll_id, user_id) if user_id is not None else 0
    _raise_for_eligibility(poll, evaluate_eligibility(poll, existing_votes, now))

    option = await store.get_option(option_id)
    if option is None:
        raise OptionNotFoundError()
    if option.poll_id != poll_id:
        raise InvalidOptionError()

    if user_id is not None:
        if not poll.allow_multiple_votes and existing_votes > 0:
            raise DuplicateVoteError()

        if await store.find_vote(poll_id, user_id, option_id) is not None:
            raise DuplicateOptionVoteError()

    try:
        vote = await store.insert_vote(poll_id, option_id, user_id, voter_ip)
    except UniqueViolationError as e:
        logger.warning(
            "vote_conflict",
            poll_id=str(poll_id),
            option_id=str(option_id),
            user_id=str(user_id),
            constraint=e.constraint,
        )
        raise VoteConflictError()

    logger.info(
        "vote_recorded",
        vote_id=str(vote.id),
        poll_id=str(poll_id),
        option_id=str(option_id),
        anonymous=user_id is None,
    )
    return vote


async def retract_vote(
    store: PollStore,
    poll_id: uuid.UUID,
    option_id: uuid.UUID,
    user_id: Optional[uuid.UUID],
    now: Optional[datetime] = None,
) -> None:
    """
    Remove the caller's own vote for one option.

    Only votes on active, unexpired polls can be retracted. At most one row
    is deleted, and only one belonging to ``user_id``.
    """
    if user_id is None:
        raise AuthenticationRequiredError()

    poll = await store.get_poll(poll_id)
    state = poll_state(poll, now or utcnow())
    if state in (PollState.DELETED, PollState.INACTIVE):
        raise PollNotFoundError()
    if state is PollState.EXPIRED:
        raise PollExpiredError()

    if not await store.delete_vote(poll_id, option_id, user_id):
        raise VoteNotFoundError()

    logger.info("vote_retracted", poll_id=str(poll_id), option_id=str(option_id))


async def list_user_votes(store: PollStore, user_id: uuid.UUID) -> List[UserVoteRecord]:
    """The user's voting history across all polls, newest first."""
    return await store.list_user_votes(user_id)
