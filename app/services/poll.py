"""Poll business logic."""
import asyncio
import uuid
from typing import List, Optional

from app.core.compensation import CompensatingActions
from app.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.exceptions import InfrastructureError, PermissionDeniedError, PollNotFoundError
from app.core.logging_config import get_logger
from app.core.sanitization import sanitize_search
from app.schemas.poll import (
    OptionResponse,
    PaginationInfo,
    PollCreate,
    PollListItem,
    PollListResponse,
    PollResponse,
    PollUpdate,
    PollWithOptions,
)
from app.store import NewPoll, OptionRecord, PollRecord, PollStore

logger = get_logger(__name__)


def _with_options(poll: PollRecord, options: List[OptionRecord]) -> PollWithOptions:
    return PollWithOptions(
        **poll.model_dump(),
        options=[OptionResponse.model_validate(option) for option in options],
    )


def is_visible_to(poll: Optional[PollRecord], viewer_id: Optional[uuid.UUID]) -> bool:
    """Anyone sees active polls; creators also see their inactive ones."""
    if poll is None:
        return False
    return poll.is_active or (viewer_id is not None and poll.created_by == viewer_id)


async def _get_owned_poll(store: PollStore, poll_id: uuid.UUID, user_id: uuid.UUID) -> PollRecord:
    poll = await store.get_poll(poll_id)
    if not is_visible_to(poll, user_id):
        raise PollNotFoundError()
    if poll.created_by != user_id:
        raise PermissionDeniedError("Only the poll creator can modify this poll")
    return poll


async def create_poll(store: PollStore, creator_id: uuid.UUID, data: PollCreate) -> PollWithOptions:
    """
    Create a poll together with its options.

    The two inserts are separate round trips. If inserting the options fails,
    the poll row is deleted again; a failed deletion is logged as an orphaned
    poll and the original error is re-raised either way.

    Args:
        store: Poll store
        creator_id: Authenticated creator
        data: Validated poll payload; option order becomes order_index

    Returns:
        PollWithOptions with options in the submitted order
    """
    new_poll = NewPoll(
        title=data.title,
        description=data.description,
        created_by=creator_id,
        expires_at=data.expires_at,
        allow_multiple_votes=data.allow_multiple_votes,
        is_anonymous=data.is_anonymous,
        max_votes_per_user=data.max_votes_per_user,
    )

    async with CompensatingActions("create_poll", failure_event="orphaned_poll") as saga:
        poll = await store.insert_poll(new_poll)
        saga.add("delete_poll", lambda: store.delete_poll(poll.id), poll_id=str(poll.id))
        options = await store.insert_options(poll.id, data.options)
        saga.commit()

    logger.info("poll_created", poll_id=str(poll.id), option_count=len(options))
    return _with_options(poll, options)


async def get_poll_with_options(
    store: PollStore, poll_id: uuid.UUID, viewer_id: Optional[uuid.UUID] = None
) -> PollWithOptions:
    """Get a poll and its ordered options, if the viewer may see it."""
    poll = await store.get_poll(poll_id)
    if not is_visible_to(poll, viewer_id):
        raise PollNotFoundError()

    options = await store.list_options(poll_id)
    return _with_options(poll, options)


async def update_poll(
    store: PollStore, poll_id: uuid.UUID, user_id: uuid.UUID, data: PollUpdate
) -> PollResponse:
    """Apply the creator's changes. Fields left out of the request are kept."""
    await _get_owned_poll(store, poll_id, user_id)

    changes = data.model_dump(exclude_unset=True)
    # Only description and expires_at may be cleared with an explicit null
    for field in ("title", "is_active"):
        if field in changes and changes[field] is None:
            del changes[field]

    poll = await store.update_poll(poll_id, changes)
    if poll is None:
        raise PollNotFoundError()

    logger.info("poll_updated", poll_id=str(poll_id), fields=sorted(changes))
    return PollResponse.model_validate(poll)


async def delete_poll(store: PollStore, poll_id: uuid.UUID, user_id: uuid.UUID) -> None:
    """Delete a poll with its options, votes and views (creator only)."""
    await _get_owned_poll(store, poll_id, user_id)

    if not await store.delete_poll(poll_id):
        raise PollNotFoundError()

    logger.info("poll_deleted", poll_id=str(poll_id))


async def record_view(
    store: PollStore,
    poll_id: uuid.UUID,
    user_id: Optional[uuid.UUID] = None,
    viewer_ip: Optional[str] = None,
) -> None:
    """
    Record that a poll was viewed. Analytics only, no eligibility check.

    A view that cannot be stored is logged and dropped; it never fails the
    read that triggered it.
    """
    try:
        await store.insert_view(poll_id, user_id=user_id, viewer_ip=viewer_ip)
    except InfrastructureError as e:
        logger.warning("view_not_recorded", poll_id=str(poll_id), error=str(e), error_type=type(e).__name__)


async def list_active_polls(
    store: PollStore,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    search: Optional[str] = None,
) -> PollListResponse:
    """
    List active polls, newest first, each with its total vote count.

    Vote counts for the page are fetched concurrently. Polls are independent,
    so no ordering between the counts is needed; a failing count fails the
    whole listing instead of being reported as zero.

    Args:
        store: Poll store
        page: 1-based page number
        limit: Page size, capped at MAX_PAGE_SIZE
        search: Optional case-insensitive title filter
    """
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)

    # One extra row tells whether another page exists
    polls = await store.list_polls(
        active_only=True,
        search=sanitize_search(search),
        offset=(page - 1) * limit,
        limit=limit + 1,
    )
    has_more = len(polls) > limit
    polls = polls[:limit]

    totals = await asyncio.gather(*(store.count_votes(poll.id) for poll in polls))

    return PollListResponse(
        polls=[
            PollListItem(**poll.model_dump(), total_votes=total)
            for poll, total in zip(polls, totals)
        ],
        pagination=PaginationInfo(page=page, limit=limit, has_more=has_more),
    )


async def list_user_polls(store: PollStore, user_id: uuid.UUID) -> List[PollResponse]:
    """All polls created by the user, inactive ones included."""
    polls = await store.list_polls(created_by=user_id)
    return [PollResponse.model_validate(poll) for poll in polls]
