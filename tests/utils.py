"""Helpers for building test data."""
import uuid
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from app.store import NewPoll, OptionRecord, PollRecord, PollStore


async def make_poll(
    store: PollStore,
    options: Sequence[str] = ("Tacos", "Ramen", "Salad"),
    created_by: Optional[uuid.UUID] = None,
    title: str = "Where should we have lunch?",
    expires_at: Optional[datetime] = None,
    is_active: bool = True,
    allow_multiple_votes: bool = False,
    is_anonymous: bool = False,
    max_votes_per_user: int = 1,
) -> Tuple[PollRecord, List[OptionRecord]]:
    """Insert a poll and its options directly through the store.

    Bypasses request validation, so expired polls can be created as well.
    """
    poll = await store.insert_poll(
        NewPoll(
            title=title,
            created_by=created_by or uuid.uuid4(),
            expires_at=expires_at,
            is_active=is_active,
            allow_multiple_votes=allow_multiple_votes,
            is_anonymous=is_anonymous,
            max_votes_per_user=max_votes_per_user,
        )
    )
    created = await store.insert_options(poll.id, list(options))
    return poll, created
