"""Store interface shared by the in-memory and the relational implementations.

Every method is one store round trip. The services only ever talk to this
interface, so the voting rules run unchanged against either backend.
"""
import abc
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.store.records import NewPoll, OptionRecord, PollRecord, UserVoteRecord, VoteRecord

# Fields a creator may change after the poll exists
POLL_UPDATABLE_FIELDS = frozenset({"title", "description", "expires_at", "is_active"})

VOTE_UNIQUE_CONSTRAINT = "uq_votes_poll_user_option"
OPTION_ORDER_UNIQUE_CONSTRAINT = "uq_poll_options_poll_order"


class UniqueViolationError(Exception):
    """An insert collided with a unique constraint."""

    def __init__(self, constraint: str):
        self.constraint = constraint
        super().__init__(f"Unique constraint violated: {constraint}")


class PollStore(abc.ABC):
    """Persistence for polls, options, votes and poll views."""

    @abc.abstractmethod
    async def ping(self) -> None:
        """Raise if the store cannot be reached."""

    # Polls

    @abc.abstractmethod
    async def get_poll(self, poll_id: uuid.UUID) -> Optional[PollRecord]:
        ...

    @abc.abstractmethod
    async def list_polls(
        self,
        *,
        active_only: bool = False,
        created_by: Optional[uuid.UUID] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[PollRecord]:
        """Polls ordered newest first. ``search`` matches the title case-insensitively."""

    @abc.abstractmethod
    async def insert_poll(self, new_poll: NewPoll) -> PollRecord:
        ...

    @abc.abstractmethod
    async def update_poll(self, poll_id: uuid.UUID, changes: Dict[str, Any]) -> Optional[PollRecord]:
        """Apply ``changes`` (keys from POLL_UPDATABLE_FIELDS). None if the poll is gone."""

    @abc.abstractmethod
    async def delete_poll(self, poll_id: uuid.UUID) -> bool:
        """Delete the poll with its options, votes and views. False if it did not exist."""

    # Options

    @abc.abstractmethod
    async def insert_options(self, poll_id: uuid.UUID, option_texts: List[str]) -> List[OptionRecord]:
        """Insert options with order_index 0..n-1 in the given order."""

    @abc.abstractmethod
    async def list_options(self, poll_id: uuid.UUID) -> List[OptionRecord]:
        """Options of a poll ordered by order_index."""

    @abc.abstractmethod
    async def get_option(self, option_id: uuid.UUID) -> Optional[OptionRecord]:
        ...

    # Votes

    @abc.abstractmethod
    async def count_votes(self, poll_id: uuid.UUID, user_id: Optional[uuid.UUID] = None) -> int:
        """All votes on the poll, or only the ones cast by ``user_id``."""

    @abc.abstractmethod
    async def find_vote(
        self, poll_id: uuid.UUID, user_id: uuid.UUID, option_id: uuid.UUID
    ) -> Optional[VoteRecord]:
        ...

    @abc.abstractmethod
    async def insert_vote(
        self,
        poll_id: uuid.UUID,
        option_id: uuid.UUID,
        user_id: Optional[uuid.UUID],
        voter_ip: Optional[str] = None,
    ) -> VoteRecord:
        """Insert a vote.

        Raises:
            UniqueViolationError: The user already has a vote for this option
        """

    @abc.abstractmethod
    async def delete_vote(self, poll_id: uuid.UUID, option_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Delete the user's vote for this option. False if there was none."""

    @abc.abstractmethod
    async def count_votes_by_option(self, poll_id: uuid.UUID) -> Dict[uuid.UUID, int]:
        """Vote count per option id, from a single read. Options without votes are absent."""

    @abc.abstractmethod
    async def count_unique_voters(self, poll_id: uuid.UUID) -> int:
        """Distinct non-null user ids among the poll's votes."""

    @abc.abstractmethod
    async def list_user_votes(self, user_id: uuid.UUID) -> List[UserVoteRecord]:
        """The user's votes across all polls, newest first."""

    # Views

    @abc.abstractmethod
    async def insert_view(
        self,
        poll_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
        viewer_ip: Optional[str] = None,
        viewed_at: Optional[datetime] = None,
    ) -> None:
        ...

    @abc.abstractmethod
    async def count_views(self, poll_id: uuid.UUID) -> int:
        ...
