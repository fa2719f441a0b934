"""In-memory store, used by tests and local experiments."""
import asyncio
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from app.core.utils import utcnow
from app.store.base import (
    OPTION_ORDER_UNIQUE_CONSTRAINT,
    POLL_UPDATABLE_FIELDS,
    VOTE_UNIQUE_CONSTRAINT,
    PollStore,
    UniqueViolationError,
)
from app.store.records import NewPoll, OptionRecord, PollRecord, UserVoteRecord, VoteRecord

# (poll_id, user_id, viewer_ip, viewed_at)
ViewRow = Tuple[uuid.UUID, Optional[uuid.UUID], Optional[str], datetime]


class MemoryPollStore(PollStore):
    """
    Dict-backed store with the same constraints as the relational schema.

    Each method yields to the event loop once before touching data, the way a
    real round trip would, and then runs without interruption. Concurrent
    requests therefore interleave between round trips, never inside one.
    """

    def __init__(self, latency: float = 0.0):
        self.latency = latency
        self.polls: Dict[uuid.UUID, PollRecord] = {}
        self.options: Dict[uuid.UUID, OptionRecord] = {}
        self.votes: Dict[uuid.UUID, VoteRecord] = {}
        self.views: List[ViewRow] = []

    async def _round_trip(self) -> None:
        await asyncio.sleep(self.latency)

    async def ping(self) -> None:
        await self._round_trip()

    # Polls

    async def get_poll(self, poll_id: uuid.UUID) -> Optional[PollRecord]:
        await self._round_trip()
        return self.polls.get(poll_id)

    async def list_polls(
        self,
        *,
        active_only: bool = False,
        created_by: Optional[uuid.UUID] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[PollRecord]:
        await self._round_trip()
        polls = list(self.polls.values())
        if active_only:
            polls = [p for p in polls if p.is_active]
        if created_by is not None:
            polls = [p for p in polls if p.created_by == created_by]
        if search:
            needle = search.casefold()
            polls = [p for p in polls if needle in p.title.casefold()]

        polls.sort(key=lambda p: (p.created_at, p.id), reverse=True)
        end = offset + limit if limit is not None else None
        return polls[offset:end]

    async def insert_poll(self, new_poll: NewPoll) -> PollRecord:
        await self._round_trip()
        now = utcnow()
        poll = PollRecord(id=uuid.uuid4(), created_at=now, updated_at=now, **new_poll.model_dump())
        self.polls[poll.id] = poll
        return poll

    async def update_poll(self, poll_id: uuid.UUID, changes: Dict[str, Any]) -> Optional[PollRecord]:
        await self._round_trip()
        poll = self.polls.get(poll_id)
        if poll is None:
            return None

        updates = {key: value for key, value in changes.items() if key in POLL_UPDATABLE_FIELDS}
        updates["updated_at"] = utcnow()
        poll = poll.model_copy(update=updates)
        self.polls[poll_id] = poll
        return poll

    async def delete_poll(self, poll_id: uuid.UUID) -> bool:
        await self._round_trip()
        if self.polls.pop(poll_id, None) is None:
            return False

        self.options = {k: o for k, o in self.options.items() if o.poll_id != poll_id}
        self.votes = {k: v for k, v in self.votes.items() if v.poll_id != poll_id}
        self.views = [row for row in self.views if row[0] != poll_id]
        return True

    # Options

    async def insert_options(self, poll_id: uuid.UUID, option_texts: List[str]) -> List[OptionRecord]:
        await self._round_trip()
        taken = {o.order_index for o in self.options.values() if o.poll_id == poll_id}
        if taken & set(range(len(option_texts))):
            raise UniqueViolationError(OPTION_ORDER_UNIQUE_CONSTRAINT)

        now = utcnow()
        created = [
            OptionRecord(id=uuid.uuid4(), poll_id=poll_id, option_text=text, order_index=index, created_at=now)
            for index, text in enumerate(option_texts)
        ]
        for option in created:
            self.options[option.id] = option
        return created

    async def list_options(self, poll_id: uuid.UUID) -> List[OptionRecord]:
        await self._round_trip()
        options = [o for o in self.options.values() if o.poll_id == poll_id]
        return sorted(options, key=lambda o: o.order_index)

    async def get_option(self, option_id: uuid.UUID) -> Optional[OptionRecord]:
        await self._round_trip()
        return self.options.get(option_id)

    # Votes

    async def count_votes(self, poll_id: uuid.UUID, user_id: Optional[uuid.UUID] = None) -> int:
        await self._round_trip()
        return sum(
            1
            for v in self.votes.values()
            if v.poll_id == poll_id and (user_id is None or v.user_id == user_id)
        )

    async def find_vote(
        self, poll_id: uuid.UUID, user_id: uuid.UUID, option_id: uuid.UUID
    ) -> Optional[VoteRecord]:
        await self._round_trip()
        return self._find_vote(poll_id, user_id, option_id)

    def _find_vote(self, poll_id, user_id, option_id) -> Optional[VoteRecord]:
        for vote in self.votes.values():
            if vote.poll_id == poll_id and vote.user_id == user_id and vote.option_id == option_id:
                return vote
        return None

    async def insert_vote(
        self,
        poll_id: uuid.UUID,
        option_id: uuid.UUID,
        user_id: Optional[uuid.UUID],
        voter_ip: Optional[str] = None,
    ) -> VoteRecord:
        await self._round_trip()
        # NULL user ids never collide, as in SQL
        if user_id is not None and self._find_vote(poll_id, user_id, option_id) is not None:
            raise UniqueViolationError(VOTE_UNIQUE_CONSTRAINT)

        vote = VoteRecord(
            id=uuid.uuid4(),
            poll_id=poll_id,
            option_id=option_id,
            user_id=user_id,
            voter_ip=voter_ip,
            created_at=utcnow(),
        )
        self.votes[vote.id] = vote
        return vote

    async def delete_vote(self, poll_id: uuid.UUID, option_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        await self._round_trip()
        vote = self._find_vote(poll_id, user_id, option_id)
        if vote is None:
            return False
        del self.votes[vote.id]
        return True

    async def count_votes_by_option(self, poll_id: uuid.UUID) -> Dict[uuid.UUID, int]:
        await self._round_trip()
        counts: Dict[uuid.UUID, int] = {}
        for vote in self.votes.values():
            if vote.poll_id == poll_id:
                counts[vote.option_id] = counts.get(vote.option_id, 0) + 1
        return counts

    async def count_unique_voters(self, poll_id: uuid.UUID) -> int:
        await self._round_trip()
        return len({v.user_id for v in self.votes.values() if v.poll_id == poll_id and v.user_id is not None})

    async def list_user_votes(self, user_id: uuid.UUID) -> List[UserVoteRecord]:
        await self._round_trip()
        history = []
        for vote in self.votes.values():
            if vote.user_id != user_id:
                continue
            history.append(
                UserVoteRecord(
                    id=vote.id,
                    voted_at=vote.created_at,
                    poll_id=vote.poll_id,
                    poll_title=self.polls[vote.poll_id].title,
                    option_id=vote.option_id,
                    selected_option=self.options[vote.option_id].option_text,
                )
            )
        history.sort(key=lambda row: row.voted_at, reverse=True)
        return history

    # Views

    async def insert_view(
        self,
        poll_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
        viewer_ip: Optional[str] = None,
        viewed_at: Optional[datetime] = None,
    ) -> None:
        await self._round_trip()
        self.views.append((poll_id, user_id, viewer_ip, viewed_at or utcnow()))

    async def count_views(self, poll_id: uuid.UUID) -> int:
        await self._round_trip()
        return sum(1 for row in self.views if row[0] == poll_id)
