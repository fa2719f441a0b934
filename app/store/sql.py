"""Relational store backed by SQLAlchemy."""
import asyncio
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, TypeVar

from sqlalchemy import distinct, func, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool

from app.core.exceptions import StoreError, StoreTimeoutError
from app.core.logging_config import get_logger
from app.db.models import Poll, PollOption, PollView, Vote
from app.store.base import (
    OPTION_ORDER_UNIQUE_CONSTRAINT,
    POLL_UPDATABLE_FIELDS,
    VOTE_UNIQUE_CONSTRAINT,
    PollStore,
    UniqueViolationError,
)
from app.store.records import NewPoll, OptionRecord, PollRecord, UserVoteRecord, VoteRecord

logger = get_logger(__name__)

T = TypeVar("T")

_UNIQUE_CONSTRAINTS = (VOTE_UNIQUE_CONSTRAINT, OPTION_ORDER_UNIQUE_CONSTRAINT)


def _unique_constraint_name(error: IntegrityError) -> Optional[str]:
    """
    Identify which unique constraint an IntegrityError refers to.

    PostgreSQL names the constraint; SQLite lists the columns instead.
    """
    message = str(error.orig)
    for name in _UNIQUE_CONSTRAINTS:
        if name in message:
            return name

    lowered = message.lower()
    if "unique constraint" in lowered or "duplicate key" in lowered:
        if "votes." in lowered:
            return VOTE_UNIQUE_CONSTRAINT
        if "poll_options." in lowered:
            return OPTION_ORDER_UNIQUE_CONSTRAINT
        return "unknown"
    return None


def _discard_result(task: "asyncio.Future[Any]") -> None:
    """Consume the outcome of a round trip nobody is waiting for any more."""
    if not task.cancelled():
        task.exception()


class SqlPollStore(PollStore):
    """
    PollStore over a SQLAlchemy sessionmaker.

    Each round trip opens its own session, runs in the threadpool so it never
    blocks the event loop, and is bounded by ``timeout`` seconds. Sessions are
    never shared between concurrent round trips.

    A read that overruns the bound raises StoreTimeoutError. A write that
    overruns is waited out instead, so its caller never sees a timeout for a
    row that was committed anyway; the engine's statement timeout keeps that
    wait finite.
    """

    def __init__(self, session_factory: sessionmaker, timeout: float = 5.0):
        self.session_factory = session_factory
        self.timeout = timeout

    async def _run(self, operation: str, work: Callable[[Session], T], writes: bool = False) -> T:
        def call() -> T:
            with self.session_factory() as session:
                try:
                    return work(session)
                except SQLAlchemyError:
                    session.rollback()
                    raise

        task = asyncio.ensure_future(run_in_threadpool(call))
        try:
            try:
                return await asyncio.wait_for(asyncio.shield(task), timeout=self.timeout)
            except asyncio.TimeoutError:
                if not writes:
                    task.add_done_callback(_discard_result)
                    logger.error("store_timeout", operation=operation, timeout_seconds=self.timeout)
                    raise StoreTimeoutError(f"{operation} timed out after {self.timeout}s")
                # A commit already under way cannot be recalled; report what it did
                logger.warning("store_write_overran", operation=operation, timeout_seconds=self.timeout)
                return await task
        except IntegrityError as e:
            constraint = _unique_constraint_name(e)
            if constraint is not None:
                raise UniqueViolationError(constraint)
            logger.error("store_integrity_error", operation=operation, error=str(e.orig))
            raise StoreError(f"{operation} failed: {e.orig}")
        except SQLAlchemyError as e:
            logger.error("store_unavailable", operation=operation, error=str(e), error_type=type(e).__name__)
            raise StoreError(f"{operation} failed: {e}")

    async def ping(self) -> None:
        await self._run("ping", lambda db: db.execute(text("SELECT 1")))

    # Polls

    async def get_poll(self, poll_id: uuid.UUID) -> Optional[PollRecord]:
        def work(db: Session) -> Optional[PollRecord]:
            poll = db.get(Poll, poll_id)
            return PollRecord.model_validate(poll) if poll else None

        return await self._run("get_poll", work)

    async def list_polls(
        self,
        *,
        active_only: bool = False,
        created_by: Optional[uuid.UUID] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[PollRecord]:
        def work(db: Session) -> List[PollRecord]:
            query = db.query(Poll)
            if active_only:
                query = query.filter(Poll.is_active.is_(True))
            if created_by is not None:
                query = query.filter(Poll.created_by == created_by)
            if search:
                query = query.filter(Poll.title.ilike(f"%{search}%"))
            query = query.order_by(Poll.created_at.desc(), Poll.id.desc()).offset(offset)
            if limit is not None:
                query = query.limit(limit)
            return [PollRecord.model_validate(poll) for poll in query.all()]

        return await self._run("list_polls", work)

    async def insert_poll(self, new_poll: NewPoll) -> PollRecord:
        def work(db: Session) -> PollRecord:
            poll = Poll(**new_poll.model_dump())
            db.add(poll)
            db.commit()
            db.refresh(poll)
            return PollRecord.model_validate(poll)

        return await self._run("insert_poll", work, writes=True)

    async def update_poll(self, poll_id: uuid.UUID, changes: Dict[str, Any]) -> Optional[PollRecord]:
        def work(db: Session) -> Optional[PollRecord]:
            poll = db.get(Poll, poll_id)
            if poll is None:
                return None
            for key, value in changes.items():
                if key in POLL_UPDATABLE_FIELDS:
                    setattr(poll, key, value)
            poll.updated_at = datetime.now(timezone.utc)
            db.commit()
            db.refresh(poll)
            return PollRecord.model_validate(poll)

        return await self._run("update_poll", work, writes=True)

    async def delete_poll(self, poll_id: uuid.UUID) -> bool:
        def work(db: Session) -> bool:
            poll = db.get(Poll, poll_id)
            if poll is None:
                return False
            # ORM cascade removes options, votes and views with the poll
            db.delete(poll)
            db.commit()
            return True

        return await self._run("delete_poll", work, writes=True)

    # Options

    async def insert_options(self, poll_id: uuid.UUID, option_texts: List[str]) -> List[OptionRecord]:
        def work(db: Session) -> List[OptionRecord]:
            options = [
                PollOption(poll_id=poll_id, option_text=option_text, order_index=index)
                for index, option_text in enumerate(option_texts)
            ]
            db.add_all(options)
            db.commit()
            return [OptionRecord.model_validate(option) for option in options]

        return await self._run("insert_options", work, writes=True)

    async def list_options(self, poll_id: uuid.UUID) -> List[OptionRecord]:
        def work(db: Session) -> List[OptionRecord]:
            options = (
                db.query(PollOption)
                .filter(PollOption.poll_id == poll_id)
                .order_by(PollOption.order_index)
                .all()
            )
            return [OptionRecord.model_validate(option) for option in options]

        return await self._run("list_options", work)

    async def get_option(self, option_id: uuid.UUID) -> Optional[OptionRecord]:
        def work(db: Session) -> Optional[OptionRecord]:
            option = db.get(PollOption, option_id)
            return OptionRecord.model_validate(option) if option else None

        return await self._run("get_option", work)

    # Votes

    async def count_votes(self, poll_id: uuid.UUID, user_id: Optional[uuid.UUID] = None) -> int:
        def work(db: Session) -> int:
            query = db.query(func.count(Vote.id)).filter(Vote.poll_id == poll_id)
            if user_id is not None:
                query = query.filter(Vote.user_id == user_id)
            return query.scalar() or 0

        return await self._run("count_votes", work)

    async def find_vote(
        self, poll_id: uuid.UUID, user_id: uuid.UUID, option_id: uuid.UUID
    ) -> Optional[VoteRecord]:
        def work(db: Session) -> Optional[VoteRecord]:
            vote = db.query(Vote).filter(
                Vote.poll_id == poll_id,
                Vote.user_id == user_id,
                Vote.option_id == option_id,
            ).first()
            return VoteRecord.model_validate(vote) if vote else None

        return await self._run("find_vote", work)

    async def insert_vote(
        self,
        poll_id: uuid.UUID,
        option_id: uuid.UUID,
        user_id: Optional[uuid.UUID],
        voter_ip: Optional[str] = None,
    ) -> VoteRecord:
        def work(db: Session) -> VoteRecord:
            vote = Vote(poll_id=poll_id, option_id=option_id, user_id=user_id, voter_ip=voter_ip)
            db.add(vote)
            db.commit()
            return VoteRecord.model_validate(vote)

        return await self._run("insert_vote", work, writes=True)

    async def delete_vote(self, poll_id: uuid.UUID, option_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        def work(db: Session) -> bool:
            vote = db.query(Vote).filter(
                Vote.poll_id == poll_id,
                Vote.option_id == option_id,
                Vote.user_id == user_id,
            ).first()
            if vote is None:
                return False
            db.delete(vote)
            db.commit()
            return True

        return await self._run("delete_vote", work, writes=True)

    async def count_votes_by_option(self, poll_id: uuid.UUID) -> Dict[uuid.UUID, int]:
        def work(db: Session) -> Dict[uuid.UUID, int]:
            rows = (
                db.query(Vote.option_id, func.count(Vote.id))
                .filter(Vote.poll_id == poll_id)
                .group_by(Vote.option_id)
                .all()
            )
            return {option_id: count for option_id, count in rows}

        return await self._run("count_votes_by_option", work)

    async def count_unique_voters(self, poll_id: uuid.UUID) -> int:
        def work(db: Session) -> int:
            return (
                db.query(func.count(distinct(Vote.user_id)))
                .filter(Vote.poll_id == poll_id, Vote.user_id.isnot(None))
                .scalar()
            ) or 0

        return await self._run("count_unique_voters", work)

    async def list_user_votes(self, user_id: uuid.UUID) -> List[UserVoteRecord]:
        def work(db: Session) -> List[UserVoteRecord]:
            rows = (
                db.query(
                    Vote.id,
                    Vote.created_at,
                    Poll.id,
                    Poll.title,
                    PollOption.id,
                    PollOption.option_text,
                )
                .join(Poll, Vote.poll_id == Poll.id)
                .join(PollOption, Vote.option_id == PollOption.id)
                .filter(Vote.user_id == user_id)
                .order_by(Vote.created_at.desc())
                .all()
            )
            return [
                UserVoteRecord(
                    id=vote_id,
                    voted_at=voted_at,
                    poll_id=poll_id,
                    poll_title=poll_title,
                    option_id=option_id,
                    selected_option=option_text,
                )
                for vote_id, voted_at, poll_id, poll_title, option_id, option_text in rows
            ]

        return await self._run("list_user_votes", work)

    # Views

    async def insert_view(
        self,
        poll_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
        viewer_ip: Optional[str] = None,
        viewed_at: Optional[datetime] = None,
    ) -> None:
        def work(db: Session) -> None:
            view = PollView(poll_id=poll_id, user_id=user_id, viewer_ip=viewer_ip)
            if viewed_at is not None:
                view.created_at = viewed_at
            db.add(view)
            db.commit()

        await self._run("insert_view", work, writes=True)

    async def count_views(self, poll_id: uuid.UUID) -> int:
        def work(db: Session) -> int:
            return db.query(func.count(PollView.id)).filter(PollView.poll_id == poll_id).scalar() or 0

        return await self._run("count_views", work)
