"""Persistence layer: the store interface and its two implementations."""
from app.store.base import (
    OPTION_ORDER_UNIQUE_CONSTRAINT,
    VOTE_UNIQUE_CONSTRAINT,
    PollStore,
    UniqueViolationError,
)
from app.store.memory import MemoryPollStore
from app.store.records import NewPoll, OptionRecord, PollRecord, UserVoteRecord, VoteRecord
from app.store.sql import SqlPollStore

__all__ = [
    "PollStore",
    "MemoryPollStore",
    "SqlPollStore",
    "UniqueViolationError",
    "VOTE_UNIQUE_CONSTRAINT",
    "OPTION_ORDER_UNIQUE_CONSTRAINT",
    "NewPoll",
    "PollRecord",
    "OptionRecord",
    "VoteRecord",
    "UserVoteRecord",
]
