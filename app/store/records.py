"""Immutable records passed between the store and the services."""
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from app.core.constants import DEFAULT_MAX_VOTES_PER_USER
from app.core.utils import to_utc


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)


class PollRecord(_Record):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    created_by: uuid.UUID
    created_at: datetime
    updated_at: datetime
    expires_at: Optional[datetime] = None
    is_active: bool = True
    allow_multiple_votes: bool = False
    is_anonymous: bool = False
    max_votes_per_user: int = DEFAULT_MAX_VOTES_PER_USER

    @field_validator("created_at", "updated_at", "expires_at")
    @classmethod
    def normalize_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_utc(v) if v is not None else None


class NewPoll(_Record):
    """Poll fields supplied by the creator; ids and timestamps come from the store."""

    title: str
    description: Optional[str] = None
    created_by: uuid.UUID
    expires_at: Optional[datetime] = None
    is_active: bool = True
    allow_multiple_votes: bool = False
    is_anonymous: bool = False
    max_votes_per_user: int = DEFAULT_MAX_VOTES_PER_USER


class OptionRecord(_Record):
    id: uuid.UUID
    poll_id: uuid.UUID
    option_text: str
    order_index: int
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        return to_utc(v)


class VoteRecord(_Record):
    id: uuid.UUID
    poll_id: uuid.UUID
    option_id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    voter_ip: Optional[str] = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        return to_utc(v)


class UserVoteRecord(_Record):
    """One row of a user's voting history."""

    id: uuid.UUID
    voted_at: datetime
    poll_id: uuid.UUID
    poll_title: str
    option_id: uuid.UUID
    selected_option: str

    @field_validator("voted_at")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        return to_utc(v)
