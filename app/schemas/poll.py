"""Poll schemas."""
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.constants import (
    DEFAULT_MAX_VOTES_PER_USER,
    MAX_POLL_DESCRIPTION_LENGTH,
    MAX_POLL_OPTIONS,
    MAX_POLL_TITLE_LENGTH,
    MIN_POLL_OPTIONS,
    MIN_POLL_TITLE_LENGTH,
)
from app.core.sanitization import (
    sanitize_poll_description,
    sanitize_poll_options,
    sanitize_poll_title,
    validate_expiration,
)


class PollCreate(BaseModel):
    title: str = Field(..., min_length=MIN_POLL_TITLE_LENGTH, max_length=MAX_POLL_TITLE_LENGTH)
    description: Optional[str] = Field(None, max_length=MAX_POLL_DESCRIPTION_LENGTH)
    options: List[str] = Field(..., min_length=MIN_POLL_OPTIONS, max_length=MAX_POLL_OPTIONS)
    expires_at: Optional[datetime] = None
    allow_multiple_votes: bool = False
    is_anonymous: bool = False
    max_votes_per_user: int = Field(DEFAULT_MAX_VOTES_PER_USER, ge=1)

    @field_validator('title')
    @classmethod
    def sanitize_title_field(cls, v: str) -> str:
        """Sanitize and validate poll title."""
        return sanitize_poll_title(v)

    @field_validator('description')
    @classmethod
    def sanitize_description_field(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_poll_description(v)

    @field_validator('options')
    @classmethod
    def sanitize_options_field(cls, v: List[str]) -> List[str]:
        """Sanitize each option and reject duplicates."""
        return sanitize_poll_options(v)

    @field_validator('expires_at')
    @classmethod
    def validate_expires_at_field(cls, v: Optional[datetime]) -> Optional[datetime]:
        return validate_expiration(v)


class PollUpdate(BaseModel):
    """Fields a creator may change. Omitted fields are left alone."""

    title: Optional[str] = Field(None, min_length=MIN_POLL_TITLE_LENGTH, max_length=MAX_POLL_TITLE_LENGTH)
    description: Optional[str] = Field(None, max_length=MAX_POLL_DESCRIPTION_LENGTH)
    expires_at: Optional[datetime] = None
    is_active: Optional[bool] = None

    @field_validator('title')
    @classmethod
    def sanitize_title_field(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_poll_title(v) if v is not None else None

    @field_validator('description')
    @classmethod
    def sanitize_description_field(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_poll_description(v)

    @field_validator('expires_at')
    @classmethod
    def validate_expires_at_field(cls, v: Optional[datetime]) -> Optional[datetime]:
        return validate_expiration(v)


class OptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    option_text: str
    order_index: int


class PollResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    description: Optional[str] = None
    created_by: uuid.UUID
    created_at: datetime
    updated_at: datetime
    expires_at: Optional[datetime] = None
    is_active: bool
    allow_multiple_votes: bool
    is_anonymous: bool
    max_votes_per_user: int


class PollWithOptions(PollResponse):
    options: List[OptionResponse]


class PollListItem(PollResponse):
    total_votes: int


class PaginationInfo(BaseModel):
    page: int
    limit: int
    has_more: bool


class PollListResponse(BaseModel):
    polls: List[PollListItem]
    pagination: PaginationInfo
