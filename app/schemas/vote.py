"""Vote schemas."""
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class VoteRequest(BaseModel):
    # Parsed by the endpoint so a malformed id is a 400, not a 422
    option_id: str = Field(..., min_length=1, max_length=64)


class VoteDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    poll_id: uuid.UUID
    option_id: uuid.UUID
    created_at: datetime


class VoteResponse(BaseModel):
    success: bool = True
    vote: VoteDetail


class VoteHistoryItem(BaseModel):
    """One entry of the caller's voting history."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    voted_at: datetime
    poll_id: uuid.UUID
    poll_title: str
    option_id: uuid.UUID
    selected_option: str


class EligibilityResponse(BaseModel):
    poll_id: uuid.UUID
    can_vote: bool
