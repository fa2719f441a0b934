"""Poll statistics schemas."""
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class OptionStats(BaseModel):
    option_id: uuid.UUID
    option_text: str
    vote_count: int


class PollStats(BaseModel):
    """Read-time snapshot. Option counts always sum to total_votes."""

    total_votes: int
    total_views: int
    unique_voters: int
    options: List[OptionStats]


class OptionResult(OptionStats):
    vote_percentage: float


class PollResults(BaseModel):
    poll_id: uuid.UUID
    title: str
    description: Optional[str] = None
    created_by: uuid.UUID
    created_at: datetime
    expires_at: Optional[datetime] = None
    is_active: bool
    total_votes: int
    options: List[OptionResult]
