"""Pydantic schemas for request/response validation."""
from app.schemas.common import ErrorResponse, HealthResponse, SuccessResponse
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
from app.schemas.stats import OptionResult, OptionStats, PollResults, PollStats
from app.schemas.vote import (
    EligibilityResponse,
    VoteDetail,
    VoteHistoryItem,
    VoteRequest,
    VoteResponse,
)

__all__ = [
    "PollCreate",
    "PollUpdate",
    "PollResponse",
    "PollWithOptions",
    "PollListItem",
    "PollListResponse",
    "PaginationInfo",
    "OptionResponse",
    "OptionStats",
    "OptionResult",
    "PollStats",
    "PollResults",
    "VoteRequest",
    "VoteDetail",
    "VoteResponse",
    "VoteHistoryItem",
    "EligibilityResponse",
    "SuccessResponse",
    "ErrorResponse",
    "HealthResponse",
]
