"""Domain exceptions.

Every error the polling core can raise derives from ``PollingError``. Each
class carries the HTTP status and the public message used by the API layer,
so services never import FastAPI.
"""
from typing import Optional


class PollingError(Exception):
    """Base class for all polling errors."""

    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def public_detail(self) -> str:
        """Message that is safe to show to the caller."""
        return self.detail


# Caller identity

class AuthenticationRequiredError(PollingError):
    status_code = 401
    default_detail = "Authentication required"


class PermissionDeniedError(PollingError):
    status_code = 403
    default_detail = "Not authorized"


# Malformed input

class InvalidRequestError(PollingError):
    status_code = 400
    default_detail = "Invalid request"


class InvalidOptionError(InvalidRequestError):
    default_detail = "Invalid option for this poll"


# Missing entities

class NotFoundError(PollingError):
    status_code = 404
    default_detail = "Not found"


class PollNotFoundError(NotFoundError):
    """Raised for absent and for inactive polls alike."""

    default_detail = "Poll not found"


class OptionNotFoundError(NotFoundError):
    default_detail = "Option not found"


class VoteNotFoundError(NotFoundError):
    default_detail = "No vote to remove"


# Business rules

class BusinessRuleViolation(PollingError):
    status_code = 409
    default_detail = "This action is not allowed"


class PollExpiredError(BusinessRuleViolation):
    default_detail = "This poll has expired"


class VoteQuotaExceededError(BusinessRuleViolation):
    default_detail = "You have reached the maximum number of votes for this poll"


class DuplicateVoteError(BusinessRuleViolation):
    default_detail = "You have already voted on this poll"


class DuplicateOptionVoteError(BusinessRuleViolation):
    default_detail = "You have already voted for this option"


class VoteConflictError(DuplicateVoteError):
    """A concurrent request inserted the same vote first.

    Shares the public message of ``DuplicateVoteError``.
    """


# Infrastructure

class InfrastructureError(PollingError):
    status_code = 503
    default_detail = "Service temporarily unavailable. Please try again."
    retryable = True

    @property
    def public_detail(self) -> str:
        # Internal details stay in the server logs
        return self.default_detail


class StoreError(InfrastructureError):
    """A store round trip failed: unreachable, rejected or malformed."""


class StoreTimeoutError(StoreError):
    """A store round trip did not finish within the configured timeout."""
