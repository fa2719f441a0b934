"""Shared API dependencies."""
import uuid
from functools import lru_cache

from fastapi import Request

from app.core.config import settings
from app.core.exceptions import InvalidRequestError
from app.core.rate_limit import get_client_ip
from app.core.sanitization import parse_uuid
from app.core.security import get_current_user_id, get_optional_user_id
from app.db.session import SessionLocal
from app.store import PollStore, SqlPollStore


@lru_cache()
def get_store() -> PollStore:
    """Dependency: the application's poll store. Tests override it."""
    return SqlPollStore(SessionLocal, timeout=settings.STORE_TIMEOUT_SECONDS)


def parse_id(value: str, label: str) -> uuid.UUID:
    """Parse an identifier from the request, rejecting malformed ones with a 400."""
    try:
        return parse_uuid(value, label)
    except ValueError as e:
        raise InvalidRequestError(str(e))


def get_poll_id(poll_id: str) -> uuid.UUID:
    """Dependency: the ``poll_id`` path parameter as a UUID."""
    return parse_id(poll_id, "poll ID")


def get_voter_ip(request: Request) -> str:
    return get_client_ip(request)


__all__ = [
    "get_store",
    "get_poll_id",
    "get_voter_ip",
    "get_current_user_id",
    "get_optional_user_id",
    "parse_id",
]
