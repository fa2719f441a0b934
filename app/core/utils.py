"""General utility functions."""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC timezone."""
    if dt.tzinfo is None:
        # Assume UTC if no timezone (SQLite drops tzinfo on the way back)
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """
    Check whether an expiration timestamp lies strictly in the past.

    Args:
        expires_at: Expiration time (None means the poll never expires)
        now: Evaluation time, defaults to the current UTC time

    Returns:
        bool: True if expires_at is set and is before now
    """
    if expires_at is None:
        return False
    now = to_utc(now) if now is not None else utcnow()
    return to_utc(expires_at) < now
