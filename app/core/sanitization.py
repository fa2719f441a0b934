"""Input sanitization utilities."""
import re
import uuid
from datetime import datetime, timedelta
from typing import List, Optional

from app.core.constants import (
    MAX_EXPIRATION_DAYS,
    MAX_OPTION_TEXT_LENGTH,
    MAX_POLL_DESCRIPTION_LENGTH,
    MAX_POLL_OPTIONS,
    MAX_POLL_TITLE_LENGTH,
    MAX_SEARCH_LENGTH,
    MIN_EXPIRATION_HOURS,
    MIN_POLL_OPTIONS,
    MIN_POLL_TITLE_LENGTH,
)
from app.core.utils import to_utc, utcnow

# RFC 4122 UUID, versions 1-5, any letter case
UUID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$',
    re.IGNORECASE,
)


def sanitize_text(text: str, max_length: Optional[int] = None, strip_html: bool = True) -> str:
    """
    Sanitize text input to prevent XSS attacks.

    Note: This function strips HTML tags and normalizes whitespace, but does NOT
    escape HTML entities; output escaping is the job of whoever renders the text.

    Args:
        text: The input text to sanitize
        max_length: Optional maximum length to enforce
        strip_html: Whether to strip HTML tags (default True)

    Returns:
        Sanitized text with HTML tags removed and whitespace normalized

    Raises:
        ValueError: If text exceeds max_length or contains dangerous patterns
    """
    if not isinstance(text, str):
        raise ValueError("Input must be a string")

    # Strip leading/trailing whitespace
    sanitized = text.strip()

    # Enforce maximum length before processing to prevent length-based attacks
    if max_length and len(sanitized) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    if strip_html:
        sanitized = re.sub(r'<[^>]*>', '', sanitized)

    # Reject inputs that still contain HTML-like patterns after stripping
    if '<' in sanitized or '>' in sanitized:
        raise ValueError("Input contains invalid HTML-like patterns")

    # Normalize internal whitespace (replace multiple spaces with single space)
    sanitized = re.sub(r'\s+', ' ', sanitized)

    return sanitized.strip()


def sanitize_poll_title(title: str) -> str:
    """
    Sanitize poll title input.

    Raises:
        ValueError: If the title is too short, too long or malformed
    """
    sanitized = sanitize_text(title, max_length=MAX_POLL_TITLE_LENGTH)

    if len(sanitized) < MIN_POLL_TITLE_LENGTH:
        raise ValueError(
            f"Poll title must be at least {MIN_POLL_TITLE_LENGTH} characters long"
        )

    return sanitized


def sanitize_poll_description(description: Optional[str]) -> Optional[str]:
    """Sanitize an optional poll description. Blank descriptions become None."""
    if description is None:
        return None

    sanitized = sanitize_text(description, max_length=MAX_POLL_DESCRIPTION_LENGTH)
    return sanitized or None


def sanitize_option_text(option: str, position: int) -> str:
    """
    Sanitize a single option.

    Args:
        option: Option text
        position: 1-based position, used in error messages
    """
    if not isinstance(option, str):
        raise ValueError(f"Option {position} must be a string")

    try:
        sanitized = sanitize_text(option, max_length=MAX_OPTION_TEXT_LENGTH)
    except ValueError as e:
        raise ValueError(f"Option {position}: {e}")

    if not sanitized:
        raise ValueError(f"Option {position} cannot be empty")

    return sanitized


def sanitize_poll_options(options: List[str]) -> List[str]:
    """
    Sanitize the full option list of a new poll.

    Order is preserved; it becomes each option's order index.

    Raises:
        ValueError: On too few or too many options, or on duplicates
    """
    if len(options) < MIN_POLL_OPTIONS:
        raise ValueError(f"Poll must have at least {MIN_POLL_OPTIONS} options")

    if len(options) > MAX_POLL_OPTIONS:
        raise ValueError(f"Poll cannot have more than {MAX_POLL_OPTIONS} options")

    sanitized = [sanitize_option_text(option, i + 1) for i, option in enumerate(options)]

    if len({option.casefold() for option in sanitized}) != len(sanitized):
        raise ValueError("Poll options must be unique")

    return sanitized


def validate_expiration(expires_at: Optional[datetime], now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Validate the expiration date of a new poll.

    Expiration must be at least an hour and at most a year in the future.
    Naive datetimes are treated as UTC.
    """
    if expires_at is None:
        return None

    expires_at = to_utc(expires_at)
    now = now or utcnow()

    if expires_at < now + timedelta(hours=MIN_EXPIRATION_HOURS):
        raise ValueError(
            f"Expiration date must be at least {MIN_EXPIRATION_HOURS} hour in the future"
        )

    if expires_at > now + timedelta(days=MAX_EXPIRATION_DAYS):
        raise ValueError("Expiration date cannot be more than 1 year in the future")

    return expires_at


def sanitize_search(search: Optional[str]) -> Optional[str]:
    """Trim a listing search term and cap its length."""
    if not search:
        return None
    search = search.strip()[:MAX_SEARCH_LENGTH]
    return search or None


def parse_uuid(value: str, label: str = "ID") -> uuid.UUID:
    """
    Validate identifier format before processing.

    This prevents malformed identifiers from causing unnecessary store queries.

    Args:
        value: Candidate UUID string (case-insensitive)
        label: What the identifier refers to, used in the error message

    Returns:
        The parsed UUID

    Raises:
        ValueError: If the identifier is not a valid UUID
    """
    if isinstance(value, uuid.UUID):
        return value

    if not isinstance(value, str) or not UUID_PATTERN.match(value.strip()):
        raise ValueError(f"Invalid {label} format")

    return uuid.UUID(value.strip())
