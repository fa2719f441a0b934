"""Application constants.

This module contains magic strings and numbers used throughout the application.
Centralizing these values makes them easier to maintain and modify.
"""

# Poll Options
# A poll is created with between 2 and 10 options
MIN_POLL_OPTIONS = 2
MAX_POLL_OPTIONS = 10

# Field length limits (mirror the database column constraints)
MIN_POLL_TITLE_LENGTH = 3
MAX_POLL_TITLE_LENGTH = 255
MAX_POLL_DESCRIPTION_LENGTH = 1000
MAX_OPTION_TEXT_LENGTH = 500

# Votes
DEFAULT_MAX_VOTES_PER_USER = 1

# Expiration window for new polls
MIN_EXPIRATION_HOURS = 1
MAX_EXPIRATION_DAYS = 365

# Listing / pagination
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50
MAX_SEARCH_LENGTH = 100

# JWT Token Configuration
# Token expiration time in minutes (1 hour, matches the auth provider default)
ACCESS_TOKEN_EXPIRE_MINUTES = 60
AUTHENTICATED_ROLE = "authenticated"
