"""Rate limiting configuration."""
import os
from slowapi import Limiter
from slowapi.util import get_remote_address


def get_client_ip(request):
    """Get client IP for rate limiting, considering proxies."""
    # Check X-Forwarded-For header (from reverse proxies)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    # Fall back to direct connection IP
    return get_remote_address(request)


# Create rate limiter instance
# Uses Redis if REDIS_URL is set (Docker/production), falls back to memory for local dev
limiter = Limiter(
    key_func=get_client_ip,
    default_limits=["100/minute"],  # Global default
    storage_uri=os.getenv("REDIS_URL", "memory://"),
    strategy="fixed-window"
)

# Rate limit definitions for different endpoint categories.
# These throttle per network origin and are independent of per-user vote quotas.
RATE_LIMITS = {
    "vote": "20/minute",
    "create_poll": "5 per 5 minutes",
    "read": "100/minute",
    "manage_poll": "30/minute",
}
