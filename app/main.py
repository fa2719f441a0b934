"""Main FastAPI application."""
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.api.deps import get_store
from app.api.v1.router import api_router
from app.core.config import settings
from app.core.exceptions import InfrastructureError, PollingError, StoreError
from app.core.logging_config import get_logger, setup_logging
from app.core.rate_limit import limiter
from app.middleware import LoggingMiddleware
from app.schemas import HealthResponse
from app.store import PollStore

# Initialize structured logging
setup_logging(level=settings.LOG_LEVEL, json_logs=settings.ENVIRONMENT == "production")
logger = get_logger(__name__)

# Validate production configuration after logging is configured
if settings.ENVIRONMENT == "production":
    settings.validate_production_config()

logger.info(
    "application_starting",
    app_title=settings.APP_TITLE,
    app_version=settings.APP_VERSION,
    environment=settings.ENVIRONMENT,
)

app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION
)

# Add rate limiter to app state
app.state.limiter = limiter

# Add rate limit exceeded exception handler
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def polling_error_handler(request: Request, exc: PollingError) -> JSONResponse:
    """Translate domain errors into ``{"detail": ...}`` responses."""
    if isinstance(exc, InfrastructureError):
        logger.error(
            "infrastructure_error",
            error=str(exc),
            error_type=type(exc).__name__,
            retryable=exc.retryable,
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.public_detail})


app.add_exception_handler(PollingError, polling_error_handler)

# Add logging middleware (must be added before other middleware for proper request tracking)
app.add_middleware(LoggingMiddleware)


# Add API versioning middleware
@app.middleware("http")
async def add_api_version_header(request: Request, call_next):
    """Add X-API-Version header to all responses for version tracking."""
    response = await call_next(request)
    response.headers["X-API-Version"] = settings.APP_VERSION
    return response

# CORS middleware - tokens may also arrive as a cookie
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,  # Configured via environment
    allow_credentials=True,  # Required for cookies
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)

# Include API router
app.include_router(api_router)


@app.get("/health", response_model=HealthResponse)
async def health_check(store: PollStore = Depends(get_store)):
    """
    Health check endpoint.

    Returns:
        - status: "healthy"
        - environment: Current environment setting
        - store: "connected"

    Returns 503 if the store is unreachable.
    """
    try:
        await store.ping()
    except StoreError as e:
        logger.error("health_check_failed", error=str(e))
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "environment": settings.ENVIRONMENT, "store": "unreachable"},
        )

    return HealthResponse(status="healthy", environment=settings.ENVIRONMENT, store="connected")
