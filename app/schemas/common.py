"""Common response schemas."""
from typing import Optional

from pydantic import BaseModel


class SuccessResponse(BaseModel):
    """Standard success response."""
    success: bool = True
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error body for documentation; matches FastAPI's own shape."""
    detail: str


class HealthResponse(BaseModel):
    status: str
    environment: str
    store: str
