"""
Common schema types used across the API.
"""

from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Standard success envelope."""

    status_code: int = 200
    data: Optional[T] = None
    message: str
    success: bool = True


class FieldError(BaseModel):
    field: str
    message: str
    type: str


class ErrorResponse(BaseModel):
    """Standard error envelope. Never carries internal state."""

    status_code: int
    message: str
    success: bool = False
    errors: Optional[List[FieldError]] = None
    request_id: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    database: str = "connected"
    notifications: Any = None
