"""Pydantic schemas for API responses."""

from fragments.schemas.common import (
    ErrorDetail,
    ErrorResponse,
    StatusResponse,
    create_error_response
)
from fragments.schemas.fragments import (
    FragmentMetadata,
    FragmentResponse,
    FragmentListResponse,
    HealthResponse
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "StatusResponse",
    "create_error_response",
    "FragmentMetadata",
    "FragmentResponse",
    "FragmentListResponse",
    "HealthResponse"
]
