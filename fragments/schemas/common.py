"""Common response envelopes used across endpoints."""

from typing import Any, Dict

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Error payload nested in the error envelope."""
    code: int
    message: str


class ErrorResponse(BaseModel):
    """Response model for errors."""
    status: str = "error"
    error: ErrorDetail


class StatusResponse(BaseModel):
    """Response model for bodiless success responses."""
    status: str = "ok"


def create_error_response(code: int, message: str) -> Dict[str, Any]:
    return ErrorResponse(error=ErrorDetail(code=code, message=message)).model_dump()
