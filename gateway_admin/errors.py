from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from pydantic import BaseModel, Field

from .exceptions import (
    ConfigStoreError,
    ConfigValidationError,
    ConflictError,
    InvalidReferenceError,
    NotFoundError,
    StorageError,
)


class ErrorResponse(BaseModel):
    """
    Standard error payload returned by the admin API.

    {
        "error": "not_found",
        "message": "backend 'account' not found",
        "code": 404,
        "details": {...}
    }
    """

    error: str = Field(..., description="Machine-readable error type")
    message: str = Field(..., description="Human-readable error message")
    code: int = Field(..., description="HTTP status code for this error")
    details: Optional[Dict[str, Any]] = Field(
        default=None, description="Optional structured error details"
    )


_STATUS_BY_ERROR: dict[type[ConfigStoreError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    InvalidReferenceError: status.HTTP_400_BAD_REQUEST,
    ConfigValidationError: status.HTTP_400_BAD_REQUEST,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def http_error(
    status_code: int,
    *,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> HTTPException:
    """
    Helper to create an HTTPException with a standardised error body.
    """
    payload = ErrorResponse(
        error=error,
        message=message,
        code=status_code,
        details=details,
    )
    return HTTPException(status_code=status_code, detail=payload.model_dump())


def bad_request(message: str, *, details: Optional[Dict[str, Any]] = None) -> HTTPException:
    return http_error(
        status.HTTP_400_BAD_REQUEST, error="bad_request", message=message, details=details
    )


def status_code_for(exc: ConfigStoreError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def to_http_error(exc: ConfigStoreError) -> HTTPException:
    """Map a store/service error onto exactly one HTTP outcome."""
    status_code = status_code_for(exc)
    if status_code >= 500:
        # 不向调用方暴露底层存储细节
        return http_error(status_code, error=exc.error, message="internal server error")
    return http_error(status_code, error=exc.error, message=exc.message, details=exc.details)


__all__ = [
    "ErrorResponse",
    "bad_request",
    "http_error",
    "status_code_for",
    "to_http_error",
]
