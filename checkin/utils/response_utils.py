"""Standardized response utilities."""

from fastapi import status
from fastapi.responses import JSONResponse

from checkin.utils.errors import AppError


def error_response(
    code: str,
    message: str,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    details: dict | None = None,
    headers: dict | None = None,
) -> JSONResponse:
    """Create a standardized error response.

    Args:
        code: Error code (e.g., 'VALIDATION_ERROR', 'NOT_FOUND')
        message: Human-readable error message
        status_code: HTTP status code
        details: Additional error details
        headers: Extra response headers

    Returns:
        JSONResponse with error structure
    """
    content = {
        "error": {
            "code": code,
            "message": message,
        }
    }
    if details:
        content["error"]["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content,
        headers=headers,
    )


def app_error_response(exc: AppError) -> JSONResponse:
    """Render an AppError with the standard error envelope."""
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return error_response(
        code=exc.code,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
        headers=headers,
    )


def validation_error(
    message: str,
    details: dict | None = None,
) -> JSONResponse:
    """Create a validation error response (400)."""
    return error_response(
        code="VALIDATION_ERROR",
        message=message,
        status_code=status.HTTP_400_BAD_REQUEST,
        details=details,
    )
