"""Application error taxonomy.

Every error carries a stable machine-readable ``code`` and the HTTP status
it maps to. Routers never build error payloads by hand: the handlers
registered in ``main.py`` render any ``AppError`` through
``checkin.utils.response_utils.error_response``.
"""

from fastapi import status


class AppError(Exception):
    """Base class for errors that are safe to show to the caller."""

    code = "APP_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None, details: dict | None = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(AppError):
    code = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request data"


class Unauthenticated(AppError):
    """No session, unknown session, or expired session. Deliberately uniform."""

    code = "UNAUTHENTICATED"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class InvalidCredentials(AppError):
    """Login failure. Never says whether the email or the password was wrong."""

    code = "INVALID_CREDENTIALS"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class Forbidden(AppError):
    code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You don't have permission to perform this action"


class NotFound(AppError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class EmailExists(AppError):
    code = "EMAIL_EXISTS"
    status_code = status.HTTP_409_CONFLICT
    default_message = "An account with this email already exists"


class Conflict(AppError):
    code = "CONFLICT"
    status_code = status.HTTP_409_CONFLICT
    default_message = "A record already exists for today"


class SelfDeleteForbidden(AppError):
    code = "SELF_DELETE_FORBIDDEN"
    status_code = status.HTTP_409_CONFLICT
    default_message = "You cannot delete your own account"


class IdentitySpoofAttempt(AppError):
    code = "IDENTITY_SPOOF_ATTEMPT"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "User ID cannot be provided in request body"


class InternalError(AppError):
    code = "INTERNAL_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "An unexpected error occurred"
