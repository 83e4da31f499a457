"""Login sessions and request authentication"""

from checkin.services.sessions.session_resolver import (
    LoginResult,
    SessionService,
    extract_token,
    get_current_principal,
    principal_from_account,
    session_service,
)

__all__ = [
    "LoginResult",
    "SessionService",
    "extract_token",
    "get_current_principal",
    "principal_from_account",
    "session_service",
]
