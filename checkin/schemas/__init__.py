"""Pydantic schemas for request/response validation"""

from checkin.schemas.common import (
    ErrorResponse,
    MessageResponse,
    PaginationMeta,
    build_pagination,
)
from checkin.schemas.account import (
    AccountCreate,
    AccountListItem,
    AccountListResponse,
    AccountResponse,
    AccountUpdate,
    DeleteAccountResponse,
    DeletedAccountSummary,
)
from checkin.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    PrincipalResponse,
    RegisterRequest,
)
from checkin.schemas.ledger import (
    AccountBrief,
    LedgerTodayResponse,
    SubmissionAdminListResponse,
    SubmissionCreate,
    SubmissionListResponse,
    SubmissionResponse,
    SubmissionUpdate,
    SubmissionWithAccount,
    TodayStatusResponse,
    VoteAdminListResponse,
    VoteCreate,
    VoteListResponse,
    VoteResponse,
    VoteWithAccount,
)

__all__ = [
    # Common
    "ErrorResponse",
    "MessageResponse",
    "PaginationMeta",
    "build_pagination",
    # Account
    "AccountCreate",
    "AccountListItem",
    "AccountListResponse",
    "AccountResponse",
    "AccountUpdate",
    "DeleteAccountResponse",
    "DeletedAccountSummary",
    # Auth
    "LoginRequest",
    "LoginResponse",
    "MeResponse",
    "PrincipalResponse",
    "RegisterRequest",
    # Ledger
    "AccountBrief",
    "LedgerTodayResponse",
    "SubmissionAdminListResponse",
    "SubmissionCreate",
    "SubmissionListResponse",
    "SubmissionResponse",
    "SubmissionUpdate",
    "SubmissionWithAccount",
    "TodayStatusResponse",
    "VoteAdminListResponse",
    "VoteCreate",
    "VoteListResponse",
    "VoteResponse",
    "VoteWithAccount",
]
