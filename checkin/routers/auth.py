"""Authentication router: login, registration, session resolution"""

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from checkin.config import settings
from checkin.db import get_db
from checkin.schemas.account import AccountResponse
from checkin.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    PrincipalResponse,
    RegisterRequest,
)
from checkin.schemas.common import ErrorResponse, MessageResponse
from checkin.services.accounts import account_directory
from checkin.services.authority import Principal
from checkin.services.ledger import submission_ledger
from checkin.services.sessions import extract_token, get_current_principal, session_service
from checkin.utils.environment import is_production

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def principal_response(principal: Principal) -> PrincipalResponse:
    return PrincipalResponse(
        account_id=principal.account_id,
        role=principal.role,
        is_super_admin=principal.is_super_admin,
        tier=principal.tier.name.lower(),
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse}},
)
async def login(
    credentials: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """
    Exchange email and password for a session token.

    The token is returned in the body (for bearer use) and set as an
    HTTP-only cookie. Any failure returns the same INVALID_CREDENTIALS error.
    """
    result = await session_service.login(
        db,
        credentials.email,
        credentials.password,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("User-Agent"),
    )

    response.set_cookie(
        key=settings.session_cookie_name,
        value=result.token,
        max_age=settings.session_ttl_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.session_cookie_secure or is_production(),
        samesite="lax",
    )

    return LoginResponse(
        token=result.token,
        expires_at=result.expires_at,
        principal=principal_response(result.principal),
    )


@router.post(
    "/register",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """Create a plain user account. Log in afterwards to get a session."""
    account = await account_directory.register_account(db, payload.model_dump())
    return AccountResponse.model_validate(account)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Delete the current session and clear the cookie."""
    await session_service.logout(db, extract_token(request))
    response.delete_cookie(settings.session_cookie_name)
    logger.info(f"Account {principal.account_id} logged out")
    return MessageResponse(message="Logged out")


@router.get(
    "/session",
    response_model=PrincipalResponse,
    responses={401: {"model": ErrorResponse}},
)
async def get_session(principal: Principal = Depends(get_current_principal)):
    """Resolve the presented token to the caller's identity and role."""
    return principal_response(principal)


@router.get("/me", response_model=MeResponse)
async def get_me(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the caller's own account with today's status and recent activity.
    """
    account = await account_directory.get_account(db, principal, principal.account_id)
    recent = await account_directory.recent_activity_count(db, account.id)
    has_submitted = await submission_ledger.has_submitted_today(db, principal)

    return MeResponse(
        account=AccountResponse.model_validate(account),
        recent_activity_count=recent,
        has_submitted_today=has_submitted,
    )
