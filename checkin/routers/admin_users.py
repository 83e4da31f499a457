"""Admin router for account management"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from checkin.db import get_db
from checkin.schemas.account import (
    AccountCreate,
    AccountListItem,
    AccountListResponse,
    AccountResponse,
    AccountUpdate,
    DeleteAccountResponse,
    DeletedAccountSummary,
)
from checkin.schemas.common import ErrorResponse, build_pagination
from checkin.services.accounts import account_directory
from checkin.services.authority import Principal
from checkin.services.ledger import clamp_page
from checkin.services.sessions import get_current_principal
from checkin.utils.constants import DEFAULT_PAGE_SIZE

router = APIRouter(prefix="/admin/users", tags=["Admin: Users"])

ERROR_RESPONSES = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
}


@router.get("", response_model=AccountListResponse, responses=ERROR_RESPONSES)
async def list_users(
    search: str | None = Query(None, description="Case-insensitive match on name or email"),
    role: str | None = Query(None, description="Exact role filter: user or admin"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, description="Capped at 100"),
    offset: int = Query(0, ge=0),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    List accounts with each account's submissions in the trailing 30 days.
    """
    rows, total = await account_directory.list_accounts(
        db, principal, search=search, role=role, limit=limit, offset=offset
    )
    limit, offset = clamp_page(limit, offset)

    items = [
        AccountListItem(
            **AccountResponse.model_validate(account).model_dump(),
            recent_activity_count=count,
        )
        for account, count in rows
    ]
    return AccountListResponse(items=items, pagination=build_pagination(limit, offset, total))


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**ERROR_RESPONSES, 400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_user(
    payload: AccountCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Create an account (super admin only). The password is never returned."""
    account = await account_directory.create_account(db, principal, payload.model_dump())
    return AccountResponse.model_validate(account)


@router.get(
    "/{account_id}",
    response_model=AccountResponse,
    responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse}},
)
async def get_user(
    account_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    account = await account_directory.get_account(db, principal, account_id)
    return AccountResponse.model_validate(account)


@router.patch(
    "/{account_id}",
    response_model=AccountResponse,
    responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_user(
    account_id: str,
    payload: AccountUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Partially update an account.

    Name, strikes and email verification need an admin. Changing the role
    or the super admin flag needs a super admin.
    """
    account = await account_directory.update_account(
        db, principal, account_id, payload.model_dump(exclude_unset=True)
    )
    return AccountResponse.model_validate(account)


@router.delete(
    "/{account_id}",
    response_model=DeleteAccountResponse,
    responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_user(
    account_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Delete an account and its credential, sessions and records (super admin only)."""
    summary = await account_directory.delete_account(db, principal, account_id)
    return DeleteAccountResponse(
        message="User deleted successfully",
        deleted_account=DeletedAccountSummary(**summary),
    )
