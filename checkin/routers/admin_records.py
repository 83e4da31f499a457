"""Admin router for reviewing daily records across all accounts"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from checkin.db import get_db
from checkin.schemas.common import ErrorResponse, build_pagination
from checkin.schemas.ledger import (
    AccountBrief,
    SubmissionAdminListResponse,
    SubmissionResponse,
    SubmissionWithAccount,
    VoteAdminListResponse,
    VoteResponse,
    VoteWithAccount,
)
from checkin.services.authority import Principal
from checkin.services.ledger import clamp_page, submission_ledger, vote_ledger
from checkin.services.sessions import get_current_principal
from checkin.utils.constants import DEFAULT_ADMIN_PAGE_SIZE
from checkin.utils.dates import parse_record_date
from checkin.utils.errors import ValidationError

router = APIRouter(prefix="/admin", tags=["Admin: Records"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
}


def _parse_date_filter(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return parse_record_date(value)
    except ValueError:
        raise ValidationError("Invalid date format. Use YYYY-MM-DD format")


def _brief(account) -> AccountBrief | None:
    return AccountBrief.model_validate(account) if account is not None else None


@router.get("/submissions", response_model=SubmissionAdminListResponse, responses=ERROR_RESPONSES)
async def list_all_submissions(
    record_date: str | None = Query(None, alias="date", description="YYYY-MM-DD"),
    limit: int = Query(DEFAULT_ADMIN_PAGE_SIZE, ge=1),
    offset: int = Query(0, ge=0),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """All submissions with the submitting account, newest first."""
    rows, total = await submission_ledger.list_all(
        db, principal, _parse_date_filter(record_date), limit, offset
    )
    limit, offset = clamp_page(limit, offset)
    items = [
        SubmissionWithAccount(
            **SubmissionResponse.model_validate(record).model_dump(),
            account=_brief(account),
        )
        for record, account in rows
    ]
    return SubmissionAdminListResponse(items=items, pagination=build_pagination(limit, offset, total))


@router.get("/votes", response_model=VoteAdminListResponse, responses=ERROR_RESPONSES)
async def list_all_votes(
    record_date: str | None = Query(None, alias="date", description="YYYY-MM-DD"),
    limit: int = Query(DEFAULT_ADMIN_PAGE_SIZE, ge=1),
    offset: int = Query(0, ge=0),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """All votes with the voting account, newest first."""
    rows, total = await vote_ledger.list_all(
        db, principal, _parse_date_filter(record_date), limit, offset
    )
    limit, offset = clamp_page(limit, offset)
    items = [
        VoteWithAccount(
            **VoteResponse.model_validate(record).model_dump(),
            account=_brief(account),
        )
        for record, account in rows
    ]
    return VoteAdminListResponse(items=items, pagination=build_pagination(limit, offset, total))
