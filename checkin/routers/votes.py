"""Daily vote router"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from checkin.db import get_db
from checkin.schemas.common import ErrorResponse, build_pagination
from checkin.schemas.ledger import TodayStatusResponse, VoteListResponse, VoteResponse
from checkin.services.authority import Principal
from checkin.services.ledger import clamp_page, vote_ledger
from checkin.services.sessions import get_current_principal
from checkin.utils.constants import DEFAULT_PAGE_SIZE

router = APIRouter(prefix="/votes", tags=["Votes"])


@router.get("/has-voted-today", response_model=TodayStatusResponse)
async def has_voted_today(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    has_voted = await vote_ledger.has_submitted_today(db, principal)
    return TodayStatusResponse(
        has_submitted=has_voted,
        message=vote_ledger.status_message(has_voted),
        record_date=vote_ledger.today(),
    )


@router.post(
    "",
    response_model=VoteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def cast_vote(
    payload: dict[str, Any] = Body(...),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Cast today's vote. Votes cannot be changed afterwards."""
    record = await vote_ledger.submit(db, principal, payload)
    return VoteResponse.model_validate(record)


@router.get("", response_model=VoteListResponse)
async def list_my_votes(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1),
    offset: int = Query(0, ge=0),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    records, total = await vote_ledger.list_mine(db, principal, limit, offset)
    limit, offset = clamp_page(limit, offset)
    return VoteListResponse(
        items=[VoteResponse.model_validate(r) for r in records],
        pagination=build_pagination(limit, offset, total),
    )
