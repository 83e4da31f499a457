"""Daily submission router"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from checkin.db import get_db
from checkin.schemas.common import ErrorResponse, build_pagination
from checkin.schemas.ledger import (
    SubmissionListResponse,
    SubmissionResponse,
    TodayStatusResponse,
)
from checkin.services.authority import Principal
from checkin.services.ledger import clamp_page, submission_ledger
from checkin.services.sessions import get_current_principal
from checkin.utils.constants import DEFAULT_PAGE_SIZE

router = APIRouter(prefix="/submissions", tags=["Submissions"])


@router.get("/has-submitted-today", response_model=TodayStatusResponse)
async def has_submitted_today(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Whether the caller already submitted for the server's current date."""
    has_submitted = await submission_ledger.has_submitted_today(db, principal)
    return TodayStatusResponse(
        has_submitted=has_submitted,
        message=submission_ledger.status_message(has_submitted),
        record_date=submission_ledger.today(),
    )


@router.post(
    "",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_submission(
    payload: dict[str, Any] = Body(...),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Submit today's record.

    The date and the owner are set by the server. A body naming a user id
    is rejected, and a second submission on the same day returns 409.
    """
    record = await submission_ledger.submit(db, principal, payload)
    return SubmissionResponse.model_validate(record)


@router.get("", response_model=SubmissionListResponse)
async def list_my_submissions(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1),
    offset: int = Query(0, ge=0),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    records, total = await submission_ledger.list_mine(db, principal, limit, offset)
    limit, offset = clamp_page(limit, offset)
    return SubmissionListResponse(
        items=[SubmissionResponse.model_validate(r) for r in records],
        pagination=build_pagination(limit, offset, total),
    )


@router.patch(
    "/{submission_id}",
    response_model=SubmissionResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_my_submission(
    submission_id: int,
    payload: dict[str, Any] = Body(...),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Patch the content of one of the caller's own submissions."""
    record = await submission_ledger.update_own(db, principal, submission_id, payload)
    return SubmissionResponse.model_validate(record)
