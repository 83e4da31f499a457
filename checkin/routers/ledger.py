"""Ledger clock router"""

from fastapi import APIRouter, Depends

from checkin.schemas.ledger import LedgerTodayResponse
from checkin.services.authority import Principal
from checkin.services.ledger import submission_window
from checkin.services.sessions import get_current_principal

router = APIRouter(prefix="/ledger", tags=["Ledger"])


@router.get("/today", response_model=LedgerTodayResponse)
async def get_today(principal: Principal = Depends(get_current_principal)):
    """
    The server's calendar date and the daily cutoff.

    Clients use this instead of their own clock to decide whether today's
    record is late. The ledger itself accepts late records.
    """
    window = submission_window()
    return LedgerTodayResponse(
        record_date=window.record_date,
        server_time=window.server_time,
        cutoff=window.cutoff,
        closed=window.closed,
    )
