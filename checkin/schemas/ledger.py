"""Daily ledger schemas (submissions and votes)"""

from datetime import date, datetime, time

from pydantic import BaseModel, Field

from checkin.schemas.common import PaginationMeta
from checkin.utils.constants import MAX_RECORD_TEXT_LENGTH, MAX_VOTE_LENGTH


class SubmissionCreate(BaseModel):
    """Payload of a daily submission. Identity always comes from the session."""
    attendance_class: str = Field(
        ..., alias="attendanceClass", min_length=1, max_length=MAX_RECORD_TEXT_LENGTH
    )
    file_academics: str | None = Field(
        default=None, alias="fileAcademics", max_length=MAX_RECORD_TEXT_LENGTH
    )
    qd_official: str | None = Field(
        default=None, alias="qdOfficial", max_length=MAX_RECORD_TEXT_LENGTH
    )

    class Config:
        populate_by_name = True
        extra = "forbid"
        str_strip_whitespace = True


class SubmissionUpdate(BaseModel):
    """Owner patch of a submission"""
    attendance_class: str | None = Field(
        default=None, alias="attendanceClass", min_length=1, max_length=MAX_RECORD_TEXT_LENGTH
    )
    file_academics: str | None = Field(
        default=None, alias="fileAcademics", max_length=MAX_RECORD_TEXT_LENGTH
    )
    qd_official: str | None = Field(
        default=None, alias="qdOfficial", max_length=MAX_RECORD_TEXT_LENGTH
    )

    class Config:
        populate_by_name = True
        extra = "forbid"
        str_strip_whitespace = True


class VoteCreate(BaseModel):
    """Payload of a daily vote"""
    vote: str = Field(..., min_length=1, max_length=MAX_VOTE_LENGTH)

    class Config:
        extra = "forbid"
        str_strip_whitespace = True


class SubmissionResponse(BaseModel):
    id: int
    account_id: str
    record_date: date
    attendance_class: str
    file_academics: str | None
    qd_official: str | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VoteResponse(BaseModel):
    id: int
    account_id: str
    record_date: date
    vote: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AccountBrief(BaseModel):
    """Account fields joined onto admin record listings"""
    id: str
    name: str
    email: str

    class Config:
        from_attributes = True


class SubmissionWithAccount(SubmissionResponse):
    account: AccountBrief | None = None


class VoteWithAccount(VoteResponse):
    account: AccountBrief | None = None


class SubmissionListResponse(BaseModel):
    items: list[SubmissionResponse]
    pagination: PaginationMeta


class VoteListResponse(BaseModel):
    items: list[VoteResponse]
    pagination: PaginationMeta


class SubmissionAdminListResponse(BaseModel):
    items: list[SubmissionWithAccount]
    pagination: PaginationMeta


class VoteAdminListResponse(BaseModel):
    items: list[VoteWithAccount]
    pagination: PaginationMeta


class TodayStatusResponse(BaseModel):
    """has-submitted-today / has-voted-today"""
    has_submitted: bool
    message: str
    record_date: date


class LedgerTodayResponse(BaseModel):
    """Server calendar date and the late-submission cutoff"""
    record_date: date
    server_time: datetime
    cutoff: time
    closed: bool
