"""Account schemas for admin management and responses"""

from datetime import datetime

from pydantic import BaseModel, Field, StrictInt

from checkin.schemas.common import PaginationMeta


class AccountResponse(BaseModel):
    """Account as returned to clients. Never includes credential data."""
    id: str
    email: str
    name: str
    role: str
    is_super_admin: bool
    strikes: int
    email_verified: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AccountListItem(AccountResponse):
    recent_activity_count: int = 0


class AccountListResponse(BaseModel):
    items: list[AccountListItem]
    pagination: PaginationMeta


class AccountCreate(BaseModel):
    """Admin-issued account. Field rules are enforced by the account directory."""
    name: str
    email: str
    password: str
    role: str = "user"
    is_super_admin: bool = Field(default=False, alias="superAdmin")

    class Config:
        populate_by_name = True
        extra = "forbid"


class AccountUpdate(BaseModel):
    """Partial account update; only fields that are sent are applied"""
    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None
    is_super_admin: bool | None = Field(default=None, alias="superAdmin")
    email_verified: bool | None = Field(default=None, alias="emailVerified")
    strikes: StrictInt | None = None

    class Config:
        populate_by_name = True
        extra = "forbid"


class DeletedAccountSummary(BaseModel):
    id: str
    name: str
    email: str
    role: str
    is_super_admin: bool


class DeleteAccountResponse(BaseModel):
    message: str
    deleted_account: DeletedAccountSummary
