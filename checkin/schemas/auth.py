"""Authentication schemas"""

from datetime import datetime

from pydantic import BaseModel

from checkin.schemas.account import AccountResponse


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    """Self-registration. Role is always ``user``."""
    name: str
    email: str
    password: str

    class Config:
        extra = "forbid"


class PrincipalResponse(BaseModel):
    account_id: str
    role: str
    is_super_admin: bool
    tier: str


class LoginResponse(BaseModel):
    """Login endpoint response"""
    token: str
    token_type: str = "bearer"
    expires_at: datetime
    principal: PrincipalResponse


class MeResponse(BaseModel):
    """Own account with derived activity"""
    account: AccountResponse
    recent_activity_count: int
    has_submitted_today: bool
