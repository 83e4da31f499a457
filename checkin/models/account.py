"""Account model for community members and administrators"""

import uuid
from enum import Enum as PyEnum

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String

from checkin.db.database import Base
from checkin.utils.dates import utcnow


class AccountRole(str, PyEnum):
    USER = "user"
    ADMIN = "admin"


def new_account_id() -> str:
    return uuid.uuid4().hex


class Account(Base):
    """A member account. ``email`` is always stored trimmed and lowercased."""

    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("strikes >= 0", name="ck_accounts_strikes_non_negative"),
        CheckConstraint(
            "is_super_admin = false OR role = 'admin'",
            name="ck_accounts_super_admin_is_admin",
        ),
    )

    id = Column(String(32), primary_key=True, default=new_account_id)
    email = Column(String(320), unique=True, nullable=False, index=True)
    name = Column(String(120), nullable=False)
    role = Column(String(10), default=AccountRole.USER.value, nullable=False)
    is_super_admin = Column(Boolean, default=False, nullable=False)
    strikes = Column(Integer, default=0, nullable=False)
    email_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Account(id={self.id}, email='{self.email}', role='{self.role}')>"
