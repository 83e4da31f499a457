"""Credential model holding the active password hash of an account"""

from enum import Enum as PyEnum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from checkin.db.database import Base
from checkin.utils.dates import utcnow


class HashScheme(str, PyEnum):
    BCRYPT = "bcrypt"        # legacy fast hash
    ARGON2ID = "argon2id"    # current memory-hard hash


class Credential(Base):
    """One live credential per account; replaced in place on password change"""

    __tablename__ = "credentials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(
        String(32),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )
    scheme = Column(String(16), nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Credential(account_id={self.account_id}, scheme='{self.scheme}')>"
