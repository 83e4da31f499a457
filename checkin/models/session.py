"""Login session model"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from checkin.db.database import Base
from checkin.utils.dates import utcnow


class LoginSession(Base):
    """Opaque bearer session. Valid while ``now < expires_at``; deleted on logout."""

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token = Column(String(128), unique=True, nullable=False, index=True)
    account_id = Column(
        String(32),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at = Column(DateTime, nullable=False, index=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<LoginSession(account_id={self.account_id}, expires_at={self.expires_at})>"
