"""Daily records: one submission and one vote per account per calendar day"""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declared_attr

from checkin.db.database import Base
from checkin.utils.dates import utcnow


class DailyRecordMixin:
    """Columns shared by every per-account-per-day table.

    The ``(account_id, record_date)`` pair carries a unique constraint so
    concurrent inserts for the same day cannot both succeed.
    """

    id = Column(Integer, primary_key=True, autoincrement=True)
    record_date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    @declared_attr
    def account_id(cls):
        return Column(
            String(32),
            ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )

    @declared_attr
    def __table_args__(cls):
        return (
            UniqueConstraint(
                "account_id", "record_date", name=f"uq_{cls.__tablename__}_account_date"
            ),
        )


class Submission(DailyRecordMixin, Base):
    """Daily attendance submission, patchable by its owner"""

    __tablename__ = "submissions"

    attendance_class = Column(Text, nullable=False)
    file_academics = Column(Text, nullable=True)
    qd_official = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Submission(account_id={self.account_id}, date={self.record_date})>"


class Vote(DailyRecordMixin, Base):
    """Daily vote, immutable once cast"""

    __tablename__ = "votes"

    vote = Column(String(64), nullable=False)

    def __repr__(self):
        return f"<Vote(account_id={self.account_id}, date={self.record_date}, vote='{self.vote}')>"
