from checkin.db.database import Base
from checkin.models.account import Account, AccountRole
from checkin.models.credential import Credential, HashScheme
from checkin.models.session import LoginSession
from checkin.models.daily_record import DailyRecordMixin, Submission, Vote

__all__ = [
    "Base",
    "Account",
    "AccountRole",
    "Credential",
    "HashScheme",
    "LoginSession",
    "DailyRecordMixin",
    "Submission",
    "Vote",
]
