"""Account directory service module"""

from checkin.services.accounts.account_directory import (
    AccountDirectoryService,
    account_directory,
)

__all__ = ["AccountDirectoryService", "account_directory"]
