"""Daily ledger service module"""

from checkin.services.ledger.daily_ledger import (
    DailyLedgerService,
    SubmissionWindow,
    clamp_page,
    submission_window,
    reject_identity_fields,
    submission_ledger,
    vote_ledger,
)

__all__ = [
    "DailyLedgerService",
    "SubmissionWindow",
    "clamp_page",
    "submission_window",
    "reject_identity_fields",
    "submission_ledger",
    "vote_ledger",
]
