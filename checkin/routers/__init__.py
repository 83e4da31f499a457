"""API routers module"""

from checkin.routers.auth import router as auth_router
from checkin.routers.admin_users import router as admin_users_router
from checkin.routers.admin_records import router as admin_records_router
from checkin.routers.submissions import router as submissions_router
from checkin.routers.votes import router as votes_router
from checkin.routers.ledger import router as ledger_router

__all__ = [
    "auth_router",
    "admin_users_router",
    "admin_records_router",
    "submissions_router",
    "votes_router",
    "ledger_router",
]
