from checkin.db.database import (
    get_db,
    get_db_session,
    async_engine,
    AsyncSessionLocal,
    Base,
)

__all__ = [
    "get_db",
    "get_db_session",
    "async_engine",
    "AsyncSessionLocal",
    "Base",
]
