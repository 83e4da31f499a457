"""
Environment configuration for Alembic migrations.
Resolves the synchronous database URL from the same settings the app uses.
"""

import os

from dotenv import load_dotenv

# Load the environment-specific .env file before settings are read
env = os.getenv("ENV", "local")
dotenv_file = f".env.{env}"
load_dotenv(dotenv_file)


def get_database_url() -> str:
    """
    Get the synchronous database URL for migrations.

    DATABASE_URL wins when set; otherwise the URL is composed from the
    DB_* variables. Async driver suffixes are stripped.
    """
    from checkin.config import settings

    return settings.sync_database_url
