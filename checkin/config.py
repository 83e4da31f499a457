from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    database_url: str = ""
    db_name: str = "checkin_db"
    db_user: str = "postgres"
    db_password: str = ""
    db_host: str = "localhost"
    db_port: str = "5432"
    db_echo: bool = False

    # Sessions
    session_ttl_days: int = 7
    session_cookie_name: str = "checkin_session"
    session_cookie_secure: bool = False
    session_purge_interval_seconds: int = 0  # 0 disables the background purge

    # Password hashing (fixed per deployment)
    argon2_memory_cost: int = 65536  # KiB
    argon2_time_cost: int = 3
    argon2_parallelism: int = 4
    argon2_hash_len: int = 32
    bcrypt_rounds: int = 12
    min_password_length: int = 6

    # Daily ledger
    submission_cutoff: str = "22:00"
    app_timezone: str = ""  # empty means the server's local time
    activity_window_days: int = 30

    # Accounts
    allow_self_registration: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def async_database_url(self) -> str:
        """Async URL for the application engine."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def sync_database_url(self) -> str:
        """Sync URL for Alembic migrations."""
        url = self.async_database_url
        return url.replace("+asyncpg", "").replace("+aiosqlite", "")


settings = Settings()
