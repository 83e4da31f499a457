import os
import tempfile

# Settings are read at import time, so configure before importing the app
_db_dir = tempfile.mkdtemp(prefix="checkin-tests-")
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["LOG_FILE"] = ""
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["ARGON2_MEMORY_COST"] = "1024"
os.environ["ARGON2_TIME_COST"] = "1"
os.environ["ARGON2_PARALLELISM"] = "1"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SESSION_PURGE_INTERVAL_SECONDS"] = "0"
os.environ["ALLOW_SELF_REGISTRATION"] = "true"

import pytest
from httpx import ASGITransport, AsyncClient

from checkin.db.database import AsyncSessionLocal, Base, async_engine
from checkin.models import Account, AccountRole, Credential, HashScheme
from checkin.services.authority import Principal
from checkin.services.credentials import hash_password, hash_password_bcrypt
from checkin.utils.dates import utcnow

DEFAULT_PASSWORD = "correct-horse"


@pytest.fixture(autouse=True)
async def schema():
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Pooled aiosqlite connections are bound to this test's event loop
    await async_engine.dispose()


@pytest.fixture
async def db():
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def client():
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http


@pytest.fixture
def make_account(db):
    """Insert an account with a credential directly, bypassing authorization."""

    async def _make(
        email: str,
        name: str = "Member",
        role: str = AccountRole.USER.value,
        is_super_admin: bool = False,
        password: str = DEFAULT_PASSWORD,
        legacy: bool = False,
    ) -> Account:
        now = utcnow()
        account = Account(
            email=email,
            name=name,
            role=role,
            is_super_admin=is_super_admin,
            created_at=now,
            updated_at=now,
        )
        db.add(account)
        await db.flush()
        db.add(
            Credential(
                account_id=account.id,
                scheme=(HashScheme.BCRYPT if legacy else HashScheme.ARGON2ID).value,
                password_hash=hash_password_bcrypt(password) if legacy else hash_password(password),
                created_at=now,
                updated_at=now,
            )
        )
        await db.commit()
        return account

    return _make


@pytest.fixture
async def user(make_account):
    return await make_account("user@example.com", name="Plain User")


@pytest.fixture
async def admin(make_account):
    return await make_account("admin@example.com", name="Admin", role=AccountRole.ADMIN.value)


@pytest.fixture
async def super_admin(make_account):
    return await make_account(
        "root@example.com", name="Root", role=AccountRole.ADMIN.value, is_super_admin=True
    )


def principal_of(account: Account) -> Principal:
    return Principal(
        account_id=account.id, role=account.role, is_super_admin=account.is_super_admin
    )


@pytest.fixture
def login(client):
    """Log in over HTTP and return bearer headers."""

    async def _login(email: str, password: str = DEFAULT_PASSWORD) -> dict:
        response = await client.post(
            "/api/v1/auth/login", json={"email": email, "password": password}
        )
        assert response.status_code == 200, response.text
        # Authenticate with the bearer header only
        client.cookies.clear()
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login
