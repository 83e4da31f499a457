from datetime import timedelta

import pytest
from sqlalchemy import func, select

from checkin.models import Account, Credential, HashScheme, LoginSession, Submission, Vote
from checkin.services.accounts import account_directory
from checkin.services.credentials import verify_password
from checkin.services.ledger import submission_ledger, vote_ledger
from checkin.services.sessions import session_service
from checkin.utils.dates import server_today, utcnow
from checkin.utils.errors import (
    EmailExists,
    Forbidden,
    NotFound,
    SelfDeleteForbidden,
    ValidationError,
)

from tests.conftest import DEFAULT_PASSWORD, principal_of

NEW_ACCOUNT = {"name": "New Member", "email": "New@Example.com", "password": "secret123"}


async def test_super_admin_creates_account(db, super_admin):
    account = await account_directory.create_account(db, principal_of(super_admin), NEW_ACCOUNT)

    assert account.email == "new@example.com"
    assert account.role == "user"
    assert account.is_super_admin is False
    assert account.strikes == 0

    credential = await db.scalar(select(Credential).where(Credential.account_id == account.id))
    assert credential.scheme == HashScheme.ARGON2ID.value
    assert verify_password(credential.password_hash, "secret123")


async def test_admin_cannot_create_accounts(db, admin):
    with pytest.raises(Forbidden):
        await account_directory.create_account(db, principal_of(admin), NEW_ACCOUNT)


async def test_create_rejects_duplicate_email_case_insensitively(db, super_admin, user):
    fields = dict(NEW_ACCOUNT, email="  USER@example.com")

    with pytest.raises(EmailExists):
        await account_directory.create_account(db, principal_of(super_admin), fields)


@pytest.mark.parametrize(
    "override",
    [
        {"name": "   "},
        {"email": "not-an-email"},
        {"password": "12345"},
        {"role": "owner"},
        {"role": "user", "is_super_admin": True},
    ],
)
async def test_create_validates_fields(db, super_admin, override):
    with pytest.raises(ValidationError):
        await account_directory.create_account(
            db, principal_of(super_admin), dict(NEW_ACCOUNT, **override)
        )

    count = await db.scalar(select(func.count()).select_from(Account))
    assert count == 1


async def test_weak_password_creates_nothing(db, super_admin):
    with pytest.raises(ValidationError):
        await account_directory.create_account(
            db, principal_of(super_admin), dict(NEW_ACCOUNT, password="123")
        )

    assert await db.scalar(select(func.count()).select_from(Credential)) == 1


async def test_register_creates_plain_user(db):
    account = await account_directory.register_account(db, NEW_ACCOUNT)

    assert account.role == "user"
    assert account.is_super_admin is False


async def test_list_accounts_requires_admin(db, user):
    with pytest.raises(Forbidden):
        await account_directory.list_accounts(db, principal_of(user))


async def test_list_accounts_search_and_role_filter(db, admin, make_account):
    await make_account("alice@example.com", name="Alice Smith")
    await make_account("bob@example.com", name="Bob Jones")

    rows, total = await account_directory.list_accounts(db, principal_of(admin), search="SMITH")
    assert total == 1
    assert rows[0][0].email == "alice@example.com"

    rows, total = await account_directory.list_accounts(db, principal_of(admin), search="example")
    assert total == 3

    rows, total = await account_directory.list_accounts(db, principal_of(admin), role="admin")
    assert [account.id for account, _ in rows] == [admin.id]

    with pytest.raises(ValidationError):
        await account_directory.list_accounts(db, principal_of(admin), role="owner")


async def test_list_accounts_search_treats_wildcards_literally(db, admin, make_account):
    await make_account("percent@example.com", name="100% Member")
    await make_account("plain@example.com", name="Plain Member")

    rows, total = await account_directory.list_accounts(db, principal_of(admin), search="%")
    assert total == 1
    assert rows[0][0].email == "percent@example.com"


async def test_list_accounts_pagination_caps_limit(db, admin):
    rows, total = await account_directory.list_accounts(db, principal_of(admin), limit=1000)
    assert total == 1
    assert len(rows) == 1


async def test_list_accounts_includes_recent_activity(db, admin, user):
    today = server_today()
    now = utcnow()
    for days_ago in (0, 3, 30, 31):
        db.add(
            Submission(
                account_id=user.id,
                record_date=today - timedelta(days=days_ago),
                attendance_class="Math",
                created_at=now,
                updated_at=now,
            )
        )
    await db.commit()

    rows, _ = await account_directory.list_accounts(db, principal_of(admin))
    counts = {account.id: count for account, count in rows}

    assert counts[user.id] == 3
    assert counts[admin.id] == 0


async def test_user_reads_own_account_only(db, user, admin):
    assert (await account_directory.get_account(db, principal_of(user), user.id)).id == user.id

    with pytest.raises(Forbidden):
        await account_directory.get_account(db, principal_of(user), admin.id)


async def test_get_unknown_account(db, admin):
    with pytest.raises(NotFound):
        await account_directory.get_account(db, principal_of(admin), "missing")


async def test_admin_updates_ordinary_fields(db, admin, user):
    updated = await account_directory.update_account(
        db,
        principal_of(admin),
        user.id,
        {"name": "  Renamed ", "strikes": 2, "email_verified": True},
    )

    assert updated.name == "Renamed"
    assert updated.strikes == 2
    assert updated.email_verified is True


async def test_admin_cannot_promote(db, admin, user):
    with pytest.raises(Forbidden):
        await account_directory.update_account(db, principal_of(admin), user.id, {"role": "admin"})

    await db.refresh(user)
    assert user.role == "user"


async def test_admin_cannot_promote_self(db, admin):
    with pytest.raises(Forbidden):
        await account_directory.update_account(
            db, principal_of(admin), admin.id, {"is_super_admin": True}
        )


async def test_admin_cannot_demote_other_admin(db, admin, make_account):
    other = await make_account("other-admin@example.com", role="admin")

    with pytest.raises(Forbidden):
        await account_directory.update_account(db, principal_of(admin), other.id, {"role": "user"})


async def test_admin_cannot_take_over_super_admin(db, admin, super_admin):
    with pytest.raises(Forbidden):
        await account_directory.update_account(
            db, principal_of(admin), super_admin.id, {"password": "hijacked123"}
        )
    with pytest.raises(Forbidden):
        await account_directory.update_account(
            db, principal_of(admin), super_admin.id, {"email": "mine@example.com"}
        )


async def test_super_admin_promotes_to_super_admin(db, super_admin, user):
    updated = await account_directory.update_account(
        db, principal_of(super_admin), user.id, {"role": "admin", "is_super_admin": True}
    )

    assert updated.role == "admin"
    assert updated.is_super_admin is True


async def test_update_keeps_super_admin_role_invariant(db, super_admin, user):
    with pytest.raises(ValidationError):
        await account_directory.update_account(
            db, principal_of(super_admin), user.id, {"is_super_admin": True}
        )

    with pytest.raises(ValidationError):
        await account_directory.update_account(
            db, principal_of(super_admin), super_admin.id, {"role": "user"}
        )


@pytest.mark.parametrize(
    "changes",
    [
        {"strikes": -1},
        {"strikes": True},
        {"email_verified": "yes"},
        {"role": "owner"},
        {"name": ""},
        {"email": "nope"},
        {"password": "123"},
        {"nickname": "x"},
    ],
)
async def test_update_validates_fields(db, admin, user, changes):
    with pytest.raises(ValidationError):
        await account_directory.update_account(db, principal_of(admin), user.id, changes)


async def test_update_email_conflict(db, admin, user, make_account):
    await make_account("taken@example.com")

    with pytest.raises(EmailExists):
        await account_directory.update_account(
            db, principal_of(admin), user.id, {"email": "TAKEN@example.com"}
        )


async def test_update_to_own_email_is_not_a_conflict(db, admin, user):
    updated = await account_directory.update_account(
        db, principal_of(admin), user.id, {"email": "User@Example.com"}
    )
    assert updated.email == "user@example.com"


async def test_password_change_replaces_credential(db, admin, user):
    await account_directory.update_account(
        db, principal_of(admin), user.id, {"password": "brand-new-pass"}
    )

    credentials = (
        await db.scalars(select(Credential).where(Credential.account_id == user.id))
    ).all()
    assert len(credentials) == 1
    assert verify_password(credentials[0].password_hash, "brand-new-pass")
    assert not verify_password(credentials[0].password_hash, DEFAULT_PASSWORD)


async def test_update_unknown_account(db, admin):
    with pytest.raises(NotFound):
        await account_directory.update_account(db, principal_of(admin), "missing", {"name": "X"})


async def test_delete_requires_super_admin(db, admin, user):
    with pytest.raises(Forbidden):
        await account_directory.delete_account(db, principal_of(admin), user.id)


async def test_super_admin_cannot_delete_self(db, super_admin):
    with pytest.raises(SelfDeleteForbidden) as exc_info:
        await account_directory.delete_account(db, principal_of(super_admin), super_admin.id)

    assert exc_info.value.status_code == 409
    assert await db.get(Account, super_admin.id) is not None


async def test_delete_unknown_account(db, super_admin):
    with pytest.raises(NotFound):
        await account_directory.delete_account(db, principal_of(super_admin), "missing")


async def test_delete_removes_everything_owned(db, super_admin, user):
    principal = principal_of(user)
    await session_service.login(db, user.email, DEFAULT_PASSWORD)
    await submission_ledger.submit(db, principal, {"attendanceClass": "Math"})
    await vote_ledger.submit(db, principal, {"vote": "yes"})

    summary = await account_directory.delete_account(db, principal_of(super_admin), user.id)

    assert summary["id"] == user.id
    assert summary["email"] == "user@example.com"
    for model in (Credential, LoginSession, Submission, Vote):
        count = await db.scalar(
            select(func.count()).select_from(model).where(model.account_id == user.id)
        )
        assert count == 0, model.__name__
    assert await db.scalar(select(func.count()).select_from(Account)) == 1
