"""Account directory: CRUD over member accounts.

Every operation takes the acting ``Principal`` explicitly and checks it
with the role authority before touching storage. Emails are stored in
normalized form behind a unique index, so case-insensitive uniqueness
holds even when two requests race past the friendly pre-check.
"""

import logging
from datetime import datetime
from typing import Any, Mapping

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from checkin.config import settings
from checkin.models import (
    Account,
    AccountRole,
    Credential,
    HashScheme,
    LoginSession,
    Submission,
    Vote,
)
from checkin.services.authority import (
    Principal,
    Tier,
    changed_privilege_fields,
    require_tier,
    required_tier_for_update,
)
from checkin.services.credentials import hash_password_async, validate_password
from checkin.services.ledger import clamp_page, submission_ledger
from checkin.utils.constants import ALLOWED_ROLES, MAX_NAME_LENGTH
from checkin.utils.dates import utcnow
from checkin.utils.errors import (
    EmailExists,
    Forbidden,
    NotFound,
    SelfDeleteForbidden,
    Unauthenticated,
    ValidationError,
)
from checkin.utils.validators import validate_email, validate_name

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "name",
    "email",
    "password",
    "role",
    "is_super_admin",
    "email_verified",
    "strikes",
)


def _validate_role(role: Any) -> str:
    if role not in ALLOWED_ROLES:
        raise ValidationError('Role must be either "admin" or "user"')
    return role


def _validate_bool(value: Any, field: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field} must be a boolean")
    return value


def _validate_strikes(value: Any) -> int:
    # bool is an int subclass; True is not a strike count
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError("Strikes must be a non-negative integer")
    return value


def _check_super_admin_invariant(role: str, is_super_admin: bool) -> None:
    if is_super_admin and role != AccountRole.ADMIN.value:
        raise ValidationError("A super admin must have the admin role")


class AccountDirectoryService:
    """Account CRUD gated by the three-tier role model."""

    async def _get_or_404(self, db: AsyncSession, account_id: str) -> Account:
        account = await db.get(Account, account_id)
        if account is None:
            raise NotFound("User not found")
        return account

    async def _email_taken(
        self, db: AsyncSession, email: str, exclude_id: str | None = None
    ) -> bool:
        query = select(Account.id).where(Account.email == email)
        if exclude_id is not None:
            query = query.where(Account.id != exclude_id)
        result = await db.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def _insert_account(
        self,
        db: AsyncSession,
        name: str,
        email: str,
        password: str,
        role: str,
        is_super_admin: bool,
    ) -> Account:
        """Insert Account and Credential in one transaction.

        Hashing happens before any storage work, and a failure anywhere
        rolls both rows back.
        """
        if await self._email_taken(db, email):
            raise EmailExists()

        password_hash = await hash_password_async(password)
        now = utcnow()

        account = Account(
            name=name,
            email=email,
            role=role,
            is_super_admin=is_super_admin,
            strikes=0,
            email_verified=False,
            created_at=now,
            updated_at=now,
        )
        try:
            db.add(account)
            try:
                await db.flush()
            except IntegrityError:
                raise EmailExists()

            db.add(
                Credential(
                    account_id=account.id,
                    scheme=HashScheme.ARGON2ID.value,
                    password_hash=password_hash,
                    created_at=now,
                    updated_at=now,
                )
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(account)
        return account

    async def list_accounts(
        self,
        db: AsyncSession,
        principal: Principal,
        search: str | None = None,
        role: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[tuple[Account, int]], int]:
        """Page through accounts with their trailing-window activity count (admin)."""
        require_tier(principal, Tier.ADMIN)
        limit, offset = clamp_page(limit, offset)

        conditions = []
        if search and search.strip():
            term = search.strip().lower()
            conditions.append(
                or_(
                    func.lower(Account.name).contains(term, autoescape=True),
                    func.lower(Account.email).contains(term, autoescape=True),
                )
            )
        if role:
            conditions.append(Account.role == _validate_role(role))

        activity = submission_ledger.activity_count_column(Account.id).label(
            "recent_activity_count"
        )
        query = (
            select(Account, activity)
            .order_by(Account.created_at.desc(), Account.id)
            .limit(limit)
            .offset(offset)
        )
        count_query = select(func.count()).select_from(Account)
        if conditions:
            query = query.where(*conditions)
            count_query = count_query.where(*conditions)

        total = await db.scalar(count_query)
        result = await db.execute(query)
        rows = [(row[0], row[1] or 0) for row in result.all()]

        logger.info(f"Admin {principal.account_id} fetched accounts list - {len(rows)} records")
        return rows, total or 0

    async def get_account(
        self, db: AsyncSession, principal: Principal, account_id: str
    ) -> Account:
        """Read one account. Admins read any account, users only their own."""
        if principal is None:
            raise Unauthenticated()
        if principal.account_id != account_id:
            require_tier(principal, Tier.ADMIN)
        return await self._get_or_404(db, account_id)

    async def create_account(
        self, db: AsyncSession, principal: Principal, fields: Mapping[str, Any]
    ) -> Account:
        """Create an account with a credential (super-admin only).

        Raises:
            Forbidden: The principal is not a super admin
            ValidationError: Invalid name, email, password, role or flags
            EmailExists: The normalized email is already registered
        """
        require_tier(principal, Tier.SUPER_ADMIN)

        name = validate_name(fields.get("name"), MAX_NAME_LENGTH)
        email = validate_email(fields.get("email"))
        password = validate_password(fields.get("password"))
        role = _validate_role(fields.get("role", AccountRole.USER.value))
        is_super_admin = _validate_bool(fields.get("is_super_admin", False), "is_super_admin")
        _check_super_admin_invariant(role, is_super_admin)

        account = await self._insert_account(db, name, email, password, role, is_super_admin)
        logger.info(
            f"Super admin {principal.account_id} created account {account.id} "
            f"(role={role}, super_admin={is_super_admin})"
        )
        return account

    async def register_account(self, db: AsyncSession, fields: Mapping[str, Any]) -> Account:
        """Public self-registration; always creates a plain user.

        Raises:
            Forbidden: Self-registration is disabled
            ValidationError: Invalid name, email or password
            EmailExists: The normalized email is already registered
        """
        if not settings.allow_self_registration:
            raise Forbidden("Self-registration is disabled")

        name = validate_name(fields.get("name"), MAX_NAME_LENGTH)
        email = validate_email(fields.get("email"))
        password = validate_password(fields.get("password"))

        account = await self._insert_account(
            db, name, email, password, AccountRole.USER.value, False
        )
        logger.info(f"Account {account.id} self-registered")
        return account

    async def update_account(
        self,
        db: AsyncSession,
        principal: Principal,
        account_id: str,
        changes: Mapping[str, Any],
    ) -> Account:
        """Apply a partial update.

        Ordinary fields need ADMIN; role or super-admin changes need
        SUPER_ADMIN.

        Raises:
            Forbidden: Insufficient tier for the requested change
            NotFound: No such account
            ValidationError: Invalid field value or broken role invariant
            EmailExists: New email belongs to another account
        """
        require_tier(principal, Tier.ADMIN)
        account = await self._get_or_404(db, account_id)

        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        updates: dict[str, Any] = {}
        if changes.get("name") is not None:
            updates["name"] = validate_name(changes["name"], MAX_NAME_LENGTH)
        if changes.get("email") is not None:
            updates["email"] = validate_email(changes["email"])
        if changes.get("role") is not None:
            updates["role"] = _validate_role(changes["role"])
        if changes.get("is_super_admin") is not None:
            updates["is_super_admin"] = _validate_bool(changes["is_super_admin"], "is_super_admin")
        if changes.get("email_verified") is not None:
            updates["email_verified"] = _validate_bool(changes["email_verified"], "email_verified")
        if changes.get("strikes") is not None:
            updates["strikes"] = _validate_strikes(changes["strikes"])
        password = changes.get("password")
        if password is not None:
            validate_password(password)

        tier_changes = dict(updates)
        if password is not None:
            tier_changes["password"] = password
        required = required_tier_for_update(account, tier_changes)
        if required is Tier.SUPER_ADMIN and principal.tier < Tier.SUPER_ADMIN:
            logger.warning(
                f"Account {principal.account_id} attempted privileged change on {account.id}: "
                f"{changed_privilege_fields(account, updates) or ['credentials']}"
            )
        require_tier(principal, required)

        _check_super_admin_invariant(
            updates.get("role", account.role),
            updates.get("is_super_admin", account.is_super_admin),
        )

        new_email = updates.get("email")
        if new_email is not None and new_email != account.email:
            if await self._email_taken(db, new_email, exclude_id=account.id):
                raise EmailExists("Email is already taken by another user")

        new_hash = await hash_password_async(password) if password is not None else None

        now = utcnow()
        try:
            for field, value in updates.items():
                setattr(account, field, value)
            account.updated_at = now

            if new_hash is not None:
                await self._replace_credential(db, account.id, new_hash, now)

            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise EmailExists("Email is already taken by another user")

        await db.refresh(account)
        logger.info(
            f"Account {principal.account_id} updated account {account.id}: "
            f"{sorted(list(updates) + (['password'] if new_hash else []))}"
        )
        return account

    async def _replace_credential(
        self, db: AsyncSession, account_id: str, password_hash: str, now: datetime
    ) -> None:
        result = await db.execute(select(Credential).where(Credential.account_id == account_id))
        credential = result.scalar_one_or_none()
        if credential is None:
            db.add(
                Credential(
                    account_id=account_id,
                    scheme=HashScheme.ARGON2ID.value,
                    password_hash=password_hash,
                    created_at=now,
                    updated_at=now,
                )
            )
            return
        credential.scheme = HashScheme.ARGON2ID.value
        credential.password_hash = password_hash
        credential.updated_at = now

    async def delete_account(
        self, db: AsyncSession, principal: Principal, account_id: str
    ) -> dict:
        """Hard-delete an account and everything it owns (super-admin only).

        Raises:
            Forbidden: The principal is not a super admin
            SelfDeleteForbidden: The target is the acting principal
            NotFound: No such account
        """
        require_tier(principal, Tier.SUPER_ADMIN)
        if account_id == principal.account_id:
            logger.warning(f"Super admin {principal.account_id} attempted to delete own account")
            raise SelfDeleteForbidden("Cannot delete your own super admin account")

        account = await self._get_or_404(db, account_id)
        summary = {
            "id": account.id,
            "name": account.name,
            "email": account.email,
            "role": account.role,
            "is_super_admin": account.is_super_admin,
        }

        try:
            for model in (Credential, LoginSession, Submission, Vote):
                await db.execute(delete(model).where(model.account_id == account_id))
            await db.delete(account)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"Super admin {principal.account_id} deleted account {account_id}")
        return summary

    async def recent_activity_count(
        self, db: AsyncSession, account_id: str, window_days: int | None = None
    ) -> int:
        return await submission_ledger.recent_activity_count(db, account_id, window_days)


# Global instance
account_directory = AccountDirectoryService()
