"""Session issuing and resolution.

Login turns an email/password pair into an opaque session token; every
later request presents that token (bearer header or cookie) and is
resolved to a ``Principal``. Failures on both paths are deliberately
uniform so callers cannot tell an unknown email from a wrong password, or
an expired session from a made-up token.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from checkin.config import settings
from checkin.db import get_db
from checkin.models import Account, Credential, HashScheme, LoginSession
from checkin.services.authority import Principal
from checkin.services.credentials import (
    hash_password_async,
    needs_rehash,
    verify_password_async,
)
from checkin.utils.dates import utcnow
from checkin.utils.errors import InvalidCredentials, Unauthenticated, ValidationError
from checkin.utils.sentry_utils import set_user_context
from checkin.utils.validators import normalize_email

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


@dataclass
class LoginResult:
    """Outcome of a successful login"""

    token: str
    expires_at: datetime
    principal: Principal
    account: Account


def principal_from_account(account: Account) -> Principal:
    return Principal(
        account_id=account.id,
        role=account.role,
        is_super_admin=bool(account.is_super_admin),
    )


_dummy_hash_value: Optional[str] = None


async def _dummy_hash() -> str:
    """Hash used to spend verification time when the email is unknown."""
    global _dummy_hash_value
    if _dummy_hash_value is None:
        _dummy_hash_value = await hash_password_async(secrets.token_urlsafe(16))
    return _dummy_hash_value


class SessionService:
    """Issues, resolves and revokes login sessions."""

    async def login(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> LoginResult:
        """Verify credentials and open a new session.

        Raises:
            InvalidCredentials: For any failure (unknown email, missing
                credential, wrong password)
        """
        if not isinstance(email, str) or not isinstance(password, str):
            raise InvalidCredentials()

        normalized = normalize_email(email)
        result = await db.execute(
            select(Account, Credential)
            .outerjoin(Credential, Credential.account_id == Account.id)
            .where(Account.email == normalized)
        )
        row = result.first()

        if row is None or row[1] is None:
            await verify_password_async(await _dummy_hash(), password)
            logger.warning("Login failed: unknown account or no credential")
            raise InvalidCredentials()

        account, credential = row
        if not await verify_password_async(credential.password_hash, password):
            logger.warning(f"Login failed: wrong password for account {account.id}")
            raise InvalidCredentials()

        if needs_rehash(credential.password_hash):
            await self._upgrade_credential(credential, password)

        now = utcnow()
        expires_at = now + timedelta(days=settings.session_ttl_days)
        session = LoginSession(
            token=secrets.token_urlsafe(TOKEN_BYTES),
            account_id=account.id,
            expires_at=expires_at,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:500] or None,
            created_at=now,
        )
        db.add(session)
        await db.commit()

        logger.info(f"Account {account.id} logged in (session expires {expires_at.isoformat()})")

        return LoginResult(
            token=session.token,
            expires_at=expires_at,
            principal=principal_from_account(account),
            account=account,
        )

    async def _upgrade_credential(self, credential: Credential, password: str) -> None:
        """Re-hash a legacy credential with the current scheme (committed with the session)."""
        try:
            new_hash = await hash_password_async(password)
        except ValidationError:
            # Legacy password below today's minimum length; keep the old hash
            logger.info(f"Skipping hash upgrade for account {credential.account_id}")
            return
        old_scheme = credential.scheme
        credential.password_hash = new_hash
        credential.scheme = HashScheme.ARGON2ID.value
        logger.info(
            f"Upgraded credential for account {credential.account_id} "
            f"from {old_scheme} to {HashScheme.ARGON2ID.value}"
        )

    async def resolve(self, db: AsyncSession, token: str | None) -> Principal:
        """Resolve a session token to a fresh Principal snapshot.

        Raises:
            Unauthenticated: Missing, unknown or expired token
        """
        if not token:
            raise Unauthenticated()

        result = await db.execute(
            select(LoginSession, Account)
            .join(Account, Account.id == LoginSession.account_id)
            .where(LoginSession.token == token)
        )
        row = result.first()
        if row is None:
            raise Unauthenticated()

        session, account = row
        if utcnow() >= session.expires_at:
            # Expired sessions are left in place; the purge job removes them
            raise Unauthenticated()

        return principal_from_account(account)

    async def logout(self, db: AsyncSession, token: str | None) -> bool:
        """Delete a session. Returns False when there was nothing to delete."""
        if not token:
            return False
        result = await db.execute(delete(LoginSession).where(LoginSession.token == token))
        await db.commit()
        return result.rowcount > 0

    async def purge_expired_sessions(self, db: AsyncSession) -> int:
        """Delete sessions whose expiry has passed. Returns the count removed."""
        result = await db.execute(
            delete(LoginSession).where(LoginSession.expires_at <= utcnow())
        )
        await db.commit()
        return result.rowcount or 0


def extract_token(request: Request) -> Optional[str]:
    """Read the session token from the bearer header, falling back to the cookie."""
    auth_header = request.headers.get("Authorization")
    if auth_header:
        scheme, _, credentials = auth_header.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()

    cookie_token = request.cookies.get(settings.session_cookie_name)
    if cookie_token:
        return cookie_token
    return None


async def get_current_principal(
    request: Request, db: AsyncSession = Depends(get_db)
) -> Principal:
    """FastAPI dependency resolving the caller or failing with 401."""
    principal = await session_service.resolve(db, extract_token(request))
    set_user_context(principal.account_id)
    return principal


# Global instance
session_service = SessionService()
