#!/usr/bin/env python3
"""
Bootstrap a super admin account.

Super admins can only be created by another super admin through the API,
so the first one has to be seeded directly in the database. Running the
script against an existing email promotes that account instead and
resets its password.

Usage:
    ENV=staging python scripts/create_super_admin.py --email admin@example.com --name "Admin"
    ENV=staging python scripts/create_super_admin.py --email admin@example.com --name "Admin" --password secret123
"""

import argparse
import asyncio
import getpass
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

# Load environment-specific .env file
env = os.getenv("ENV", "local")
env_file = f".env.{env}"
if os.path.exists(env_file):
    load_dotenv(env_file)
    print(f"Loaded environment from: {env_file}")

from sqlalchemy import select

from checkin.db import get_db_session
from checkin.models import Account, AccountRole, Credential, HashScheme
from checkin.services.credentials import hash_password_async
from checkin.utils.constants import MAX_NAME_LENGTH
from checkin.utils.dates import utcnow
from checkin.utils.errors import ValidationError
from checkin.utils.validators import validate_email, validate_name


async def create_super_admin(email: str, name: str, password: str) -> tuple[Account, bool]:
    """Create or promote the account. Returns (account, created)."""
    email = validate_email(email)
    name = validate_name(name, MAX_NAME_LENGTH)
    password_hash = await hash_password_async(password)
    now = utcnow()

    async with get_db_session() as db:
        result = await db.execute(select(Account).where(Account.email == email))
        account = result.scalar_one_or_none()
        created = account is None

        if created:
            account = Account(
                email=email,
                name=name,
                created_at=now,
            )
            db.add(account)

        account.role = AccountRole.ADMIN.value
        account.is_super_admin = True
        account.updated_at = now
        await db.flush()

        result = await db.execute(select(Credential).where(Credential.account_id == account.id))
        credential = result.scalar_one_or_none()
        if credential is None:
            credential = Credential(account_id=account.id, created_at=now)
            db.add(credential)
        credential.scheme = HashScheme.ARGON2ID.value
        credential.password_hash = password_hash
        credential.updated_at = now

    return account, created


def main():
    parser = argparse.ArgumentParser(description="Create or promote a super admin account")
    parser.add_argument("--email", required=True, help="Account email")
    parser.add_argument("--name", required=True, help="Display name")
    parser.add_argument("--password", help="Password (prompted when omitted)")
    args = parser.parse_args()

    password = args.password
    if password is None:
        password = getpass.getpass("Password: ")
        if password != getpass.getpass("Confirm password: "):
            print("Passwords do not match")
            sys.exit(1)

    try:
        account, created = asyncio.run(create_super_admin(args.email, args.name, password))
    except ValidationError as e:
        print(f"Error: {e.message}")
        sys.exit(1)

    action = "Created" if created else "Promoted"
    print(f"{action} super admin {account.email} (id={account.id})")


if __name__ == "__main__":
    main()
