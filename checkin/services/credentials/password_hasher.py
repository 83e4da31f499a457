"""Password hashing with two coexisting schemes.

Stored hashes are self-describing: the prefix of the string names the
algorithm that produced it.

- ``$2a$`` / ``$2b$`` / ``$2y$`` -> bcrypt (legacy, still accepted)
- ``$argon2id$`` -> Argon2id (current; every new hash uses it)

Verification dispatches on that tag. New hashes always use Argon2id with
the deployment's fixed cost parameters.
"""

import asyncio
import logging

import bcrypt
from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError

from checkin.config import settings
from checkin.models.credential import HashScheme
from checkin.utils.constants import MAX_PASSWORD_LENGTH
from checkin.utils.errors import ValidationError

logger = logging.getLogger(__name__)

BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")
BCRYPT_MAX_BYTES = 72
ARGON2ID_PREFIX = "$argon2id$"

_argon2_hasher = PasswordHasher(
    time_cost=settings.argon2_time_cost,
    memory_cost=settings.argon2_memory_cost,
    parallelism=settings.argon2_parallelism,
    hash_len=settings.argon2_hash_len,
    salt_len=16,
    type=Type.ID,
)


def detect_scheme(stored_hash: str | None) -> HashScheme | None:
    """Return the scheme tagged in a stored hash, or None if unrecognized."""
    if not stored_hash:
        return None
    if stored_hash.startswith(ARGON2ID_PREFIX):
        return HashScheme.ARGON2ID
    if stored_hash.startswith(BCRYPT_PREFIXES):
        return HashScheme.BCRYPT
    return None


def validate_password(plaintext: str | None) -> str:
    """Check password length rules.

    Raises:
        ValidationError: If the password is missing, too short or too long
    """
    if not isinstance(plaintext, str) or len(plaintext) < settings.min_password_length:
        raise ValidationError(
            f"Password must be at least {settings.min_password_length} characters long"
        )
    if len(plaintext) > MAX_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at most {MAX_PASSWORD_LENGTH} characters long"
        )
    return plaintext


def hash_password(plaintext: str) -> str:
    """Hash a password with the current scheme (Argon2id).

    Raises:
        ValidationError: If the password fails length rules. No hashing
            work is done in that case.
    """
    validate_password(plaintext)
    return _argon2_hasher.hash(plaintext)


def hash_password_bcrypt(plaintext: str) -> str:
    """Hash with the legacy bcrypt scheme.

    Only used to seed legacy credentials (imports, tests); the application
    itself never writes new bcrypt hashes.
    """
    validate_password(plaintext)
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(_bcrypt_input(plaintext), salt).decode("utf-8")


def _bcrypt_input(plaintext: str) -> bytes:
    # bcrypt only reads the first 72 bytes; legacy hashes were made that way
    return plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]


def _verify_bcrypt(stored_hash: str, plaintext: str) -> bool:
    try:
        return bcrypt.checkpw(_bcrypt_input(plaintext), stored_hash.encode("utf-8"))
    except ValueError:
        # Malformed salt or hash body
        return False


def _verify_argon2(stored_hash: str, plaintext: str) -> bool:
    try:
        return _argon2_hasher.verify(stored_hash, plaintext)
    except (VerificationError, InvalidHashError, ValueError):
        # ValueError covers non-ASCII bytes in a corrupted hash string
        return False


def verify_password(stored_hash: str | None, plaintext: str | None) -> bool:
    """Check a plaintext password against a scheme-tagged stored hash.

    Never raises: unknown tags, malformed hashes and non-string input all
    verify as False.
    """
    if not isinstance(plaintext, str) or not plaintext:
        return False

    scheme = detect_scheme(stored_hash)
    if scheme is HashScheme.ARGON2ID:
        return _verify_argon2(stored_hash, plaintext)
    if scheme is HashScheme.BCRYPT:
        return _verify_bcrypt(stored_hash, plaintext)

    logger.warning("Password verification against unrecognized hash scheme")
    return False


def needs_rehash(stored_hash: str) -> bool:
    """True when the stored hash is not Argon2id with the current parameters."""
    if detect_scheme(stored_hash) is not HashScheme.ARGON2ID:
        return True
    try:
        return _argon2_hasher.check_needs_rehash(stored_hash)
    except (InvalidHashError, ValueError):
        return True


async def hash_password_async(plaintext: str) -> str:
    """Non-blocking ``hash_password``; validation still happens up front."""
    validate_password(plaintext)
    return await asyncio.to_thread(hash_password, plaintext)


async def verify_password_async(stored_hash: str | None, plaintext: str | None) -> bool:
    """Non-blocking ``verify_password``."""
    return await asyncio.to_thread(verify_password, stored_hash, plaintext)
