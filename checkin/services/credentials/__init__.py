"""Credential hashing and verification"""

from checkin.services.credentials.password_hasher import (
    detect_scheme,
    hash_password,
    hash_password_async,
    hash_password_bcrypt,
    needs_rehash,
    validate_password,
    verify_password,
    verify_password_async,
)

__all__ = [
    "detect_scheme",
    "hash_password",
    "hash_password_async",
    "hash_password_bcrypt",
    "needs_rehash",
    "validate_password",
    "verify_password",
    "verify_password_async",
]
