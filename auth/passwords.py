"""
auth/passwords.py -- One-way credential hashing (bcrypt).

This is the credential-hashing collaborator: hash_password() turns a
plaintext into an opaque credential and verify_password() checks a plaintext
against one. Nothing else in the codebase knows the algorithm.

bcrypt is used directly rather than through passlib: passlib's wrap-bug
detection feeds bcrypt 4.x a >72 byte password, which it rejects.

Layer rule: no imports from api/ or store/. Import from core/ is allowed.
"""

from __future__ import annotations

import bcrypt

from core.config import get_settings

# bcrypt only reads the first 72 bytes of a password. bcrypt 5 raises on
# longer input instead of truncating, so both sides truncate explicitly.
_BCRYPT_MAX_BYTES = 72


def _password_bytes(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    Only the first 72 UTF-8 bytes count, so two passwords sharing a 72-byte
    prefix hash identically.
    """
    salt = bcrypt.gensalt(rounds=get_settings().bcrypt_rounds)
    return bcrypt.hashpw(_password_bytes(plain), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed stored hash counts as a mismatch rather than an error.
    """
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first failed login is not measurably
# slower than later ones. Authenticator.authenticate_user() verifies against
# it when the lookup fails, so an unknown username costs the same bcrypt work
# as a wrong password.
DUMMY_HASH: str = hash_password("channelsync_timing_dummy")
