"""
auth/credentials.py -- User construction, validation, and password checks.

These functions operate on a User in isolation from storage. The
Authenticator calls set_password() and validate_user() on every save, and
authenticate() on every login.

Layer rule: no imports from api/ or store/.
"""

from __future__ import annotations

import re
from typing import Iterable

from auth.models import User
from auth.passwords import hash_password, verify_password
from core.errors import ValidationError

# Empty (the guest) or ASCII letters, digits and underscore.
_USERNAME_RE = re.compile(r"\w*", re.ASCII)


def new_user(name: str, password: str, channels: Iterable[str] | None = None) -> User:
    """Build a validated User. Raises ValidationError instead of returning a partial user."""
    user = User(name=name, channels=list(channels or []))
    set_password(user, password)
    validate_user(user)
    return user


def validate_user(user: User) -> None:
    """Raise ValidationError unless the user's name and credential are consistent.

    Named users must have a credential; the guest ("") must not.
    """
    if not _USERNAME_RE.fullmatch(user.name):
        raise ValidationError(f"Invalid username {user.name!r}")
    if (user.name == "") != (user.credential is None):
        raise ValidationError("Invalid password")


def set_password(user: User, password: str) -> None:
    """Replace the user's credential; an empty password clears it. Does not validate or persist."""
    user.credential = hash_password(password) if password else None


def authenticate(user: User, password: str) -> bool:
    """Return True if password is correct for this user.

    A user without a credential accepts only the empty password.
    """
    if user.credential is None:
        return password == ""
    return verify_password(password, user.credential)
