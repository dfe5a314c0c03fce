"""
auth/dependencies.py -- FastAPI Depends() helpers for resolving the caller's identity.

Identity comes from an HTTP Basic Authorization header checked by
Authenticator.authenticate_user(). A request without the header acts as the
guest (name "", empty password), whose channels are whatever the guest record
grants (all channels until a restricted guest record is saved).

When access control is disabled in settings, get_current_user() yields None:
the absent user, which every check in auth/channels.py allows.

Layer rule: no imports from api/ or store/.
  auth/dependencies.py may import from fastapi (for Request/HTTPException)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import base64
import binascii

from fastapi import Request

from auth.authenticator import Authenticator
from auth.models import User
from core.config import get_settings
from core.errors import AuthenticationRequired


def _parse_basic_auth(header: str) -> tuple[str, str] | None:
    """Return (name, password) from a Basic Authorization header, or None if malformed."""
    scheme, _, encoded = header.partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return None
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    name, sep, password = decoded.partition(":")
    if not sep:
        return None
    return name, password


def try_get_current_user(request: Request) -> User | None:
    """Resolve the request's identity. Returns None on bad credentials.

    Never raises for credential problems -- callers that need a hard 401 use
    get_current_user().
    """
    authenticator: Authenticator = request.app.state.authenticator
    header = request.headers.get("Authorization", "")
    if not header:
        return authenticator.authenticate_user("", "")
    creds = _parse_basic_auth(header)
    if creds is None:
        return None
    return authenticator.authenticate_user(*creds)


def get_current_user(request: Request) -> User | None:
    """Require a resolvable identity. Raises AuthenticationRequired (401) otherwise.

    Returns None (the absent user) when access control is disabled.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: User | None = Depends(get_current_user)): ...
    """
    if not get_settings().access_control_enabled:
        return None
    user = try_get_current_user(request)
    if user is None:
        raise AuthenticationRequired("Invalid login")
    return user
