"""
auth/channels.py -- Channel authorization decisions.

Pure functions over (user, channel | channels | channel map). Nothing here
touches storage or caches a result, so every function is safe to call from
any number of threads.

A user of None means access control is disabled ("admin party"): every
entry point checks for it first and allows the request.

The can_see_* family returns booleans and never raises. The authorize_*
family raises an AuthorizationError whose flavor depends on who is asking:
the guest gets AuthenticationRequired (401) because logging in might help,
a named user gets Forbidden (403).

Layer rule: no imports from api/ or store/.
"""

from __future__ import annotations

from typing import Optional, Sequence

from auth.models import WILDCARD, ChannelMap, User
from core.errors import AuthenticationRequired, AuthorizationError, Forbidden

_GENERIC_DENIAL = "You are not allowed to see this"


def unauthorized_error(user: User, message: str, channels: Sequence[str] | None = None) -> AuthorizationError:
    """Return the error to raise when user fails an authorization check."""
    if user.name == "":
        return AuthenticationRequired("login required", channels=list(channels or []))
    return Forbidden(message, channels=list(channels or []))


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def can_see_channel(user: Optional[User], channel: str) -> bool:
    """Return True if user may access channel."""
    if user is None:
        return True
    return channel == WILDCARD or channel in user.channels or WILDCARD in user.channels


def can_see_all_channels(user: Optional[User], channels: Optional[Sequence[str]]) -> bool:
    """Return True if user may access every channel. An empty list is always allowed."""
    if user is None or not channels:
        return True
    return all(can_see_channel(user, channel) for channel in channels)


def can_see_any_channels(user: Optional[User], channels: Optional[Sequence[str]]) -> bool:
    """Return True if user may access at least one of channels.

    A user holding the wildcard passes even when channels is empty or none of
    them match. That fallback needs a concrete user: calling with user=None
    and no channels raises TypeError, so callers running with access control
    disabled must short-circuit before getting here.
    """
    if channels:
        for channel in channels:
            if can_see_channel(user, channel):
                return True
    if user is None:
        raise TypeError("can_see_any_channels() fallback requires a concrete user")
    return WILDCARD in user.channels


# ---------------------------------------------------------------------------
# Enforcement
# ---------------------------------------------------------------------------


def authorize_all_channels(user: Optional[User], channels: Optional[Sequence[str]]) -> None:
    """Raise unless user may access every channel; the error names the denied ones."""
    if user is None or not channels:
        return
    forbidden = [channel for channel in channels if not can_see_channel(user, channel)]
    if forbidden:
        raise unauthorized_error(user, f"You are not allowed to see channels {forbidden}", channels=forbidden)


def authorize_any_channels(user: Optional[User], channels: Optional[Sequence[str]]) -> None:
    """Raise unless user may access at least one of channels."""
    if not can_see_any_channels(user, channels):
        # can_see_any_channels() only returns False for a concrete user.
        raise unauthorized_error(user, _GENERIC_DENIAL)  # type: ignore[arg-type]


def authorize_any_doc_channels(user: Optional[User], doc_channels: ChannelMap) -> None:
    """Raise unless the document is currently in at least one of user's channels.

    user.channels is walked in stored order. The wildcard entitlement allows
    immediately. A channel the document was removed from (non-empty marker)
    does not count. A user with no channels is always denied.
    """
    if user is None:
        return
    for channel in user.channels:
        if channel == WILDCARD:
            return
        if channel in doc_channels and not doc_channels[channel]:
            return
    raise unauthorized_error(user, _GENERIC_DENIAL)
