"""
auth/models.py -- Domain dataclasses for identity entities.

Pattern: Data class (pure data container, no policy). auth/credentials.py
validates and authenticates, auth/channels.py decides access, and
auth/authenticator.py persists. The only code here is the mapping between a
User and the JSON document body stored under its key.

Layer rule: no imports from api/ or store/.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

# Channel name that means "all channels", both as a requested channel and as
# an entitlement.
WILDCARD = "*"

# A document's channel history: channel name -> removal marker. None (or "")
# means the document is currently in that channel; anything else records a
# past removal.
ChannelMap = Mapping[str, Optional[str]]


@dataclass
class User:
    """A user identity and its channel entitlements.

    name "" is the anonymous/guest identity and never has a credential; every
    named user must have one. credential is an opaque bcrypt hash.

    channels keeps its stored order: authorize_any_doc_channels() walks it in
    that order.

    password is a transient, write-only plaintext supplied on create/update.
    Authenticator.save_user() hashes it into credential and clears it; it is
    never persisted or returned.
    """

    name: str
    channels: list[str] = field(default_factory=list)
    credential: str | None = None
    password: str | None = field(default=None, repr=False)


def user_to_doc(user: User) -> dict[str, Any]:
    """Serialize a User to its stored document body.

    credential is omitted when absent; channels is always present. The
    transient password is never written.
    """
    doc: dict[str, Any] = {"name": user.name}
    if user.credential is not None:
        doc["credential"] = user.credential
    doc["channels"] = list(user.channels)
    return doc


def user_from_doc(doc: Mapping[str, Any]) -> User:
    """Build a User from a stored document or an incoming payload.

    A "password" field is accepted so callers can submit a plaintext password
    alongside the other fields. A missing or null channels field becomes [].
    """
    return User(
        name=doc.get("name") or "",
        credential=doc.get("credential"),
        channels=list(doc.get("channels") or []),
        password=doc.get("password"),
    )
