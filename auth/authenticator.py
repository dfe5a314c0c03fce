"""
auth/authenticator.py -- Identity store façade.

Pattern: Repository. Authenticator owns the mapping between user names and
document keys in the backing store, applies the guest-user default, and
composes authentication (lookup + credential check). Route and CLI code never
touch the store directly for user records.

The store is any object with get / set / delete / keys (see
store/documents.py). It is passed in at construction; there is no
process-wide store handle.

Saves are blind overwrites: two concurrent saves of the same name race and
the last writer wins.

Layer rule: no imports from api/. The store is injected, not imported.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from auth.credentials import authenticate, set_password, validate_user
from auth.models import WILDCARD, User, user_from_doc, user_to_doc
from auth.passwords import DUMMY_HASH, verify_password
from core.errors import HTTPError, NotFoundError

logger = logging.getLogger("channelsync.auth")

DEFAULT_KEY_PREFIX = "user:"


class DocumentStore(Protocol):
    def get(self, key: str) -> dict[str, Any]: ...

    def set(self, key: str, doc: dict[str, Any]) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self, prefix: str = "") -> list[str]: ...


class Authenticator:
    """Looks up, saves, deletes, and authenticates users in a document store.

    Usage:
        auth = Authenticator(MemoryDocumentStore())
        auth.save_user(new_user("bob", "secret", ["news"]))
        user = auth.authenticate_user("bob", "secret")   # User or None
    """

    def __init__(self, store: DocumentStore, key_prefix: str = DEFAULT_KEY_PREFIX) -> None:
        self.store = store
        self.key_prefix = key_prefix

    def doc_id_for_user(self, name: str) -> str:
        return self.key_prefix + name

    def get_user(self, name: str) -> User:
        """Return the user stored under name.

        If name is "" and no guest record was ever saved, returns the default
        guest with access to every channel (admin party) without writing it.
        Saving a guest record with a narrower channel list replaces the
        default. Raises NotFoundError for any other missing user; StoreError
        propagates unchanged.
        """
        try:
            doc = self.store.get(self.doc_id_for_user(name))
        except NotFoundError:
            if name == "":
                logger.debug("No guest record; using the all-access default")
                return User(name="", channels=[WILDCARD])
            raise
        user = user_from_doc(doc)
        # A stored document never carries a plaintext password.
        user.password = None
        return user

    def save_user(self, user: User) -> None:
        """Hash any pending password, validate, and write the user record.

        Raises ValidationError without touching the store if the user is
        invalid. The pending password is consumed even when validation fails.
        """
        if user.password is not None:
            set_password(user, user.password)
            user.password = None
        validate_user(user)
        self.store.set(self.doc_id_for_user(user.name), user_to_doc(user))
        logger.info("Saved user %r (%d channels)", user.name, len(user.channels))

    def delete_user(self, name: str) -> None:
        """Delete the user record. Whatever the store raises (e.g. NotFoundError) propagates."""
        self.store.delete(self.doc_id_for_user(name))
        logger.info("Deleted user %r", name)

    def authenticate_user(self, name: str, password: str) -> User | None:
        """Return the user if name and password are valid, else None.

        Unknown user, store failure, and wrong password all return None so
        callers cannot tell them apart. When the lookup fails, bcrypt still
        runs against a dummy hash so response time does not reveal whether
        the name exists.
        """
        try:
            user = self.get_user(name)
        except HTTPError as exc:
            verify_password(password, DUMMY_HASH)
            logger.info("Authentication failed for %r", name)
            logger.debug("Lookup error during authentication: %r", exc)
            return None
        if not authenticate(user, password):
            logger.info("Authentication failed for %r", name)
            return None
        return user

    def list_users(self) -> list[str]:
        """Return the names of all persisted users, sorted. The synthesized guest is not listed."""
        prefix_len = len(self.key_prefix)
        return [key[prefix_len:] for key in self.store.keys(self.key_prefix)]
