"""
store/documents.py -- Key/value document stores that hold identity records.

The Authenticator only needs get / set / delete by string key, so any object
with that shape works. Two implementations ship here:

  SQLDocumentStore    -- SQLAlchemy Core, one row per document. SQLite by
                         default; any SQLAlchemy URL works (PostgreSQL is a
                         connection string change, not a rewrite).
  MemoryDocumentStore -- dict-backed, for tests and embedding.

Contract shared by both:
  get(key)     -> dict, raises NotFoundError if the key is absent
  set(key, d)  -> blind overwrite (last writer wins, no compare-and-swap)
  delete(key)  -> raises NotFoundError if the key is absent
  keys(prefix) -> sorted keys starting with prefix
Backend failures are raised as StoreError chained to the original exception.

Usage:
    store = SQLDocumentStore()                          # settings.store_url
    store = SQLDocumentStore("postgresql://u:pw@host/db")
    store.set("user:bob", {"name": "bob", "channels": []})
    doc = store.get("user:bob")
    store.close()

Security: all queries use bound parameters. No f-strings in SQL.

Layer rule: no imports from api/ or auth/.
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from typing import Any, Optional

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.config import get_settings
from core.errors import NotFoundError, StoreError

logger = logging.getLogger("channelsync.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_documents = Table(
    "documents",
    _metadata,
    Column("key", String(255), primary_key=True),
    Column("body", Text, nullable=False),  # JSON object serialized as text
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers do not block during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _prefix_upper_bound(prefix: str) -> Optional[str]:
    """Return the smallest string greater than every string starting with prefix.

    Used for a range scan instead of LIKE, which would treat "_" and "%" in the
    prefix as wildcards. Code point order matches the binary UTF-8 order SQLite
    uses. None means there is no upper bound.
    """
    stripped = prefix.rstrip(chr(sys.maxunicode))
    if not stripped:
        return None
    next_point = ord(stripped[-1]) + 1
    if 0xD800 <= next_point <= 0xDFFF:
        # Surrogates cannot be encoded; the next encodable code point follows them.
        next_point = 0xE000
    return stripped[:-1] + chr(next_point)


# ---------------------------------------------------------------------------
# SQL-backed store
# ---------------------------------------------------------------------------


class SQLDocumentStore:
    """Document store on a single SQL table keyed by document ID."""

    def __init__(self, db_url: Optional[str] = None) -> None:
        db_url = db_url or get_settings().store_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            # FastAPI runs sync handlers in a thread pool that shares this store.
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def get(self, key: str) -> dict[str, Any]:
        """Return the document stored under key. Raises NotFoundError if absent."""
        try:
            with self.engine.connect() as conn:
                row = conn.execute(select(_documents.c.body).where(_documents.c.key == key)).fetchone()
        except SQLAlchemyError as exc:
            logger.warning("Store read failed for %s: %s", key, exc)
            raise StoreError(f"Could not read document {key!r}") from exc
        if row is None:
            raise NotFoundError(f"No document with key {key!r}")
        return json.loads(row.body)

    def set(self, key: str, doc: dict[str, Any]) -> None:
        """Store doc under key, replacing any existing document.

        Update first, insert if nothing was updated, both in one transaction.
        Two concurrent first-time writes of the same key can still race; the
        loser gets a StoreError from the primary key constraint.
        """
        body = json.dumps(doc)
        try:
            with self.engine.begin() as conn:
                result = conn.execute(_documents.update().where(_documents.c.key == key).values(body=body))
                if result.rowcount == 0:
                    conn.execute(_documents.insert().values(key=key, body=body))
        except SQLAlchemyError as exc:
            logger.warning("Store write failed for %s: %s", key, exc)
            raise StoreError(f"Could not write document {key!r}") from exc

    def delete(self, key: str) -> None:
        """Delete the document under key. Raises NotFoundError if absent."""
        try:
            with self.engine.connect() as conn:
                result = conn.execute(_documents.delete().where(_documents.c.key == key))
                conn.commit()
        except SQLAlchemyError as exc:
            logger.warning("Store delete failed for %s: %s", key, exc)
            raise StoreError(f"Could not delete document {key!r}") from exc
        if result.rowcount == 0:
            raise NotFoundError(f"No document with key {key!r}")

    def keys(self, prefix: str = "") -> list[str]:
        """Return all keys starting with prefix, sorted."""
        try:
            with self.engine.connect() as conn:
                query = select(_documents.c.key).order_by(_documents.c.key)
                if prefix:
                    query = query.where(_documents.c.key >= prefix)
                    upper = _prefix_upper_bound(prefix)
                    if upper is not None:
                        query = query.where(_documents.c.key < upper)
                return list(conn.execute(query).scalars().all())
        except SQLAlchemyError as exc:
            logger.warning("Store key scan failed: %s", exc)
            raise StoreError("Could not list documents") from exc

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class MemoryDocumentStore:
    """Dict-backed document store.

    Documents are kept JSON-encoded so a caller mutating a returned dict (or
    the dict it passed to set()) never changes what is stored, matching the
    SQL store's copy semantics.
    """

    def __init__(self) -> None:
        self._docs: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> dict[str, Any]:
        with self._lock:
            body = self._docs.get(key)
        if body is None:
            raise NotFoundError(f"No document with key {key!r}")
        return json.loads(body)

    def set(self, key: str, doc: dict[str, Any]) -> None:
        body = json.dumps(doc)
        with self._lock:
            self._docs[key] = body

    def delete(self, key: str) -> None:
        with self._lock:
            if self._docs.pop(key, None) is None:
                raise NotFoundError(f"No document with key {key!r}")

    def keys(self, prefix: str = "") -> list[str]:
        with self._lock:
            return sorted(k for k in self._docs if k.startswith(prefix))

    def close(self) -> None:
        with self._lock:
            self._docs.clear()
