"""
tests/conftest.py -- Shared test fixtures for channelsync.

This module provides:
  - store / authenticator: fresh in-memory identity store per test
  - _patch_lifespan(): wires a test Authenticator into app.state, bypassing
    the real SQLite startup
  - api_client: TestClient for the public app
  - admin_client: TestClient for the admin app, sharing the same store

BCRYPT_ROUNDS is lowered before any auth/core import so password hashing
stays fast; get_settings() is cached on first use.
"""

from __future__ import annotations

import base64
import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set before any auth/core import -- get_settings() is lru_cached
# and auth.passwords hashes its dummy password at import time.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import admin_app, app
from auth.authenticator import Authenticator
from auth.credentials import new_user
from store.documents import MemoryDocumentStore

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def authenticator(store: MemoryDocumentStore) -> Authenticator:
    return Authenticator(store)


def _basic_auth(name: str, password: str) -> dict[str, str]:
    token = base64.b64encode(f"{name}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def basic_auth():
    """Return a helper building an HTTP Basic Authorization header dict."""
    return _basic_auth


def _patch_lifespan(authenticator: Authenticator):
    """Return an async context manager that replaces the real lifespan.

    The test Authenticator (backed by a MemoryDocumentStore) lands on
    app.state exactly where the real lifespan would put the SQL-backed one.
    """

    @asynccontextmanager
    async def test_lifespan(application):
        application.state.store = authenticator.store
        application.state.authenticator = authenticator
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def seeded_authenticator(authenticator: Authenticator) -> Authenticator:
    """Authenticator with a few users already saved.

      alice -- channels news, sports
      bob   -- wildcard
      carol -- no channels
    """
    authenticator.save_user(new_user("alice", "alicepass", ["news", "sports"]))
    authenticator.save_user(new_user("bob", "bobpass", ["*"]))
    authenticator.save_user(new_user("carol", "carolpass", []))
    return authenticator


@pytest.fixture
def api_client(seeded_authenticator: Authenticator) -> Generator[TestClient, None, None]:
    app.router.lifespan_context = _patch_lifespan(seeded_authenticator)
    with TestClient(app, raise_server_exceptions=True) as client:
        yield client


@pytest.fixture
def admin_client(seeded_authenticator: Authenticator) -> Generator[TestClient, None, None]:
    admin_app.router.lifespan_context = _patch_lifespan(seeded_authenticator)
    with TestClient(admin_app, raise_server_exceptions=True) as client:
        yield client
