"""
tests/test_health.py -- Integration tests for GET /api/v1/health.

Covers:
  - 200 response with status and version fields on both apps
  - No authentication required, even with bad credentials attached
"""

from __future__ import annotations


def test_health_returns_200(api_client):
    resp = api_client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert "version" in data


def test_admin_health_returns_200(admin_client):
    resp = admin_client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_health_no_auth_required(api_client, basic_auth):
    """Health endpoint ignores credentials entirely."""
    resp = api_client.get("/api/v1/health", headers=basic_auth("alice", "wrong"))
    assert resp.status_code == 200
