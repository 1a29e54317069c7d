"""Tests for liveness and readiness endpoints, and the correlation id header."""

import uuid

import pytest

from serious_people.core.config import get_settings
from serious_people.db import close_redis
from serious_people.main import validate_settings

pytestmark = pytest.mark.integration


async def test_health(client):
    response = await client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_health_503_while_shutting_down(app, client):
    app.state.shutting_down = True
    response = await client.get("/api/health")
    assert response.status_code == 503
    assert response.json()["status"] == "shutting_down"


async def test_ready_with_database_and_redis(client):
    response = await client.get("/api/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready", "checks": {"database": True, "redis": True}}


async def test_response_includes_correlation_id(client):
    response = await client.get("/api/health")
    uuid.UUID(response.headers["x-request-id"])


async def test_custom_correlation_id_echoed(client):
    response = await client.get("/api/health", headers={"X-Request-ID": "custom-id-123"})
    assert response.headers["x-request-id"] == "custom-id-123"


async def test_error_response_includes_debug_id(client):
    response = await client.get("/api/journey")

    assert response.status_code == 401
    body = response.json()
    uuid.UUID(body["debug_id"])
    assert "traceback" not in response.text.lower()


async def test_ready_degraded_without_redis(client):
    await close_redis()

    response = await client.get("/api/ready")

    assert response.status_code == 503
    assert response.json() == {"status": "degraded", "checks": {"database": True, "redis": False}}


async def test_oversized_correlation_id_replaced(client):
    response = await client.get("/api/health", headers={"X-Request-ID": "x" * 500})
    uuid.UUID(response.headers["x-request-id"])


def test_startup_requires_secrets(monkeypatch):
    settings = get_settings()
    monkeypatch.setattr(settings, "auth_jwt_secret", "")
    monkeypatch.setattr(settings, "anthropic_api_key", "")
    monkeypatch.setattr(settings, "debug", False)

    with pytest.raises(RuntimeError, match="AUTH_JWT_SECRET.*ANTHROPIC_API_KEY"):
        validate_settings()
