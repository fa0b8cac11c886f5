"""Testes dos endpoints de liveness/readiness."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnError

import api.routes.health.router as health_module
from app.app import create_app
from config.settings import StoreSettings


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


def _use_redis_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        health_module, "get_store_settings", lambda: StoreSettings(backend="redis")
    )


class TestHealth:
    def test_liveness(self, client: TestClient) -> None:
        response = client.get("/health")

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert body["service"] == "booking-core"
        assert body["version"] == "0.1.0"

    def test_ready_with_memory_backend_is_degraded(self, client: TestClient) -> None:
        response = client.get("/ready")

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "ready"
        assert body["checks"]["redis"] == {
            "status": "degraded",
            "latency_ms": None,
            "error": "memory_backend",
        }

    def test_ready_with_redis_ok(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _use_redis_backend(monkeypatch)
        redis = MagicMock()
        redis.ping = AsyncMock(return_value=True)
        client.app.state.redis_client = redis

        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["checks"]["redis"]["status"] == "ok"
        redis.ping.assert_awaited_once()

    def test_ready_with_redis_down(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _use_redis_backend(monkeypatch)
        redis = MagicMock()
        redis.ping = AsyncMock(side_effect=RedisConnError("down"))
        client.app.state.redis_client = redis

        response = client.get("/ready")

        body = response.json()
        assert response.status_code == 503
        assert body["status"] == "not_ready"
        assert body["checks"]["redis"]["error"] == "ConnectionError"

    def test_ready_without_redis_client(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _use_redis_backend(monkeypatch)
        client.app.state.redis_client = None

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["checks"]["redis"]["error"] == "not_configured"
