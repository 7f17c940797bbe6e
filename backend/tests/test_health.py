from __future__ import annotations

from redis.exceptions import ConnectionError as RedisConnectionError

from inventory_api.api.routers import health


class _UnreachableRedis:
    def ping(self):
        raise RedisConnectionError("connection refused")


def test_live(client):
    response = client.get("/health/live")

    assert response.status_code == 200
    assert response.json()["status"] == "alive"


def test_health_reports_database_and_version(client):
    body = client.get("/health").json()

    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert body["version"] == "1.0.0"
    assert body["uptime"] >= 0


def test_ready_survives_redis_outage(client, monkeypatch):
    monkeypatch.setattr(health, "get_redis", lambda: _UnreachableRedis())

    response = client.get("/health/ready")

    assert response.status_code == 200
    checks = response.json()["checks"]
    assert checks["database"]["status"] == "healthy"
    assert checks["redis"]["status"] == "unhealthy"


def test_ready_fails_without_database(client, monkeypatch):
    monkeypatch.setattr(health, "_database_state", lambda: "disconnected")
    monkeypatch.setattr(health, "get_redis", lambda: _UnreachableRedis())

    response = client.get("/health/ready")

    assert response.status_code == 503
    assert response.json()["message"] == "Database not connected"
