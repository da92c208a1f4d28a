import pytest
import httpx

from app.core.config import settings


def test_root_banner(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "active"


def test_health_check_sync(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["services"] == {
        "database": "connected",
        "directory": "connected",
        "socketio": "running",
    }


def test_health_reports_directory_outage(client, directory):
    directory.available = False
    body = client.get("/api/health").json()
    assert body["services"]["directory"] == "disconnected"
    assert body["services"]["database"] == "connected"


def test_health_reports_directory_error(client, directory):
    directory.failure = "500 from chroma"
    body = client.get("/api/health").json()
    assert body["services"]["directory"] == "error"


@pytest.mark.asyncio
async def test_health_check_async(overrides):
    transport = httpx.ASGITransport(app=overrides)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/api/health")
    assert response.status_code == 200


def test_stats_counts_by_status(client):
    client.post("/api/projects", json={"name": "Alpha", "status": "active"})
    client.post("/api/projects", json={"name": "Beta"})
    client.post("/api/agents", json={"agentId": "A-1", "name": "A", "type": "qa", "status": "online"})
    client.post("/api/agents", json={"agentId": "B-1", "name": "B", "type": "qa"})

    body = client.get("/api/stats").json()

    assert body["projects"]["total"] == 2
    assert body["projects"]["active"] == 1
    assert body["projects"]["byStatus"]["planning"] == 1
    assert body["projects"]["byStatus"]["cancelled"] == 0
    assert body["agents"] == {
        "total": 2,
        "online": 1,
        "byStatus": {"online": 1, "offline": 1, "busy": 0, "error": 0},
    }
    assert body["directory"] == {"collections": 2, "status": "connected"}
    assert body["system"]["uptime"] >= 0
    assert body["system"]["memory"]["rss"] > 0


def test_stats_degrade_without_directory(client, directory):
    directory.available = False
    response = client.get("/api/stats")
    assert response.status_code == 200
    assert response.json()["directory"] == {"collections": 0, "status": "disconnected"}


def test_unknown_route_is_404(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert "error" in response.json()


def test_unexpected_error_echoes_message_in_development(overrides, monkeypatch):
    from unittest.mock import patch
    from fastapi.testclient import TestClient

    monkeypatch.setattr(settings, "ENVIRONMENT", "development")
    client = TestClient(overrides, raise_server_exceptions=False)
    with patch("app.api.endpoints.project_service.list_projects", side_effect=RuntimeError("store exploded")):
        response = client.get("/api/projects")

    assert response.status_code == 500
    assert response.json() == {"message": "Something went wrong!", "error": "store exploded"}


def test_unexpected_error_hides_message_in_production(overrides, monkeypatch):
    from unittest.mock import patch
    from fastapi.testclient import TestClient

    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    client = TestClient(overrides, raise_server_exceptions=False)
    with patch("app.api.endpoints.project_service.list_projects", side_effect=RuntimeError("store exploded")):
        response = client.get("/api/projects")

    assert response.status_code == 500
    assert response.json() == {"message": "Something went wrong!", "error": {}}
