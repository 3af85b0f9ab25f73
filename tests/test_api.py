"""Tests for the HTTP endpoints."""
import pytest
from fastapi.testclient import TestClient

from recordflow.main import app


@pytest.fixture
def client():
    return TestClient(app)


def test_root_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "UP", "service": "recordflow"}


def test_prefixed_health_and_info(client):
    assert client.get("/api/recordflow/health").json()["status"] == "UP"

    info = client.get("/api/recordflow/info").json()
    assert info["version"] == "0.1.0"
    assert "Admin" in info["recognition"]["modules"]


def test_convert_endpoint(client, login_recording):
    response = client.post("/api/recordflow/convert", json={"source": login_recording})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["summary"] == {
        "actions": 5,
        "patterns": 1,
        "pageGroupings": 1,
        "navigationLinks": 0,
        "omissions": 0,
    }
    assert "actions" not in body["result"]
    assert body["result"]["architecture"]["pageGroupings"][0]["module"] == "Login"


def test_convert_endpoint_with_actions(client, navigation_recording):
    response = client.post(
        "/api/recordflow/convert",
        json={"source": navigation_recording, "includeActions": True},
    )

    body = response.json()
    assert body["summary"]["navigationLinks"] == 2
    assert len(body["result"]["actions"]) == 8
    assert body["result"]["contexts"]["1"]["module"] == "Admin"


def test_convert_rejects_malformed_recording(client):
    response = client.post("/api/recordflow/convert", json={"source": "await page.click("})

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["line"] >= 1
    assert detail["message"]


def test_validate_endpoint(client, login_recording):
    ok = client.post("/api/recordflow/validate", json={"source": login_recording}).json()
    assert ok == {"valid": True, "actionCount": 5, "errors": []}

    bad = client.post("/api/recordflow/validate", json={"source": "await page.click("}).json()
    assert bad["valid"] is False


def test_oversized_recording_is_rejected(client, monkeypatch, login_recording):
    from recordflow.config import settings

    monkeypatch.setattr(settings, "MAX_SOURCE_LENGTH", 10)
    response = client.post("/api/recordflow/convert", json={"source": login_recording})

    assert response.status_code == 413


def test_parse_error_detail_fields(client):
    response = client.post("/api/recordflow/convert", json={"source": "await page.click("})

    assert set(response.json()["detail"]) == {"message", "line", "column"}
