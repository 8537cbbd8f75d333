"""Tests for HTTP endpoints that do not need a running job."""
import pytest
from fastapi.testclient import TestClient

from reelgen.api import routes
from reelgen.main import app


@pytest.fixture
def client():
    # No context manager: lifespan (database, job handlers) is not needed here
    return TestClient(app)


def test_root(client):
    data = client.get("/").json()
    assert data["api"] == "/api"
    assert "version" in data


class TestHealth:

    def test_healthy(self, client, monkeypatch):
        monkeypatch.setattr(routes, "check_ffmpeg_available", lambda: True)
        monkeypatch.setattr(routes, "check_ffprobe_available", lambda: True)

        data = client.get("/api/health").json()
        assert data["status"] == "healthy"
        assert data["message"] is None

    def test_degraded_without_ffmpeg(self, client, monkeypatch):
        monkeypatch.setattr(routes, "check_ffmpeg_available", lambda: False)
        monkeypatch.setattr(routes, "check_ffprobe_available", lambda: True)

        data = client.get("/api/health").json()
        assert data["status"] == "degraded"
        assert data["ffmpeg_available"] is False
        assert "placeholder" in data["message"]


class TestCreateReel:
    """Input errors are rejected before a job is created."""

    def test_empty_highlights(self, client, recording):
        response = client.post("/api/reels", json={
            "meeting_id": "m1",
            "source_path": str(recording),
            "highlights": [],
        })
        assert response.status_code == 400
        assert "No highlight" in response.json()["detail"]

    def test_missing_source(self, client, tmp_path):
        response = client.post("/api/reels", json={
            "meeting_id": "m1",
            "source_path": str(tmp_path / "missing.mp4"),
            "highlights": [{"id": "h1", "timestamp": 1000, "type": "decision"}],
        })
        assert response.status_code == 400
        assert "not found" in response.json()["detail"]

    def test_unknown_highlight_type(self, client, recording):
        response = client.post("/api/reels", json={
            "meeting_id": "m1",
            "source_path": str(recording),
            "highlights": [{"id": "h1", "timestamp": 1000, "type": "gossip"}],
        })
        assert response.status_code == 422

    def test_negative_timestamp(self, client, recording):
        response = client.post("/api/reels", json={
            "meeting_id": "m1",
            "source_path": str(recording),
            "highlights": [{"id": "h1", "timestamp": -5}],
        })
        assert response.status_code == 422
