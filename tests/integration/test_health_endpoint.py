"""Integration tests for health endpoints."""

from unittest.mock import Mock, patch

import pytest


@pytest.fixture
def ffmpeg_available():
    transcoder = Mock()
    transcoder.is_available.return_value = True
    with patch("whisper_transcribe.api.health.build_transcoder", return_value=transcoder):
        yield transcoder


def test_health_endpoint_returns_200(test_client):
    """Test that health endpoint returns 200 status."""
    response = test_client.get("/health")
    assert response.status_code == 200


def test_health_endpoint_has_status_field(test_client):
    """Test that health endpoint includes status field."""
    response = test_client.get("/health")
    assert response.json() == {"status": "ok"}


def test_ready_when_prerequisites_present(test_client, ffmpeg_available):
    response = test_client.get("/health/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ready", "checks": {"model": "ok", "ffmpeg": "ok"}}


def test_degraded_without_ffmpeg(test_client, ffmpeg_available):
    ffmpeg_available.is_available.return_value = False

    data = test_client.get("/health/ready").json()

    assert data["status"] == "degraded"
    assert data["checks"]["ffmpeg"] == "missing"


def test_degraded_without_model(test_client, model_file, ffmpeg_available):
    model_file.unlink()

    data = test_client.get("/health/ready").json()

    assert data["status"] == "degraded"
    assert data["checks"]["model"] == "missing"
