"""Shared pytest fixtures for whisper-transcribe tests."""

import pytest
from fastapi.testclient import TestClient

from whisper_transcribe.config.settings import (
    APIConfig,
    ModelConfig,
    Settings,
    StorageConfig,
    TranscoderConfig,
)
from whisper_transcribe.core.pipeline import TranscriptionPipeline
from whisper_transcribe.models.whisper_engine import WhisperEngine

from .helpers import CopyTranscoder, FakeHandleFactory


@pytest.fixture
def model_file(tmp_path):
    """An empty stand-in for the GGML model file."""
    path = tmp_path / "models" / "ggml-test.bin"
    path.parent.mkdir()
    path.write_bytes(b"ggml")
    return path


@pytest.fixture
def scratch_dir(tmp_path):
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def handle_factory():
    return FakeHandleFactory()


@pytest.fixture
def engine(model_file, handle_factory):
    return WhisperEngine(model_file, handle_factory=handle_factory)


@pytest.fixture
def pipeline(engine, scratch_dir):
    return TranscriptionPipeline(CopyTranscoder(), engine, scratch_dir)


@pytest.fixture
def mock_settings(tmp_path, model_file, scratch_dir):
    """Return settings pointing at temporary directories."""
    return Settings(
        log_level="WARNING",
        model=ModelConfig(
            name=model_file.name,
            cache_dir=model_file.parent,
            auto_download=False,
        ),
        transcoder=TranscoderConfig(ffmpeg_bin="ffmpeg"),
        storage=StorageConfig(scratch_dir=scratch_dir),
        api=APIConfig(host="127.0.0.1", port=8080),
    )


@pytest.fixture
def app(mock_settings, pipeline):
    from whisper_transcribe.dependencies import get_pipeline
    from whisper_transcribe.main import create_app

    app = create_app(settings=mock_settings)
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    return app


@pytest.fixture
def test_client(app):
    """Return FastAPI test client."""
    return TestClient(app)
