"""FastAPI dependency injection providers.

Shared instances are created lazily on first use and handed to endpoints
through ``Depends()``; tests replace them with ``app.dependency_overrides``.
"""

from typing import Optional

from .audio.transcoder import FFmpegTranscoder
from .config.loader import load_config
from .config.settings import Settings
from .core.pipeline import TranscriptionPipeline
from .models.whisper_engine import WhisperEngine
from .utils.logging import get_logger

logger = get_logger(__name__)


# Global singletons (initialized once)
_settings: Optional[Settings] = None
_pipeline: Optional[TranscriptionPipeline] = None


def configure(settings: Settings) -> None:
    """Install the settings used by every provider and drop cached instances."""
    global _settings, _pipeline
    _settings = settings
    _pipeline = None


def get_settings() -> Settings:
    """Get application settings.

    Returns:
        Settings installed by the application factory, else loaded from config.toml
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def build_transcoder(settings: Settings) -> FFmpegTranscoder:
    return FFmpegTranscoder(
        ffmpeg_bin=settings.transcoder.ffmpeg_bin,
        timeout=settings.transcoder.timeout,
    )


def build_pipeline(settings: Settings) -> TranscriptionPipeline:
    """Wire a pipeline from configuration."""
    engine = WhisperEngine(
        model_path=settings.model.path,
        language=settings.model.language,
        n_threads=settings.model.n_threads,
    )
    return TranscriptionPipeline(
        transcoder=build_transcoder(settings),
        engine=engine,
        scratch_dir=settings.storage.scratch_dir,
        file_prefix=settings.storage.file_prefix,
    )


def get_pipeline() -> TranscriptionPipeline:
    """Get or create the transcription pipeline (singleton).

    The pipeline keeps no per-request state, so one instance serves
    concurrent requests.
    """
    global _pipeline
    if _pipeline is None:
        settings = get_settings()
        logger.info(f"Initializing transcription pipeline with model {settings.model.path}")
        _pipeline = build_pipeline(settings)
    return _pipeline
