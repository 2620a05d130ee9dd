"""Configuration settings for the whisper transcription service."""

import tempfile
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ModelConfig(BaseSettings):
    """Model configuration settings."""

    name: str = "ggml-base.en.bin"
    cache_dir: Path = Path("models")
    download_base_url: str = "https://huggingface.co/ggerganov/whisper.cpp/resolve/main"
    auto_download: bool = True
    language: str = "en"
    n_threads: int = Field(default=4, ge=1)

    model_config = SettingsConfigDict(env_prefix="WHISPER_MODEL_")

    @field_validator("cache_dir", mode="before")
    @classmethod
    def validate_cache_dir(cls, v):
        if isinstance(v, str):
            return Path(v)
        return v

    @property
    def path(self) -> Path:
        """Full path of the GGML model file."""
        return self.cache_dir / self.name

    @property
    def download_url(self) -> str:
        return f"{self.download_base_url.rstrip('/')}/{self.name}"


class TranscoderConfig(BaseSettings):
    """ffmpeg invocation settings."""

    ffmpeg_bin: str = "ffmpeg"
    timeout: Optional[float] = Field(default=None, gt=0)

    model_config = SettingsConfigDict(env_prefix="WHISPER_TRANSCODER_")


class StorageConfig(BaseSettings):
    """Scratch storage for per-request audio artifacts."""

    scratch_dir: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))
    file_prefix: str = "audio_"

    model_config = SettingsConfigDict(env_prefix="WHISPER_STORAGE_")

    @field_validator("scratch_dir", mode="before")
    @classmethod
    def validate_scratch_dir(cls, v):
        if isinstance(v, str):
            return Path(v)
        return v


class APIConfig(BaseSettings):
    """API configuration settings."""

    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    model_config = SettingsConfigDict(env_prefix="WHISPER_API_")


class Settings(BaseSettings):
    """Main application settings."""

    app_name: str = "Whisper Transcription Service"
    environment: str = "production"
    log_level: str = "INFO"
    log_format: Literal["text", "json"] = "text"

    model: ModelConfig = Field(default_factory=ModelConfig)
    transcoder: TranscoderConfig = Field(default_factory=TranscoderConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    api: APIConfig = Field(default_factory=APIConfig)

    model_config = SettingsConfigDict(
        env_prefix="WHISPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Nested tables of the TOML file and the settings class each maps to
NESTED_SECTIONS = {
    "model": ModelConfig,
    "transcoder": TranscoderConfig,
    "storage": StorageConfig,
    "api": APIConfig,
}
