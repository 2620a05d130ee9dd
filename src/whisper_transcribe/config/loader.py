"""Configuration loader with TOML support and environment variable overrides."""

import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

from .settings import NESTED_SECTIONS, Settings

CONFIG_ENV_VAR = "WHISPER_TRANSCRIBE_CONFIG"


class ConfigError(Exception):
    """Raised when the configuration file cannot be parsed."""


class ConfigLoader:
    """Load configuration from TOML files with environment variable overrides."""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to TOML configuration file
        """
        self.config_path = Path(config_path) if config_path else self._get_default_config_path()

    def _get_default_config_path(self) -> Path:
        """Get default configuration file path."""
        config_env = os.getenv(CONFIG_ENV_VAR)
        if config_env:
            return Path(config_env)

        config_locations = [
            Path("config.toml"),
            Path("/etc/whisper-transcribe/config.toml"),
            Path.home() / ".config" / "whisper-transcribe" / "config.toml",
        ]

        for path in config_locations:
            if path.exists():
                return path

        return Path("config.toml")

    def load_toml(self) -> Dict[str, Any]:
        """Load configuration from TOML file."""
        if not self.config_path.exists():
            return {}

        try:
            with open(self.config_path, "rb") as f:
                return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {self.config_path}: {e}") from e

    def merge_env_vars(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Merge environment variables into configuration.

        Environment variables override TOML values. Init arguments take
        precedence over the environment in pydantic-settings, so values
        read from the environment are folded in here explicitly.
        """
        merged = dict(config)

        env_settings = Settings()
        for key in env_settings.model_fields_set - NESTED_SECTIONS.keys():
            merged[key] = getattr(env_settings, key)

        for section, settings_cls in NESTED_SECTIONS.items():
            table = merged.get(section)
            if not isinstance(table, dict):
                continue
            env_values = settings_cls().model_dump(exclude_unset=True)
            merged[section] = {**table, **env_values}
        return merged

    def load(self) -> Settings:
        """Load complete configuration with all overrides applied."""
        toml_config = self.load_toml()
        config = self.merge_env_vars(toml_config)
        return Settings(**config)


def load_config(config_path: Optional[Path] = None) -> Settings:
    """Load configuration from TOML file and environment variables.

    Args:
        config_path: Optional path to configuration file

    Returns:
        Loaded configuration settings
    """
    loader = ConfigLoader(config_path)
    return loader.load()
