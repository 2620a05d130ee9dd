"""GGML model provisioning."""

import os
import tempfile
from pathlib import Path
from typing import Optional

import requests

from ..config.settings import ModelConfig
from ..utils.logging import get_logger

logger = get_logger(__name__)

DOWNLOAD_CHUNK_SIZE = 1024 * 1024


def manual_download_hint(config: ModelConfig) -> str:
    """Shell command a user can run to fetch the model by hand."""
    return f"curl -L {config.download_url} -o {config.path}"


def download_model(config: ModelConfig, timeout: float = 30.0) -> bool:
    """Download the configured model into its cache directory.

    The file is streamed to a temporary name next to the target and renamed
    once complete, so a partial download never appears at the model path.

    Args:
        config: Model configuration
        timeout: Connect/read timeout in seconds for the HTTP request

    Returns:
        True if the model is now present, False otherwise
    """
    target = config.path
    tmp_path: Optional[Path] = None

    logger.info(f"Downloading model {config.name} from {config.download_url}")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{config.name}.", suffix=".part", dir=target.parent)
        tmp_path = Path(tmp_name)
        with os.fdopen(fd, "wb") as out:
            with requests.get(config.download_url, stream=True, timeout=timeout) as response:
                response.raise_for_status()
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    out.write(chunk)
        os.replace(tmp_path, target)
    except (requests.RequestException, OSError) as e:
        logger.error(f"Failed to download model: {e}")
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        return False

    logger.info(f"Model downloaded successfully to {target}")
    return True


def ensure_model(config: ModelConfig) -> bool:
    """Make sure the model file exists, downloading it when allowed.

    Returns:
        True if the model file is available
    """
    if config.path.exists():
        return True

    if not config.auto_download:
        logger.error(f"Model not found at {config.path}. Download it with: {manual_download_hint(config)}")
        return False

    logger.warning(f"Model not found at {config.path}. Attempting to download...")
    if download_model(config):
        return True

    logger.error(f"Please download the model manually using: {manual_download_hint(config)}")
    return False
