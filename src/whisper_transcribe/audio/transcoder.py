"""Conversion of arbitrary audio input to canonical 16 kHz mono 16-bit WAV."""

import subprocess
from pathlib import Path
from typing import List, Optional, Protocol, Union

from ..errors import TranscodeFailure
from ..utils.logging import get_logger

logger = get_logger(__name__)

TARGET_SAMPLE_RATE = 16000
TARGET_CHANNELS = 1
TARGET_CODEC = "pcm_s16le"


def _as_text(output: Union[str, bytes, None]) -> Optional[str]:
    # TimeoutExpired carries raw bytes even when the run was in text mode
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


class Transcoder(Protocol):
    """Protocol for audio transcoders."""

    def transcode(self, input_path: Path, output_path: Path) -> Path:
        """Write a canonical WAV rendition of ``input_path`` to ``output_path``."""
        ...


class FFmpegTranscoder:
    """Transcoder backed by the ffmpeg command line tool."""

    def __init__(self, ffmpeg_bin: str = "ffmpeg", timeout: Optional[float] = None):
        """Initialize ffmpeg transcoder.

        Args:
            ffmpeg_bin: ffmpeg executable name or path
            timeout: Seconds before a conversion is abandoned, None to wait indefinitely
        """
        self.ffmpeg_bin = ffmpeg_bin
        self.timeout = timeout

    def build_command(self, input_path: Path, output_path: Path) -> List[str]:
        return [
            self.ffmpeg_bin,
            "-nostdin",
            "-y",
            "-i", str(input_path),
            "-ar", str(TARGET_SAMPLE_RATE),
            "-ac", str(TARGET_CHANNELS),
            "-c:a", TARGET_CODEC,
            str(output_path),
        ]

    def transcode(self, input_path: Path, output_path: Path) -> Path:
        """Convert ``input_path`` into 16 kHz mono 16-bit WAV at ``output_path``.

        Any existing file at ``output_path`` is overwritten.

        Raises:
            TranscodeFailure: If ffmpeg cannot be started, times out or exits non-zero
        """
        cmd = self.build_command(input_path, output_path)
        logger.debug(f"Running ffmpeg: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise TranscodeFailure(
                f"Failed to convert audio: ffmpeg not found ({self.ffmpeg_bin})"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise TranscodeFailure(
                f"Failed to convert audio: ffmpeg timed out after {self.timeout}s",
                output=_as_text(e.output),
            ) from e
        except OSError as e:
            raise TranscodeFailure(f"Failed to convert audio: {e}") from e

        if result.returncode != 0:
            logger.error(
                f"ffmpeg exited with code {result.returncode}",
                extra={"input_path": str(input_path), "ffmpeg_output": result.stdout[-2000:]},
            )
            raise TranscodeFailure(
                f"Failed to convert audio: ffmpeg exited with code {result.returncode}",
                output=result.stdout,
            )

        return output_path

    def is_available(self) -> bool:
        """Check that the ffmpeg binary can be executed."""
        try:
            result = subprocess.run(
                [self.ffmpeg_bin, "-version"],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=10,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning(f"ffmpeg check failed: {e}")
            return False
        return result.returncode == 0
