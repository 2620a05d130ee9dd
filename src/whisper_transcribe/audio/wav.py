"""Strict WAV container decoding to mono float samples."""

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Union

import numpy as np

from ..errors import (
    InvalidContainerError,
    MissingDataChunkError,
    UnsupportedBitDepthError,
)
from ..utils.logging import get_logger

logger = get_logger(__name__)

EXPECTED_SAMPLE_RATE = 16000
SUPPORTED_BIT_DEPTHS = (8, 16, 32)

# RIFF id, RIFF size, WAVE id, fmt id, fmt size, then the 16-byte PCM descriptor
_DESCRIPTOR = struct.Struct("<4sI4s4sIHHIIHH")
_CHUNK_HEADER = struct.Struct("<4sI")
_PCM_FMT_SIZE = 16


@dataclass(frozen=True)
class AudioHeader:
    """Metadata parsed from a WAV container."""
    format_tag: int
    channels: int
    sample_rate: int
    bits_per_sample: int
    data_bytes: int

    @property
    def bytes_per_sample(self) -> int:
        return self.bits_per_sample // 8

    @property
    def num_frames(self) -> int:
        """Number of whole frames in the data chunk (partial frames are dropped)."""
        return self.data_bytes // self.bytes_per_sample // self.channels


def _read(stream: BinaryIO, size: int) -> bytes:
    return stream.read(size) or b""


def _skip(stream: BinaryIO, size: int) -> None:
    if size <= 0:
        return
    if stream.seekable():
        stream.seek(size, 1)
    else:
        stream.read(size)


def read_header(stream: BinaryIO) -> AudioHeader:
    """Parse the WAV header and position ``stream`` at the first sample byte.

    Args:
        stream: Binary stream positioned at the start of the container

    Returns:
        Parsed header

    Raises:
        InvalidContainerError: If the RIFF/WAVE/fmt tags are wrong
        MissingDataChunkError: If no data chunk exists
        UnsupportedBitDepthError: If bits per sample is not 8, 16 or 32
    """
    raw = _read(stream, _DESCRIPTOR.size)
    if len(raw) < _DESCRIPTOR.size:
        raise InvalidContainerError("Invalid WAV file format: header is truncated")

    (
        riff_id, _riff_size, wave_id, fmt_id, fmt_size,
        format_tag, channels, sample_rate, _byte_rate, _block_align, bits_per_sample,
    ) = _DESCRIPTOR.unpack(raw)

    if riff_id != b"RIFF" or wave_id != b"WAVE" or fmt_id != b"fmt ":
        raise InvalidContainerError("Invalid WAV file format")
    if channels == 0:
        raise InvalidContainerError("Invalid WAV file format: zero channels")

    # Skip any extra format bytes
    _skip(stream, fmt_size - _PCM_FMT_SIZE)

    while True:
        chunk = _read(stream, _CHUNK_HEADER.size)
        if len(chunk) < _CHUNK_HEADER.size:
            raise MissingDataChunkError("Could not find data chunk in WAV file")

        chunk_id, chunk_size = _CHUNK_HEADER.unpack(chunk)
        if chunk_id == b"data":
            break

        logger.debug(f"Skipping WAV chunk {chunk_id!r} ({chunk_size} bytes)")
        _skip(stream, chunk_size)

    if bits_per_sample not in SUPPORTED_BIT_DEPTHS:
        raise UnsupportedBitDepthError(bits_per_sample)

    return AudioHeader(
        format_tag=format_tag,
        channels=channels,
        sample_rate=sample_rate,
        bits_per_sample=bits_per_sample,
        data_bytes=chunk_size,
    )


def _to_float(raw: bytes, bits_per_sample: int) -> np.ndarray:
    """Convert interleaved PCM bytes to float32 in [-1, 1]."""
    if bits_per_sample == 8:
        # 8-bit PCM is unsigned and centered at 128
        return (np.frombuffer(raw, dtype=np.uint8).astype(np.float32) - 128.0) / 128.0
    if bits_per_sample == 16:
        return np.frombuffer(raw, dtype="<i2").astype(np.float32) / 32768.0
    return np.frombuffer(raw, dtype="<f4").astype(np.float32)


def decode_wav(stream: BinaryIO) -> np.ndarray:
    """Decode a WAV stream into a mono float32 sample buffer.

    Multi-channel frames are averaged into one sample. The sample rate is
    reported but never changed.

    Args:
        stream: Binary stream positioned at the start of the container

    Returns:
        One-dimensional float32 array, one value per frame
    """
    header = read_header(stream)
    num_frames = header.num_frames

    logger.info(
        f"WAV file details: {header.channels} channel(s), {header.sample_rate}Hz, "
        f"{header.bits_per_sample}-bit, {num_frames} samples",
        extra={
            "channels": header.channels,
            "sample_rate": header.sample_rate,
            "bits_per_sample": header.bits_per_sample,
            "num_samples": num_frames,
        },
    )

    expected = num_frames * header.channels * header.bytes_per_sample
    raw = _read(stream, expected)
    if len(raw) < expected:
        raise InvalidContainerError(
            f"WAV data chunk declares {header.data_bytes} bytes but only {len(raw)} are present"
        )

    samples = _to_float(raw, header.bits_per_sample)
    samples = samples.reshape(num_frames, header.channels).mean(axis=1, dtype=np.float32)

    if header.sample_rate != EXPECTED_SAMPLE_RATE:
        logger.warning(
            f"WAV file sample rate is {header.sample_rate}Hz, not {EXPECTED_SAMPLE_RATE}Hz. "
            "Audio might not be processed correctly; convert it with ffmpeg first."
        )

    return samples


def read_wav_file(path: Union[str, Path]) -> np.ndarray:
    """Decode the WAV file at ``path``.

    Raises:
        OSError: If the file cannot be opened
        WavDecodeError: If the content is not a supported WAV stream
    """
    with open(path, "rb") as f:
        return decode_wav(f)
