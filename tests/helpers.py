"""Test helpers: WAV builders and in-memory pipeline collaborators."""

import shutil
import struct
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from whisper_transcribe.errors import TranscodeFailure
from whisper_transcribe.models.whisper_engine import InferenceParams


def build_wav(
    frames: Sequence[Sequence[float]] = (),
    *,
    channels: int = 1,
    sample_rate: int = 16000,
    bits_per_sample: int = 16,
    data: Optional[bytes] = None,
    fmt_extra: bytes = b"",
    extra_chunks: Iterable[Tuple[bytes, bytes]] = (),
    riff_id: bytes = b"RIFF",
    wave_id: bytes = b"WAVE",
    fmt_id: bytes = b"fmt ",
    include_data_chunk: bool = True,
) -> bytes:
    """Assemble a WAV container byte by byte.

    ``frames`` holds raw integer (8/16-bit) or float (32-bit) sample values
    per frame. ``data`` overrides the encoded samples entirely.
    """
    if data is None:
        flat = [value for frame in frames for value in frame]
        if bits_per_sample == 8:
            data = bytes(int(v) for v in flat)
        elif bits_per_sample == 16:
            data = struct.pack(f"<{len(flat)}h", *(int(v) for v in flat))
        elif bits_per_sample == 32:
            data = struct.pack(f"<{len(flat)}f", *flat)
        else:
            data = b""

    block_align = channels * max(bits_per_sample // 8, 1)
    fmt_body = struct.pack(
        "<HHIIHH",
        3 if bits_per_sample == 32 else 1,
        channels,
        sample_rate,
        sample_rate * block_align,
        block_align,
        bits_per_sample,
    ) + fmt_extra

    body = wave_id + fmt_id + struct.pack("<I", len(fmt_body)) + fmt_body
    for chunk_id, payload in extra_chunks:
        body += chunk_id + struct.pack("<I", len(payload)) + payload
    if include_data_chunk:
        body += b"data" + struct.pack("<I", len(data)) + data
    return riff_id + struct.pack("<I", len(body)) + body


def silent_wav(seconds: float = 1.0, sample_rate: int = 16000) -> bytes:
    return build_wav(data=b"\x00\x00" * int(seconds * sample_rate), sample_rate=sample_rate)


class FakeHandle:
    """In-memory engine handle recording how it was used."""

    def __init__(self, segments=(), code: int = 0):
        self._segments = list(segments)
        self.code = code
        self.closed = False
        self.samples: Optional[np.ndarray] = None

    def full(self, samples: np.ndarray) -> int:
        self.samples = samples
        return self.code

    def segments(self):
        return iter(self._segments)

    def close(self) -> None:
        self.closed = True


class FakeHandleFactory:
    """Engine handle factory returning a fresh FakeHandle per call."""

    def __init__(self, segments=((0, 150, " Hello world."),), code: int = 0):
        self.segments = segments
        self.code = code
        self.handles: List[FakeHandle] = []
        self.params: List[InferenceParams] = []

    def __call__(self, model_path: Path, params: InferenceParams) -> FakeHandle:
        self.params.append(params)
        handle = FakeHandle(self.segments, self.code)
        self.handles.append(handle)
        return handle


class CopyTranscoder:
    """Transcoder that treats every input as canonical WAV already."""

    def __init__(self):
        self.calls: List[Tuple[Path, Path]] = []

    def transcode(self, input_path: Path, output_path: Path) -> Path:
        self.calls.append((Path(input_path), Path(output_path)))
        shutil.copyfile(input_path, output_path)
        return output_path


class FailingTranscoder:
    """Transcoder that leaves a partial output behind and then fails."""

    def transcode(self, input_path: Path, output_path: Path) -> Path:
        Path(output_path).write_bytes(b"partial")
        raise TranscodeFailure("Failed to convert audio: ffmpeg exited with code 1", output="boom")


