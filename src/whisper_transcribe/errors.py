"""Error kinds raised along the transcription pipeline.

Every error carries a ``kind`` naming the failure class reported to
clients, independent of the Python class name.
"""

from typing import Optional


class TranscriptionError(Exception):
    """Base class for all pipeline failures."""

    kind = "TranscriptionError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class WavDecodeError(TranscriptionError):
    """Raised when a WAV stream cannot be decoded."""

    kind = "WavDecodeError"


class InvalidContainerError(WavDecodeError):
    """RIFF/WAVE/fmt structure is missing or malformed."""

    kind = "InvalidContainer"


class MissingDataChunkError(WavDecodeError):
    """The stream ended before a data chunk was found."""

    kind = "MissingDataChunk"


class UnsupportedBitDepthError(WavDecodeError):
    """Bits per sample is not one of 8, 16 or 32."""

    kind = "UnsupportedBitDepth"

    def __init__(self, bits_per_sample: int):
        super().__init__(f"Unsupported bits per sample: {bits_per_sample}")
        self.bits_per_sample = bits_per_sample


class TranscodeFailure(TranscriptionError):
    """The transcoding utility could not be run or rejected the input."""

    kind = "TranscodeFailure"

    def __init__(self, message: str, output: Optional[str] = None):
        super().__init__(message)
        self.output = output


class EngineInitFailure(TranscriptionError):
    """The speech recognition engine could not be initialized."""

    kind = "EngineInitFailure"


class AudioReadFailure(TranscriptionError):
    """Engine input could not be loaded from the transcoded WAV."""

    kind = "AudioReadFailure"


class InferenceFailure(TranscriptionError):
    """The engine returned a non-zero result code."""

    kind = "InferenceFailure"

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class IOFailure(TranscriptionError):
    """An upload could not be persisted or an output could not be written."""

    kind = "IOFailure"
