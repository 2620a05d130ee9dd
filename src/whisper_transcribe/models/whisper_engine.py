"""whisper.cpp inference over transcoded WAV files."""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Protocol, Tuple, Union

import numpy as np

from ..audio.wav import read_wav_file
from ..errors import (
    AudioReadFailure,
    EngineInitFailure,
    InferenceFailure,
    WavDecodeError,
)
from ..utils.logging import get_logger
from .transcript import Segment

logger = get_logger(__name__)


@dataclass(frozen=True)
class InferenceParams:
    """Decoding parameters for a single non-streaming greedy run."""
    language: str = "en"
    n_threads: int = 4
    offset_ms: int = 0
    translate: bool = False
    print_realtime: bool = False
    print_progress: bool = False


class EngineHandle(Protocol):
    """A live engine context bound to one loaded model."""

    def full(self, samples: np.ndarray) -> int:
        """Run inference over ``samples``, returning the engine result code."""
        ...

    def segments(self) -> Iterator[Tuple[int, int, str]]:
        """Yield ``(t0, t1, text)`` per recognized segment, times in centiseconds."""
        ...

    def close(self) -> None:
        """Release the context."""
        ...


HandleFactory = Callable[[Path, InferenceParams], EngineHandle]


class WhisperCppHandle:
    """Engine handle backed by the pywhispercpp low-level bindings."""

    def __init__(self, model_path: Path, params: InferenceParams):
        import _pywhispercpp as pw

        self._pw = pw
        # The binding raises on a missing or corrupt model; WhisperEngine wraps it
        self._ctx = pw.whisper_init_from_file(str(model_path))

        self._params = pw.whisper_full_default_params(
            pw.whisper_sampling_strategy.WHISPER_SAMPLING_GREEDY
        )
        self._params.language = params.language
        self._params.n_threads = params.n_threads
        self._params.offset_ms = params.offset_ms
        self._params.translate = params.translate
        self._params.print_realtime = params.print_realtime
        self._params.print_progress = params.print_progress

    def full(self, samples: np.ndarray) -> int:
        return self._pw.whisper_full(self._ctx, self._params, samples, samples.size)

    def segments(self) -> Iterator[Tuple[int, int, str]]:
        for i in range(self._pw.whisper_full_n_segments(self._ctx)):
            text = self._pw.whisper_full_get_segment_text(self._ctx, i)
            if isinstance(text, bytes):
                text = text.decode("utf-8", errors="replace")
            yield (
                self._pw.whisper_full_get_segment_t0(self._ctx, i),
                self._pw.whisper_full_get_segment_t1(self._ctx, i),
                text,
            )

    def close(self) -> None:
        if self._ctx:
            self._pw.whisper_free(self._ctx)
            self._ctx = None


class WhisperEngine:
    """Speech recognition over a fixed GGML model.

    Each call to ``transcribe`` opens its own engine handle and releases it
    before returning, so calls never share engine state.
    """

    def __init__(
        self,
        model_path: Union[str, Path],
        language: str = "en",
        n_threads: int = 4,
        handle_factory: Optional[HandleFactory] = None,
    ):
        """Initialize the engine adapter.

        Args:
            model_path: Path to the GGML model file
            language: Transcription language code
            n_threads: Worker threads used by whisper.cpp during inference
            handle_factory: Callable opening an engine handle, whisper.cpp by default
        """
        self.model_path = Path(model_path)
        self.params = InferenceParams(language=language, n_threads=n_threads)
        self._handle_factory = handle_factory or WhisperCppHandle

    def _open_handle(self) -> EngineHandle:
        if not self.model_path.exists():
            raise EngineInitFailure(f"Model not found at {self.model_path}")
        try:
            return self._handle_factory(self.model_path, self.params)
        except EngineInitFailure:
            raise
        except Exception as e:
            raise EngineInitFailure(f"Failed to initialize whisper context: {e}") from e

    def transcribe(self, wav_path: Union[str, Path]) -> List[Segment]:
        """Transcribe a canonical WAV file.

        Args:
            wav_path: Path to 16 kHz mono WAV

        Returns:
            Segments in the order reported by the engine

        Raises:
            EngineInitFailure: If the model cannot be loaded
            AudioReadFailure: If the WAV file cannot be decoded
            InferenceFailure: If the engine reports a non-zero result code
        """
        handle = self._open_handle()
        try:
            try:
                samples = read_wav_file(wav_path)
            except (WavDecodeError, OSError) as e:
                raise AudioReadFailure(f"Failed to read audio: {e}") from e

            code = handle.full(samples)
            if code != 0:
                raise InferenceFailure(f"Failed to process audio (whisper result code {code})", code=code)

            segments = [Segment.from_ticks(t0, t1, text) for t0, t1, text in handle.segments()]
            logger.info(
                f"Transcription produced {len(segments)} segments",
                extra={"num_segments": len(segments), "num_samples": int(samples.size)},
            )
            return segments
        finally:
            handle.close()
