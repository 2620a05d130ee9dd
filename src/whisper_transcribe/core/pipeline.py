"""Request orchestration: staging, transcoding, transcription and cleanup.

Every request gets its own ``WorkArea`` under the scratch directory. The
stages run strictly in sequence; whatever happens, the artifacts the work
area owns are deleted before the outcome is returned. Requests share no
mutable state, so concurrent runs need no locking.
"""

import time
import uuid
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from ..audio.transcoder import Transcoder
from ..errors import IOFailure, TranscriptionError
from ..models.transcript import (
    StageTimings,
    TranscriptionFailure,
    TranscriptionOutcome,
    TranscriptionResult,
)
from ..models.whisper_engine import WhisperEngine
from ..utils.logging import get_logger

logger = get_logger(__name__)


class RequestState(str, Enum):
    """Lifecycle of a single transcription request."""
    RECEIVED = "received"
    STAGED = "staged"
    TRANSCODING = "transcoding"
    TRANSCRIBING = "transcribing"
    COMPLETED = "completed"
    FAILED = "failed"


class WorkArea:
    """Request-scoped scratch files.

    Names combine the current second with a random token, so two requests
    arriving within the same second never collide.
    """

    def __init__(self, scratch_dir: Path, prefix: str = "audio_"):
        self.scratch_dir = Path(scratch_dir)
        self.name = f"{prefix}{int(time.time())}_{uuid.uuid4().hex}"
        self.raw_path = self.scratch_dir / self.name
        self.wav_path = self.scratch_dir / f"{self.name}.wav"
        self._owned: List[Path] = []

    def stage_bytes(self, data: bytes) -> Path:
        """Persist uploaded bytes as the raw input of this request.

        Raises:
            IOFailure: If the file cannot be created or written
        """
        try:
            self.scratch_dir.mkdir(parents=True, exist_ok=True)
            # Exclusive create: an existing file is an error, never overwritten
            with open(self.raw_path, "xb") as f:
                self._owned.append(self.raw_path)
                f.write(data)
        except OSError as e:
            raise IOFailure(f"Failed to save upload: {e}") from e
        return self.raw_path

    def claim_wav(self) -> Path:
        """Take ownership of the transcoded WAV path before it is written."""
        try:
            self.scratch_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IOFailure(f"Failed to create scratch directory: {e}") from e
        self._owned.append(self.wav_path)
        return self.wav_path

    @property
    def artifacts(self) -> List[Path]:
        return list(self._owned)

    def cleanup(self) -> None:
        """Remove every artifact this work area owns."""
        for path in self._owned:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.error(f"Failed to remove temporary file {path}: {e}")
        self._owned.clear()

    def __enter__(self) -> "WorkArea":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()


class TranscriptionPipeline:
    """Drives one request from input audio to segments."""

    def __init__(
        self,
        transcoder: Transcoder,
        engine: WhisperEngine,
        scratch_dir: Union[str, Path],
        file_prefix: str = "audio_",
    ):
        """Initialize the pipeline.

        Args:
            transcoder: Converter to canonical WAV
            engine: Speech recognition engine adapter
            scratch_dir: Directory holding per-request temporary files
            file_prefix: Prefix of temporary file names
        """
        self.transcoder = transcoder
        self.engine = engine
        self.scratch_dir = Path(scratch_dir)
        self.file_prefix = file_prefix

    def new_work_area(self) -> WorkArea:
        return WorkArea(self.scratch_dir, self.file_prefix)

    def transcribe_file(self, input_path: Union[str, Path]) -> TranscriptionOutcome:
        """Transcribe an existing file. The input file itself is left in place."""
        return self._run(input_path=Path(input_path))

    def transcribe_bytes(self, data: bytes, filename: Optional[str] = None) -> TranscriptionOutcome:
        """Transcribe uploaded audio bytes."""
        return self._run(data=data, filename=filename)

    def _run(
        self,
        input_path: Optional[Path] = None,
        data: Optional[bytes] = None,
        filename: Optional[str] = None,
    ) -> TranscriptionOutcome:
        start_time = time.perf_counter()
        convert_time = 0.0
        transcribe_time = 0.0
        state = RequestState.RECEIVED
        segments = []
        error: Optional[BaseException] = None

        work_area = self.new_work_area()
        log_extra = {"work_area": work_area.name, "upload_name": filename}

        def transition(new_state: RequestState) -> RequestState:
            logger.debug(f"Request {work_area.name}: {state.value} -> {new_state.value}", extra=log_extra)
            return new_state

        with work_area:
            try:
                if data is not None:
                    source = work_area.stage_bytes(data)
                else:
                    source = input_path
                state = transition(RequestState.STAGED)

                state = transition(RequestState.TRANSCODING)
                logger.info(f"Converting audio {source}", extra=log_extra)
                convert_start = time.perf_counter()
                wav_path = self.transcoder.transcode(source, work_area.claim_wav())
                convert_time = time.perf_counter() - convert_start
                logger.info(f"Audio conversion completed in {convert_time:.3f} seconds", extra=log_extra)

                state = transition(RequestState.TRANSCRIBING)
                transcribe_start = time.perf_counter()
                segments = self.engine.transcribe(wav_path)
                transcribe_time = time.perf_counter() - transcribe_start
                logger.info(f"Transcription complete in {transcribe_time:.3f} seconds", extra=log_extra)

            except TranscriptionError as e:
                error = e
                logger.error(f"{e.kind} during {state.value}: {e.message}", extra=log_extra)
            except Exception as e:
                error = e
                logger.error(f"Unexpected error during {state.value}: {e}", exc_info=True, extra=log_extra)

        total_time = time.perf_counter() - start_time
        timings = StageTimings(convert=convert_time, transcribe=transcribe_time, total=total_time)

        if error is not None:
            failed_stage = state
            state = transition(RequestState.FAILED)
            logger.error(f"Failed after {total_time:.3f} seconds", extra=log_extra)
            return TranscriptionFailure(
                kind=error.kind if isinstance(error, TranscriptionError) else "InternalError",
                stage=failed_stage.value,
                message=str(error),
                timings=timings,
            )

        state = transition(RequestState.COMPLETED)
        logger.info(
            f"Returning {len(segments)} segments, total request processing time {total_time:.3f} seconds",
            extra=log_extra,
        )
        return TranscriptionResult(segments=tuple(segments), timings=timings)
