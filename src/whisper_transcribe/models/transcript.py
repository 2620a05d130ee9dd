"""Transcription result types."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, Union

# whisper.cpp reports segment boundaries in centiseconds
TICKS_PER_SECOND = 100


@dataclass(frozen=True)
class Segment:
    """One recognized utterance, text exactly as the engine produced it."""
    time_start: float
    time_end: float
    text: str

    @classmethod
    def from_ticks(cls, t0: int, t1: int, text: str) -> "Segment":
        return cls(time_start=t0 / TICKS_PER_SECOND, time_end=t1 / TICKS_PER_SECOND, text=text)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "timeStart": self.time_start,
            "timeEnd": self.time_end,
            "text": self.text,
        }


@dataclass(frozen=True)
class StageTimings:
    """Wall-clock seconds spent per pipeline stage."""
    convert: float = 0.0
    transcribe: float = 0.0
    total: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "convert": self.convert,
            "transcribe": self.transcribe,
            "total": self.total,
        }


@dataclass(frozen=True)
class TranscriptionResult:
    """Segments of a completed request plus its stage timings."""
    segments: Tuple[Segment, ...] = field(default_factory=tuple)
    timings: StageTimings = field(default_factory=StageTimings)

    @property
    def ok(self) -> bool:
        return True

    def segments_as_dicts(self) -> List[Dict[str, Any]]:
        return [segment.to_dict() for segment in self.segments]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "segments": self.segments_as_dicts(),
            "executionTime": self.timings.to_dict(),
        }


@dataclass(frozen=True)
class TranscriptionFailure:
    """A request that ended in the failed state."""
    kind: str
    stage: str
    message: str
    timings: StageTimings = field(default_factory=StageTimings)

    @property
    def ok(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "kind": self.kind,
            "stage": self.stage,
            "executionTime": self.timings.total,
        }


TranscriptionOutcome = Union[TranscriptionResult, TranscriptionFailure]
