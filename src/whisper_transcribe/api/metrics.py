"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import (
    Counter, Histogram, Gauge,
    generate_latest, CONTENT_TYPE_LATEST,
    CollectorRegistry
)

from ..models.transcript import TranscriptionOutcome, TranscriptionFailure
from ..utils.logging import get_logger

logger = get_logger(__name__)

# Create a custom registry to avoid conflicts
registry = CollectorRegistry()

request_count = Counter(
    'whisper_transcribe_requests_total',
    'Total number of transcription requests',
    ['status'],
    registry=registry
)

stage_duration = Histogram(
    'whisper_transcribe_stage_duration_seconds',
    'Pipeline stage duration in seconds',
    ['stage'],
    registry=registry
)

active_requests = Gauge(
    'whisper_transcribe_active_requests',
    'Number of transcription requests in progress',
    registry=registry
)

error_count = Counter(
    'whisper_transcribe_errors_total',
    'Total number of failed requests by error kind',
    ['kind'],
    registry=registry
)

router = APIRouter()


def record_outcome(outcome: TranscriptionOutcome) -> None:
    """Record counters and stage timings for a finished request."""
    timings = outcome.timings
    stage_duration.labels(stage="total").observe(timings.total)

    if isinstance(outcome, TranscriptionFailure):
        request_count.labels(status="failed").inc()
        error_count.labels(kind=outcome.kind).inc()
        # Stages that finished before the failure still count
        if timings.convert > 0:
            stage_duration.labels(stage="convert").observe(timings.convert)
        return

    request_count.labels(status="completed").inc()
    stage_duration.labels(stage="convert").observe(timings.convert)
    stage_duration.labels(stage="transcribe").observe(timings.transcribe)


@router.get(
    "/metrics",
    response_class=Response,
    summary="Prometheus metrics",
    description="Expose metrics in Prometheus format"
)
async def metrics():
    """Return metrics in Prometheus format."""
    return Response(
        content=generate_latest(registry),
        media_type=CONTENT_TYPE_LATEST
    )
