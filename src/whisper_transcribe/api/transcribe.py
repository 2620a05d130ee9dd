"""Transcription upload endpoint."""

import asyncio
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..core.pipeline import TranscriptionPipeline
from ..dependencies import get_pipeline
from ..models.transcript import TranscriptionFailure, TranscriptionOutcome, TranscriptionResult
from ..utils.logging import get_logger
from .metrics import active_requests, record_outcome

router = APIRouter()
logger = get_logger(__name__)


class SegmentModel(BaseModel):
    """One transcribed segment."""
    model_config = ConfigDict(populate_by_name=True)

    time_start: float = Field(..., alias="timeStart", description="Segment start in seconds")
    time_end: float = Field(..., alias="timeEnd", description="Segment end in seconds")
    text: str = Field(..., description="Text exactly as produced by the engine")


class ExecutionTimeModel(BaseModel):
    """Per-stage processing time in seconds."""
    convert: float
    transcribe: float
    total: float


class TranscriptionResponse(BaseModel):
    """Successful transcription response."""
    model_config = ConfigDict(populate_by_name=True)

    segments: List[SegmentModel]
    execution_time: ExecutionTimeModel = Field(..., alias="executionTime")


class ErrorResponse(BaseModel):
    """Failed transcription response."""
    model_config = ConfigDict(populate_by_name=True)

    error: str
    kind: Optional[str] = None
    stage: Optional[str] = None
    execution_time: Optional[float] = Field(None, alias="executionTime")


def build_transcription_response(result: TranscriptionResult) -> TranscriptionResponse:
    return TranscriptionResponse(
        segments=[
            SegmentModel(time_start=s.time_start, time_end=s.time_end, text=s.text)
            for s in result.segments
        ],
        execution_time=ExecutionTimeModel(**result.timings.to_dict()),
    )


def build_error_response(failure: TranscriptionFailure) -> JSONResponse:
    body = ErrorResponse(
        error=failure.message,
        kind=failure.kind,
        stage=failure.stage,
        execution_time=failure.timings.total,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(by_alias=True),
    )


async def run_pipeline(
    pipeline: TranscriptionPipeline,
    data: bytes,
    filename: Optional[str],
) -> TranscriptionOutcome:
    """Run the blocking pipeline in the thread pool so uploads proceed concurrently."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, pipeline.transcribe_bytes, data, filename)


@router.post(
    "/api/transcribe",
    response_model=TranscriptionResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def transcribe(
    audio: Optional[UploadFile] = File(None, description="Audio file to transcribe"),
    pipeline: TranscriptionPipeline = Depends(get_pipeline),
):
    """Transcribe an uploaded audio file of any format ffmpeg can read."""
    if audio is None:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "No audio file provided"},
        )

    data = await audio.read()
    logger.info(
        f"Received file: {audio.filename} ({len(data)} bytes)",
        extra={"file_name": audio.filename, "size_bytes": len(data)},
    )

    active_requests.inc()
    try:
        outcome = await run_pipeline(pipeline, data, audio.filename)
    finally:
        active_requests.dec()

    record_outcome(outcome)

    if isinstance(outcome, TranscriptionFailure):
        return build_error_response(outcome)
    return build_transcription_response(outcome)
