"""Health check endpoints."""

from typing import Dict

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from ..config.settings import Settings
from ..dependencies import build_transcoder, get_settings
from ..utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


class HealthStatus(BaseModel):
    """Health check response model."""
    status: str


class ReadinessStatus(BaseModel):
    """Readiness response model."""
    status: str
    checks: Dict[str, str]


@router.get(
    "/health",
    response_model=HealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    description="Check if the service is up"
)
async def health_check() -> HealthStatus:
    """Simple liveness check."""
    return HealthStatus(status="ok")


@router.get(
    "/health/ready",
    response_model=ReadinessStatus,
    status_code=status.HTTP_200_OK,
    summary="Readiness probe",
    description="Report whether the model file and ffmpeg are available"
)
def readiness(settings: Settings = Depends(get_settings)) -> ReadinessStatus:
    """Check the external prerequisites of the pipeline.

    The service keeps accepting requests while degraded; they fail until
    the missing prerequisite is provided.
    """
    checks = {
        "model": "ok" if settings.model.path.exists() else "missing",
        "ffmpeg": "ok" if build_transcoder(settings).is_available() else "missing",
    }

    overall_status = "ready"
    if any(value != "ok" for value in checks.values()):
        overall_status = "degraded"

    return ReadinessStatus(status=overall_status, checks=checks)
