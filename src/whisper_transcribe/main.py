"""Main application entry point for the whisper transcription service."""

import asyncio
import signal
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from . import __version__, dependencies
from .api import health, index, metrics, transcribe
from .config.loader import load_config
from .config.settings import Settings
from .models.provisioning import ensure_model
from .utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def run_startup_checks(settings: Settings) -> None:
    """Report missing prerequisites before accepting work.

    Nothing here stops the service; requests fail until the problem is fixed.
    """
    try:
        model_ready = ensure_model(settings.model)
    except OSError as e:
        logger.error(f"Model provisioning failed: {e}")
        model_ready = False

    if not model_ready:
        logger.error(f"Model unavailable at {settings.model.path}; transcription requests will fail")

    if not dependencies.build_transcoder(settings).is_available():
        logger.warning(
            f"ffmpeg not found ({settings.transcoder.ffmpeg_bin}). Audio conversion will not work. "
            "Please install ffmpeg to enable audio file processing."
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings: Settings = app.state.settings

    # Startup
    logger.info(f"Starting {settings.app_name}", extra={"version": __version__})
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, run_startup_checks, settings)
    logger.info(f"Listening on http://{settings.api.host}:{settings.api.port}")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")


def create_app(config_path: Optional[Path] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Create FastAPI application instance.

    Args:
        config_path: Optional path to configuration file
        settings: Preloaded settings, takes precedence over ``config_path``

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = load_config(config_path)

    setup_logging(settings)
    dependencies.configure(settings)

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url="/redoc" if settings.environment != "production" else None,
        lifespan=lifespan
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(index.router, tags=["web"])
    app.include_router(health.router, tags=["health"])
    app.include_router(metrics.router, tags=["monitoring"])
    app.include_router(transcribe.router, tags=["transcription"])

    # Mount static files
    static_dir = Path(__file__).parent / "web" / "static"
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")
        logger.debug(f"Mounted static files from {static_dir}")
    else:
        logger.warning(f"Static directory not found: {static_dir}")

    return app


def main():
    """Main entry point for running the application."""
    app = create_app()
    settings: Settings = app.state.settings

    # Setup signal handlers
    def signal_handler(sig, frame):
        logger.info(f"Received signal {sig}")
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    uvicorn.run(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_config=None  # We handle logging ourselves
    )


if __name__ == "__main__":
    main()
