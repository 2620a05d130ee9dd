"""
API module for the whisper transcription service.

This module contains the REST API endpoints: the upload endpoint, health
probes, Prometheus metrics and the landing page.
"""

from . import health, index, metrics, transcribe

__all__ = ["health", "index", "metrics", "transcribe"]
