"""Audio transcription with whisper.cpp, as a CLI and an HTTP service."""

__version__ = "0.1.0"
