"""Transcription engine, result types and model provisioning."""
