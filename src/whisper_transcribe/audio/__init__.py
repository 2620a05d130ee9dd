"""
Audio handling for the transcription pipeline.

This module converts arbitrary input audio to canonical WAV with ffmpeg and
decodes WAV containers into the mono float samples the engine consumes.
"""
