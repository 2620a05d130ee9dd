"""Command line transcription: ``transcribe <audio_file> [output_file]``."""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .config.loader import ConfigError, load_config
from .dependencies import build_pipeline, build_transcoder
from .errors import IOFailure
from .models.provisioning import manual_download_hint
from .models.transcript import TranscriptionFailure, TranscriptionResult
from .utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="transcribe",
        description="Transcribe an audio file with whisper.cpp",
        epilog="If output_file is not specified, output is printed to stdout",
    )
    parser.add_argument("audio_file", type=Path, help="Audio file in any format ffmpeg can read")
    parser.add_argument("output_file", type=Path, nargs="?", help="Where to write the JSON segments")
    parser.add_argument("--config", type=Path, default=None, help="Path to a TOML configuration file")
    return parser.parse_args(argv)


def write_output(result: TranscriptionResult, output_file: Optional[Path]) -> None:
    """Write segments as pretty-printed JSON to ``output_file`` or stdout.

    Raises:
        IOFailure: If the output file cannot be written
    """
    payload = json.dumps(result.segments_as_dicts(), indent=2, ensure_ascii=False)
    if output_file is None:
        sys.stdout.write(payload + "\n")
        return

    try:
        output_file.write_text(payload, encoding="utf-8")
    except OSError as e:
        raise IOFailure(f"Could not open output file: {output_file} ({e})") from e
    logger.info(f"Transcription saved to: {output_file}")


def fail(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Run one transcription and return the process exit code."""
    args = parse_args(argv)

    try:
        settings = load_config(args.config)
    except (ConfigError, ValueError) as e:
        return fail(f"Invalid configuration: {e}")

    setup_logging(settings, stream=sys.stderr)

    if not settings.model.path.exists():
        print(f"Model not found at {settings.model.path}", file=sys.stderr)
        print(f"Please download manually using:\n{manual_download_hint(settings.model)}", file=sys.stderr)
        return 1

    if not build_transcoder(settings).is_available():
        print("Error: ffmpeg not found. Audio conversion will not work.", file=sys.stderr)
        print("Please install ffmpeg to enable audio file processing.", file=sys.stderr)
        return 1

    logger.info(f"Transcribing file: {args.audio_file}")
    outcome = build_pipeline(settings).transcribe_file(args.audio_file)

    if isinstance(outcome, TranscriptionFailure):
        return fail(outcome.message)

    try:
        write_output(outcome, args.output_file)
    except IOFailure as e:
        return fail(e.message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
