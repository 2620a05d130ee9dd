"""Unit tests for the transcribe command."""

import json
import logging
from unittest.mock import Mock, patch

import pytest

from whisper_transcribe import cli
from whisper_transcribe.core.pipeline import TranscriptionPipeline
from whisper_transcribe.utils import logging as logging_setup

from tests.helpers import CopyTranscoder, silent_wav


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    if logging_setup._handler is not None:
        logging.getLogger().removeHandler(logging_setup._handler)
        logging_setup._handler = None


@pytest.fixture
def config_file(tmp_path, model_file, scratch_dir):
    path = tmp_path / "config.toml"
    path.write_text(
        f'log_level = "WARNING"\n\n'
        f'[model]\nname = "{model_file.name}"\ncache_dir = "{model_file.parent}"\nauto_download = false\n\n'
        f'[storage]\nscratch_dir = "{scratch_dir}"\n',
        encoding="utf-8",
    )
    return path


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "speech.wav"
    path.write_bytes(silent_wav(0.2))
    return path


@pytest.fixture
def available_ffmpeg():
    transcoder = Mock()
    transcoder.is_available.return_value = True
    with patch("whisper_transcribe.cli.build_transcoder", return_value=transcoder):
        yield transcoder


@pytest.fixture
def fake_pipeline(engine, scratch_dir):
    pipeline = TranscriptionPipeline(CopyTranscoder(), engine, scratch_dir)
    with patch("whisper_transcribe.cli.build_pipeline", return_value=pipeline):
        yield pipeline


def test_parse_args():
    args = cli.parse_args(["in.mp3", "out.json", "--config", "c.toml"])
    assert str(args.audio_file) == "in.mp3"
    assert str(args.output_file) == "out.json"
    assert str(args.config) == "c.toml"


def test_parse_args_requires_audio_file():
    with pytest.raises(SystemExit):
        cli.parse_args([])


def test_prints_segments_to_stdout(config_file, audio_file, available_ffmpeg, fake_pipeline, capsys):
    code = cli.main([str(audio_file), "--config", str(config_file)])

    assert code == 0
    segments = json.loads(capsys.readouterr().out)
    assert segments == [{"timeStart": 0.0, "timeEnd": 1.5, "text": " Hello world."}]
    assert audio_file.exists()


def test_writes_output_file(config_file, audio_file, available_ffmpeg, fake_pipeline, tmp_path, capsys):
    output = tmp_path / "result.json"

    code = cli.main([str(audio_file), str(output), "--config", str(config_file)])

    assert code == 0
    assert json.loads(output.read_text(encoding="utf-8"))[0]["text"] == " Hello world."
    assert "\n  {" in output.read_text(encoding="utf-8")
    assert capsys.readouterr().out == ""


def test_unwritable_output_file(config_file, audio_file, available_ffmpeg, fake_pipeline, tmp_path, capsys):
    output = tmp_path / "missing-dir" / "result.json"

    code = cli.main([str(audio_file), str(output), "--config", str(config_file)])

    assert code == 1
    assert "Could not open output file" in capsys.readouterr().err


def test_missing_model(tmp_path, audio_file, capsys):
    config = tmp_path / "nomodel.toml"
    config.write_text(f'[model]\ncache_dir = "{tmp_path / "empty"}"\n', encoding="utf-8")

    code = cli.main([str(audio_file), "--config", str(config)])

    assert code == 1
    err = capsys.readouterr().err
    assert "Model not found" in err
    assert "curl -L" in err


def test_missing_ffmpeg(config_file, audio_file, capsys):
    transcoder = Mock()
    transcoder.is_available.return_value = False
    with patch("whisper_transcribe.cli.build_transcoder", return_value=transcoder):
        code = cli.main([str(audio_file), "--config", str(config_file)])

    assert code == 1
    assert "ffmpeg not found" in capsys.readouterr().err


def test_transcription_failure(config_file, tmp_path, available_ffmpeg, fake_pipeline, capsys):
    broken = tmp_path / "broken.wav"
    broken.write_bytes(b"definitely not RIFF data")

    code = cli.main([str(broken), "--config", str(config_file)])

    assert code == 1
    captured = capsys.readouterr()
    assert "Error: Failed to read audio" in captured.err
    assert captured.out == ""
    assert broken.exists()


def test_invalid_config(tmp_path, audio_file, capsys):
    config = tmp_path / "bad.toml"
    config.write_text("[model\n", encoding="utf-8")

    assert cli.main([str(audio_file), "--config", str(config)]) == 1
    assert "Invalid configuration" in capsys.readouterr().err
