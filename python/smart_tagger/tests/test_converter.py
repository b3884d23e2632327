"""Tests for converter.py ffmpeg conversion."""

import logging
import subprocess
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from smart_tagger import converter
from smart_tagger.converter import (
    build_ffmpeg_command,
    convert_directory,
    convert_file,
    find_ffmpeg,
    validate_conversion,
)
from smart_tagger.errors import ConversionError, DirectoryReadError


@pytest.fixture
def aac_dir(tmp_path):
    """Folder with two .aac files and one unrelated file."""
    for name in ("1-a.aac", "2-b.aac", "notes.txt"):
        (tmp_path / name).write_bytes(b"\x00")
    return tmp_path


@pytest.fixture
def fake_ffmpeg(monkeypatch):
    """Resolve ffmpeg without touching PATH and record every command."""
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append((cmd, kwargs))
        Path(cmd[-1]).write_bytes(b"converted")
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    monkeypatch.setattr(converter, "which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(converter.subprocess, "run", fake_run)
    return calls


class TestValidateConversion:
    """Tests for validate_conversion."""

    @pytest.mark.parametrize("new", ["mp3", "m4a"])
    def test_aac_targets(self, new):
        validate_conversion("aac", new)

    @pytest.mark.parametrize("old, new", [("aac", "flac"), ("mp3", "m4a"), ("wav", "mp3")])
    def test_rejects_unknown(self, old, new):
        with pytest.raises(ValueError, match="Unknown extension"):
            validate_conversion(old, new)


class TestFindFfmpeg:
    """Tests for find_ffmpeg."""

    def test_uses_path_lookup(self, monkeypatch):
        monkeypatch.setattr(converter, "which", lambda name: f"/opt/bin/{name}")
        assert find_ffmpeg() == "/opt/bin/ffmpeg"
        assert find_ffmpeg("avconv") == "/opt/bin/avconv"

    def test_missing_binary(self, monkeypatch):
        monkeypatch.setattr(converter, "which", lambda name: None)
        with pytest.raises(ConversionError, match="ffmpeg executable not found"):
            find_ffmpeg()


class TestConvertFile:
    """Tests for convert_file."""

    def test_command_copies_stream(self):
        cmd = build_ffmpeg_command("ffmpeg", Path("a.aac"), Path("a.mp3"))
        assert cmd == ["ffmpeg", "-n", "-i", "a.aac", "-codec", "copy", "a.mp3"]

    def test_runs_ffmpeg_without_stdin(self, aac_dir, fake_ffmpeg):
        target = convert_file(aac_dir / "1-a.aac", "m4a", "/usr/bin/ffmpeg")

        assert target == aac_dir / "1-a.m4a"
        cmd, kwargs = fake_ffmpeg[0]
        assert cmd[-1] == str(target)
        assert kwargs["stdin"] is subprocess.DEVNULL
        assert kwargs["capture_output"] is True

    def test_nonzero_exit_raises(self, aac_dir, monkeypatch):
        def failing_run(cmd, **kwargs):
            return subprocess.CompletedProcess(
                cmd, 1, stdout="", stderr="banner\nFile '1-a.mp3' already exists. Exiting.\n"
            )

        monkeypatch.setattr(converter.subprocess, "run", failing_run)
        with pytest.raises(ConversionError) as exc_info:
            convert_file(aac_dir / "1-a.aac", "mp3", "ffmpeg")
        assert "code 1" in str(exc_info.value)
        assert "already exists" in str(exc_info.value)


class TestConvertDirectory:
    """Tests for convert_directory."""

    def test_converts_matching_files(self, aac_dir, fake_ffmpeg):
        progress = []
        results = convert_directory(
            aac_dir, "aac", "mp3",
            on_progress=lambda result, remaining: progress.append(remaining),
        )

        assert [r.target.name for r in results] == ["1-a.mp3", "2-b.mp3"]
        assert all(r.success for r in results)
        assert progress == [1, 0]
        assert len(fake_ffmpeg) == 2
        assert fake_ffmpeg[0][0][0] == "/usr/bin/ffmpeg"

    def test_failure_does_not_stop_batch(self, aac_dir, monkeypatch):
        def run(cmd, **kwargs):
            code = 1 if cmd[3].endswith("1-a.aac") else 0
            return subprocess.CompletedProcess(cmd, code, stdout="", stderr="bad input")

        monkeypatch.setattr(converter, "which", lambda name: name)
        monkeypatch.setattr(converter.subprocess, "run", run)

        results = convert_directory(aac_dir, "aac", "m4a")

        assert [r.success for r in results] == [False, True]
        assert "bad input" in results[0].error

    def test_failure_logged_at_debug_only(self, aac_dir, monkeypatch, caplog):
        def run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="bad input")

        monkeypatch.setattr(converter, "which", lambda name: name)
        monkeypatch.setattr(converter.subprocess, "run", run)

        with caplog.at_level(logging.DEBUG, logger="smart_tagger"):
            convert_directory(aac_dir, "aac", "mp3")

        assert [r.levelno for r in caplog.records if "bad input" in r.getMessage()] == [
            logging.DEBUG, logging.DEBUG
        ]

    def test_dry_run_skips_ffmpeg(self, aac_dir, monkeypatch):
        def no_run(cmd, **kwargs):
            raise AssertionError("ffmpeg should not run")

        monkeypatch.setattr(converter, "which", lambda name: None)
        monkeypatch.setattr(converter.subprocess, "run", no_run)

        results = convert_directory(aac_dir, "aac", "mp3", dry_run=True)

        assert [r.target.name for r in results] == ["1-a.mp3", "2-b.mp3"]
        assert not (aac_dir / "1-a.mp3").exists()

    def test_unknown_conversion(self, aac_dir):
        with pytest.raises(ValueError):
            convert_directory(aac_dir, "flac", "mp3")

    def test_missing_folder(self, tmp_path, fake_ffmpeg):
        with pytest.raises(DirectoryReadError):
            convert_directory(tmp_path / "missing", "aac", "mp3")

    def test_progress_bar(self, aac_dir, fake_ffmpeg):
        results = convert_directory(aac_dir, "aac", "mp3", show_bar=True)
        assert len(results) == 2
