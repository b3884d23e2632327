"""Shared test fixtures for smart_tagger tests."""

import sys
from pathlib import Path

import pytest

# Add the python/ source root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from smart_tagger.models import TrackMetadata

# One MPEG-1 Layer III frame header followed by silence; enough for ID3 to
# prepend a tag to.
MP3_PAYLOAD = b"\xff\xfb\x90\x64" + b"\x00" * 413

# Smallest MP4 mutagen accepts: an ftyp atom and an empty moov atom.
M4A_PAYLOAD = (
    b"\x00\x00\x00\x10ftypM4A \x00\x00\x02\x00"
    b"\x00\x00\x00\x08moov"
)


def _make_audio_file(path: Path) -> Path:
    payload = M4A_PAYLOAD if path.suffix.lower() == ".m4a" else MP3_PAYLOAD
    path.write_bytes(payload)
    return path


@pytest.fixture
def make_audio_file(tmp_path):
    """Factory creating an untagged .mp3 or .m4a file in tmp_path."""
    def factory(name: str) -> Path:
        return _make_audio_file(tmp_path / name)
    return factory


@pytest.fixture
def mp3_file(make_audio_file):
    """An untagged MP3 file."""
    return make_audio_file("01-song.mp3")


@pytest.fixture
def m4a_file(make_audio_file):
    """An untagged M4A file."""
    return make_audio_file("01-song.m4a")


@pytest.fixture
def album_dir(make_audio_file, tmp_path):
    """Folder with one MP3, one M4A and a non-audio file."""
    make_audio_file("2-intro.mp3")
    make_audio_file("10-outro.m4a")
    (tmp_path / "notes.txt").write_text("not audio")
    return tmp_path


@pytest.fixture
def sample_metadata():
    """Complete metadata for a single-disc album track."""
    return TrackMetadata(
        title="Test Song",
        artist="Test Artist",
        album="Test Album",
        album_artist="Test Artist",
        track_number=1,
        total_tracks=10,
        disc_number=1,
        total_discs=1,
    )
