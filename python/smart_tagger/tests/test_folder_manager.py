"""Tests for folder_manager.py tag listing and renaming."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from smart_tagger.errors import DirectoryReadError
from smart_tagger.folder_manager import FolderManager
from smart_tagger.tag_handler import open_tag


@pytest.fixture
def manager():
    return FolderManager()


class TestReadFolderTags:
    """Tests for read_folder_tags."""

    def test_reads_only_requested_extension(self, manager, album_dir):
        tag = open_tag(album_dir / "2-intro.mp3")
        tag.set_artist("Ada")
        tag.write()

        rows = manager.read_folder_tags(album_dir, "mp3")

        assert [p.name for p, _ in rows] == ["2-intro.mp3"]
        assert rows[0][1].artist == "Ada"

    def test_accepts_leading_dot(self, manager, album_dir):
        rows = manager.read_folder_tags(album_dir, ".m4a")
        assert [p.name for p, _ in rows] == ["10-outro.m4a"]

    def test_missing_folder(self, manager, tmp_path):
        with pytest.raises(DirectoryReadError):
            manager.read_folder_tags(tmp_path / "missing", "mp3")


class TestRenameAudioFile:
    """Tests for rename_audio_file."""

    def test_renames(self, manager, mp3_file):
        success, new_path = manager.rename_audio_file(mp3_file, "new.mp3")
        assert success is True
        assert Path(new_path).name == "new.mp3"
        assert Path(new_path).exists()
        assert not mp3_file.exists()

    def test_same_name_is_an_existing_target(self, manager, mp3_file):
        """Should refuse a rename onto the file itself and leave it in place."""
        success, message = manager.rename_audio_file(mp3_file, mp3_file.name)
        assert success is False
        assert "already exists" in message
        assert mp3_file.exists()

    def test_refuses_to_overwrite(self, manager, mp3_file, make_audio_file):
        make_audio_file("taken.mp3")
        success, message = manager.rename_audio_file(mp3_file, "taken.mp3")
        assert success is False
        assert "already exists" in message
        assert mp3_file.exists()

    def test_dry_run(self, manager, mp3_file):
        success, message = manager.rename_audio_file(mp3_file, "new.mp3", dry_run=True)
        assert success is True
        assert message == "Would rename to: new.mp3"
        assert mp3_file.exists()


class TestNumberFiles:
    """Tests for number_files."""

    def test_prefixes_sorted_position(self, manager, tmp_path, make_audio_file):
        make_audio_file("b.mp3")
        make_audio_file("a.mp3")
        make_audio_file("c.m4a")

        results = manager.number_files(tmp_path, "mp3")

        assert [(p.name, ok) for p, ok, _ in results] == [("a.mp3", True), ("b.mp3", True)]
        assert sorted(p.name for p in tmp_path.iterdir()) == ["1-a.mp3", "2-b.mp3", "c.m4a"]

    def test_dry_run_keeps_names(self, manager, tmp_path, make_audio_file):
        make_audio_file("a.m4a")
        results = manager.number_files(tmp_path, "m4a", dry_run=True)
        assert results[0][2] == "Would rename to: 1-a.m4a"
        assert (tmp_path / "a.m4a").exists()

    def test_collision_is_reported(self, manager, tmp_path, make_audio_file):
        make_audio_file("a.mp3")
        (tmp_path / "1-a.mp3").mkdir()

        results = manager.number_files(tmp_path, "mp3")

        assert len(results) == 1
        path, success, message = results[0]
        assert path.name == "a.mp3"
        assert success is False
        assert "already exists" in message
