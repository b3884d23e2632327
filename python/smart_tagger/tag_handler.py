"""Format-agnostic tag access for MP3 (ID3v2) and M4A (MP4 atoms) files."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Tuple, Type, Union

from mutagen import MutagenError
from mutagen.id3 import ID3, ID3NoHeaderError, TALB, TIT2, TPE1, TPE2, TPOS, TRCK
from mutagen.mp4 import MP4, MP4Tags

from smart_tagger.errors import TagReadError, TagWriteError, UnsupportedFormatError
from smart_tagger.models import TrackMetadata

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
NumberPair = Tuple[Optional[int], Optional[int]]

MAX_NUMBER = 0xFFFF


def _check_pair(current: int, total: int) -> None:
    for value in (current, total):
        if not isinstance(value, int) or not 0 <= value <= MAX_NUMBER:
            raise ValueError(f"track/disc values must be in 0..{MAX_NUMBER}, got {value!r}")


def _require_file(path: Path) -> None:
    if not path.is_file():
        raise TagReadError(path, "file not found")


class AudioTag(ABC):
    """
    Tag state for one audio file.

    Subclasses wrap one mutagen tag container each. Callers only pick the
    subclass (see tag_class_for) and otherwise use this interface.

    Both formats read an empty text value as absent (None), and a track or
    disc total of 0 as unknown (None). A current number of 0 is kept.
    """

    extension: str = ""

    def __init__(self, path: PathLike):
        self.path = Path(path)

    @classmethod
    @abstractmethod
    def read(cls, path: PathLike, **options) -> "AudioTag":
        """Load tags from path, or an empty tag if the file has none."""

    @property
    @abstractmethod
    def artist(self) -> Optional[str]: ...

    @property
    @abstractmethod
    def album_artist(self) -> Optional[str]: ...

    @property
    @abstractmethod
    def album(self) -> Optional[str]: ...

    @property
    @abstractmethod
    def title(self) -> Optional[str]: ...

    @property
    @abstractmethod
    def track(self) -> NumberPair: ...

    @property
    @abstractmethod
    def disc(self) -> NumberPair: ...

    @abstractmethod
    def set_artist(self, name: str) -> None: ...

    @abstractmethod
    def set_album_artist(self, name: str) -> None: ...

    @abstractmethod
    def set_album(self, name: str) -> None: ...

    @abstractmethod
    def set_title(self, name: str) -> None: ...

    @abstractmethod
    def set_track(self, current: int, total: int) -> None: ...

    @abstractmethod
    def set_disc(self, current: int, total: int) -> None: ...

    @abstractmethod
    def _save(self, path: Path) -> None: ...

    @property
    def track_number(self) -> Optional[int]:
        return self.track[0]

    @property
    def total_tracks(self) -> Optional[int]:
        return self.track[1]

    @property
    def disc_number(self) -> Optional[int]:
        return self.disc[0]

    @property
    def total_discs(self) -> Optional[int]:
        return self.disc[1]

    def write(self, path: Optional[PathLike] = None) -> None:
        """
        Serialize tags back to disk.

        Args:
            path: Target file, defaults to the file the tags were read from

        Raises:
            TagWriteError: if the file is not writable or the codec rejects the tags
        """
        target = Path(path) if path is not None else self.path
        try:
            self._save(target)
        except (MutagenError, OSError, ValueError) as e:
            raise TagWriteError(target, str(e)) from e
        logger.debug(f"Wrote tags to {target}")

    def to_metadata(self) -> TrackMetadata:
        """Snapshot the current tag values."""
        track_number, total_tracks = self.track
        disc_number, total_discs = self.disc
        return TrackMetadata(
            title=self.title,
            artist=self.artist,
            album=self.album,
            album_artist=self.album_artist,
            track_number=track_number,
            total_tracks=total_tracks,
            disc_number=disc_number,
            total_discs=total_discs,
        )


class Id3Tag(AudioTag):
    """ID3v2 tags of an MP3 file."""

    extension = ".mp3"

    def __init__(self, path: PathLike, tags: Optional[ID3] = None,
                 v2_version: int = 4):
        super().__init__(path)
        self._tags = tags if tags is not None else ID3()
        self.v2_version = v2_version

    @classmethod
    def read(cls, path: PathLike, id3_version: int = 4, **options) -> "Id3Tag":
        path = Path(path)
        _require_file(path)
        try:
            tags = ID3(str(path))
        except ID3NoHeaderError:
            logger.debug(f"No ID3 header in {path}, starting empty")
            tags = None
        except MutagenError as e:
            logger.debug(f"Unreadable ID3 tag in {path} ({e}), starting empty")
            tags = None
        return cls(path, tags, v2_version=id3_version)

    def _get_text(self, key: str) -> Optional[str]:
        frame = self._tags.get(key)
        if frame and frame.text:
            value = str(frame.text[0])
            return value if value else None
        return None

    def _get_pair(self, key: str) -> NumberPair:
        return parse_number_pair(self._get_text(key) or "")

    @property
    def artist(self) -> Optional[str]:
        return self._get_text("TPE1")

    @property
    def album_artist(self) -> Optional[str]:
        return self._get_text("TPE2")

    @property
    def album(self) -> Optional[str]:
        return self._get_text("TALB")

    @property
    def title(self) -> Optional[str]:
        return self._get_text("TIT2")

    @property
    def track(self) -> NumberPair:
        return self._get_pair("TRCK")

    @property
    def disc(self) -> NumberPair:
        return self._get_pair("TPOS")

    def set_artist(self, name: str) -> None:
        self._tags.add(TPE1(encoding=3, text=name))

    def set_album_artist(self, name: str) -> None:
        self._tags.add(TPE2(encoding=3, text=name))

    def set_album(self, name: str) -> None:
        self._tags.add(TALB(encoding=3, text=name))

    def set_title(self, name: str) -> None:
        self._tags.add(TIT2(encoding=3, text=name))

    def set_track(self, current: int, total: int) -> None:
        _check_pair(current, total)
        self._tags.add(TRCK(encoding=3, text=f"{current}/{total}"))

    def set_disc(self, current: int, total: int) -> None:
        _check_pair(current, total)
        self._tags.add(TPOS(encoding=3, text=f"{current}/{total}"))

    def _save(self, path: Path) -> None:
        if self.v2_version == 3:
            self._tags.update_to_v23()
        self._tags.save(str(path), v2_version=self.v2_version)


class Mp4Tag(AudioTag):
    """iTunes-style atom tags of an M4A file."""

    extension = ".m4a"

    # MP4/M4A atom names (different from ID3)
    ATOMS = {
        "title": "\xa9nam",
        "artist": "\xa9ART",
        "album": "\xa9alb",
        "album_artist": "aART",
        "track": "trkn",  # list of (track_num, total)
        "disc": "disk",   # list of (disc_num, total)
    }

    def __init__(self, path: PathLike, tags: Optional[MP4Tags] = None):
        super().__init__(path)
        self._tags = tags if tags is not None else MP4Tags()

    @classmethod
    def read(cls, path: PathLike, **options) -> "Mp4Tag":
        path = Path(path)
        _require_file(path)
        try:
            tags = MP4(str(path)).tags
        except MutagenError as e:
            logger.debug(f"Unreadable MP4 container {path} ({e}), starting empty")
            tags = None
        return cls(path, tags)

    def _get_text(self, key: str) -> Optional[str]:
        value = self._tags.get(self.ATOMS[key])
        if isinstance(value, list) and value:
            return str(value[0]) if value[0] else None
        return None

    def _get_pair(self, key: str) -> NumberPair:
        value = self._tags.get(self.ATOMS[key])
        if not value:
            return None, None
        pair = value[0]
        current = pair[0] if pair else None
        total = pair[1] if pair and len(pair) > 1 else None
        return current, total or None

    @property
    def artist(self) -> Optional[str]:
        return self._get_text("artist")

    @property
    def album_artist(self) -> Optional[str]:
        return self._get_text("album_artist")

    @property
    def album(self) -> Optional[str]:
        return self._get_text("album")

    @property
    def title(self) -> Optional[str]:
        return self._get_text("title")

    @property
    def track(self) -> NumberPair:
        return self._get_pair("track")

    @property
    def disc(self) -> NumberPair:
        return self._get_pair("disc")

    def set_artist(self, name: str) -> None:
        self._tags[self.ATOMS["artist"]] = [name]

    def set_album_artist(self, name: str) -> None:
        self._tags[self.ATOMS["album_artist"]] = [name]

    def set_album(self, name: str) -> None:
        self._tags[self.ATOMS["album"]] = [name]

    def set_title(self, name: str) -> None:
        self._tags[self.ATOMS["title"]] = [name]

    def set_track(self, current: int, total: int) -> None:
        _check_pair(current, total)
        self._tags[self.ATOMS["track"]] = [(current, total)]

    def set_disc(self, current: int, total: int) -> None:
        _check_pair(current, total)
        self._tags[self.ATOMS["disc"]] = [(current, total)]

    def _save(self, path: Path) -> None:
        try:
            self._tags.save(str(path))
        except KeyError as e:
            # no moov atom to attach the tags to
            raise TagWriteError(path, f"not an MP4 container (missing {e})") from e


TAG_CLASSES = {cls.extension: cls for cls in (Id3Tag, Mp4Tag)}
SUPPORTED_EXTENSIONS = frozenset(TAG_CLASSES)


def parse_number_pair(value: str) -> NumberPair:
    """
    Parse track/disc string like '3/12' or '3'.

    A total of 0 means the total is unknown.

    Returns:
        (number, total) tuple
    """
    if not value:
        return None, None

    parts = value.split("/")
    try:
        num = int(parts[0]) if parts[0].strip() else None
        total = int(parts[1]) if len(parts) > 1 and parts[1].strip() else None
        return num, total or None
    except ValueError:
        return None, None


def is_supported(path: PathLike) -> bool:
    """Check if file format is supported."""
    return Path(path).suffix.lower() in SUPPORTED_EXTENSIONS


def tag_class_for(path: PathLike) -> Type[AudioTag]:
    """Pick the tag implementation for a file by its extension."""
    try:
        return TAG_CLASSES[Path(path).suffix.lower()]
    except KeyError:
        raise UnsupportedFormatError(
            path, f"expected one of {sorted(SUPPORTED_EXTENSIONS)}"
        ) from None


def open_tag(path: PathLike, **options) -> AudioTag:
    """Read the tags of a supported audio file."""
    tag = tag_class_for(path).read(path, **options)
    logger.debug(f"Read tags from {path}")
    return tag
