"""Data models for Smart Tagger."""

import threading
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple


class TagStatus(Enum):
    """Status of the tags for an audio file."""
    COMPLETE = "complete"
    PARTIAL = "partial"
    MISSING = "missing"


@dataclass
class TrackMetadata:
    """Snapshot of the tag fields of a single track."""
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    album_artist: Optional[str] = None
    track_number: Optional[int] = None
    total_tracks: Optional[int] = None
    disc_number: Optional[int] = None
    total_discs: Optional[int] = None

    @property
    def track(self) -> Tuple[Optional[int], Optional[int]]:
        return self.track_number, self.total_tracks

    @property
    def disc(self) -> Tuple[Optional[int], Optional[int]]:
        return self.disc_number, self.total_discs

    def is_complete(self) -> bool:
        """Check if required tags are present."""
        required = [self.title, self.artist, self.album, self.track_number]
        return all(r is not None for r in required)

    def get_status(self) -> TagStatus:
        """Get the overall tag status."""
        if self.is_complete():
            return TagStatus.COMPLETE
        present = [self.title, self.artist, self.album, self.album_artist]
        if any(present) or self.track_number is not None:
            return TagStatus.PARTIAL
        return TagStatus.MISSING


@dataclass(frozen=True)
class TrackPlanEntry:
    """A file and the track number extracted from its name."""
    path: Path
    track_number: int

    @property
    def filename(self) -> str:
        return self.path.name


@dataclass
class BatchPlan:
    """Ordered set of track assignments awaiting confirmation."""
    entries: List[TrackPlanEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[TrackPlanEntry]:
        return iter(self.entries)

    @property
    def paths(self) -> List[Path]:
        return [entry.path for entry in self.entries]

    def track_numbers(self) -> Dict[Path, int]:
        """Map each planned path to its track number."""
        return {entry.path: entry.track_number for entry in self.entries}

    def duplicate_track_numbers(self) -> Dict[int, List[Path]]:
        """
        Find track numbers claimed by more than one file.

        Returns:
            Mapping of duplicated track number to the files carrying it.
        """
        counts = Counter(entry.track_number for entry in self.entries)
        return {
            number: [e.path for e in self.entries if e.track_number == number]
            for number, count in counts.items()
            if count > 1
        }


class ProgressCounter:
    """Countdown of remaining work items shared by worker threads."""

    def __init__(self, initial: int):
        if initial < 0:
            raise ValueError("initial count must not be negative")
        self._remaining = initial
        self._decrements = 0
        self._lock = threading.Lock()

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def decrements(self) -> int:
        return self._decrements

    def decrement(self) -> int:
        """Decrement by one and return the new remaining count."""
        with self._lock:
            if self._remaining == 0:
                raise RuntimeError("progress counter is already at zero")
            self._remaining -= 1
            self._decrements += 1
            return self._remaining


@dataclass
class FileResult:
    """Outcome of tagging one file in a batch."""
    path: Path
    track_number: int
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class BatchReport:
    """Results for a whole smart-tagging run."""
    results: List[FileResult] = field(default_factory=list)
    declined: bool = False

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> List[FileResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> List[FileResult]:
        return [r for r in self.results if not r.success]

    @property
    def all_succeeded(self) -> bool:
        return not self.declined and not self.failed


@dataclass
class ConversionResult:
    """Outcome of converting one file."""
    source: Path
    target: Path
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None
