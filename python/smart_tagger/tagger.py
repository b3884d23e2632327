"""Smart tagging: number every audio file in a folder and tag it as one album."""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional, Union

from smart_tagger.config import DEFAULT_ID3_VERSION, DEFAULT_WORKERS
from smart_tagger.errors import TaggerError
from smart_tagger.interactive import InteractivePrompts
from smart_tagger.models import (
    BatchPlan, BatchReport, FileResult, ProgressCounter, TrackPlanEntry
)
from smart_tagger.tag_handler import AudioTag, open_tag
from smart_tagger.utils import extract_track_number, list_audio_files

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[FileResult, int], None]


def build_title(track_number: int, filename: str) -> str:
    """Title that keeps the track number and original file name."""
    return f"Track-{track_number}-{filename}"


def plan_smart_tagging(directory: Union[str, Path]) -> BatchPlan:
    """
    Build the batch plan for a folder.

    Args:
        directory: Folder holding the audio files

    Returns:
        BatchPlan with one entry per supported file, sorted by file name

    Raises:
        DirectoryReadError: if the folder cannot be listed
        TrackExtractionError: if any file name has no usable track number
    """
    entries = [
        TrackPlanEntry(path=path, track_number=extract_track_number(path.name))
        for path in list_audio_files(directory)
    ]
    return BatchPlan(entries)


def write_smart_tag(tag: AudioTag, author: str, album: str, track_number: int,
                    total_tracks: int, filename: str) -> None:
    """Apply the smart-tag recipe to a tag and write it back."""
    tag.set_artist(author)
    tag.set_album_artist(author)
    tag.set_album(album)
    tag.set_title(build_title(track_number, filename))
    tag.set_track(track_number, total_tracks)
    tag.set_disc(1, 1)
    tag.write()


def apply_smart_tagging(plan: BatchPlan, author: str, album: str,
                        max_workers: int = DEFAULT_WORKERS,
                        counter: Optional[ProgressCounter] = None,
                        on_progress: Optional[ProgressCallback] = None,
                        id3_version: int = DEFAULT_ID3_VERSION) -> BatchReport:
    """
    Tag every planned file in parallel.

    Failures are recorded per file and never stop the other files. Files
    that were written before a failure keep their new tags.

    Args:
        plan: Confirmed batch plan
        author: Artist and album artist for every file
        album: Album for every file
        max_workers: Worker pool width
        counter: Shared countdown, created from the plan size if omitted
        on_progress: Called with each result and the remaining count
        id3_version: ID3v2 minor version written to MP3 files

    Returns:
        BatchReport with one result per entry, in plan order
    """
    total = len(plan)
    if counter is None:
        counter = ProgressCounter(total)
    if total == 0:
        return BatchReport()

    logger.info(f"Tagging {total} file(s) as {author!r} - {album!r}")

    def tag_entry(entry: TrackPlanEntry) -> FileResult:
        try:
            tag = open_tag(entry.path, id3_version=id3_version)
            write_smart_tag(tag, author, album, entry.track_number, total,
                            entry.filename)
            result = FileResult(entry.path, entry.track_number)
        except (TaggerError, ValueError, OSError) as e:
            logger.debug(f"Smart tagging failed for {entry.path}: {e}")
            result = FileResult(entry.path, entry.track_number, error=str(e))
        finally:
            remaining = counter.decrement()

        if on_progress is not None:
            on_progress(result, remaining)
        return result

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        results = list(executor.map(tag_entry, plan.entries))

    report = BatchReport(results=results)
    logger.info(
        f"Smart tagging finished: {len(report.succeeded)} written, "
        f"{len(report.failed)} failed"
    )
    return report


def run_smart_tagging(directory: Union[str, Path], author: str, album: str,
                      prompts: Optional[InteractivePrompts] = None,
                      max_workers: int = DEFAULT_WORKERS,
                      id3_version: int = DEFAULT_ID3_VERSION) -> BatchReport:
    """
    Plan, confirm and apply smart tags for a folder.

    Args:
        directory: Folder holding the audio files
        author: Artist and album artist for every file
        album: Album for every file
        prompts: Confirmation and reporting handler
        max_workers: Worker pool width
        id3_version: ID3v2 minor version written to MP3 files

    Returns:
        BatchReport, with declined=True if the plan was not confirmed
    """
    if prompts is None:
        prompts = InteractivePrompts()

    prompts.print(f"Writing smart tags for {directory} {author} {album}")
    plan = plan_smart_tagging(directory)

    duplicates = plan.duplicate_track_numbers()
    if duplicates:
        prompts.show_duplicates(duplicates)

    if not prompts.confirm_plan(plan):
        report = BatchReport(declined=True)
    else:
        report = apply_smart_tagging(
            plan, author, album,
            max_workers=max_workers,
            on_progress=prompts.show_file_result,
            id3_version=id3_version,
        )

    prompts.show_report(report)
    return report
