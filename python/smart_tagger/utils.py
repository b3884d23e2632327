"""Utility functions for Smart Tagger."""

import os
import re
from pathlib import Path
from typing import Iterable, List, Union

from smart_tagger.errors import DirectoryReadError, TrackExtractionError
from smart_tagger.tag_handler import MAX_NUMBER, SUPPORTED_EXTENSIONS

TRACK_NUMBER_PATTERN = re.compile(r"(\d+)", re.ASCII)


def extract_track_number(filename: Union[str, Path]) -> int:
    """Extract a track number from a filename.

    The first run of decimal digits in the name (extension excluded) is the
    track number, so '03 - Intro.mp3' gives 3 and 'cover.mp3' has none.

    Args:
        filename: File name or path

    Returns:
        Track number in the range 0..65535

    Raises:
        TrackExtractionError: if there is no digit run or it is out of range
    """
    stem = Path(filename).stem
    match = TRACK_NUMBER_PATTERN.search(stem)
    if match is None:
        raise TrackExtractionError(filename, "no digits in file name")

    number = int(match.group(1))
    if number > MAX_NUMBER:
        raise TrackExtractionError(
            filename, f"{match.group(1)} does not fit in 0..{MAX_NUMBER}"
        )
    return number


def list_audio_files(directory: Union[str, Path],
                     extensions: Iterable[str] = SUPPORTED_EXTENSIONS) -> List[Path]:
    """List audio files directly inside a directory.

    Args:
        directory: Folder to scan (not recursive)
        extensions: Lower-case extensions including the dot

    Returns:
        Matching file paths sorted by name

    Raises:
        DirectoryReadError: if the folder is missing or unreadable
    """
    folder = Path(directory)
    wanted = {ext.lower() for ext in extensions}

    if not folder.is_dir():
        raise DirectoryReadError(folder, "not a directory")

    try:
        entries = list(folder.iterdir())
    except OSError as e:
        raise DirectoryReadError(folder, str(e)) from e

    return sorted(
        (p for p in entries if p.is_file() and p.suffix.lower() in wanted),
        key=lambda p: p.name,
    )


def change_extension(filename, new_extension):
    """Change the file extension of a given filename.

    Args:
        filename (str): The original filename.
        new_extension (str): The new extension to apply.

    Returns:
        str: The filename with the new extension.
    """
    return os.path.splitext(filename)[0] + new_extension
