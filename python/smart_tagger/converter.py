"""Container conversion by shelling out to ffmpeg."""

import logging
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Union

from progressbar import ProgressBar
from pydub import AudioSegment
from pydub.utils import which

from smart_tagger.errors import ConversionError
from smart_tagger.models import ConversionResult
from smart_tagger.utils import change_extension, list_audio_files

logger = logging.getLogger(__name__)

# Source extension -> target extensions it may be converted to
SUPPORTED_CONVERSIONS = {
    "aac": {"mp3", "m4a"},
}

# Target extension -> (ffmpeg muxer, codec) used when re-encoding
EXPORT_FORMATS = {
    "mp3": ("mp3", None),
    "m4a": ("ipod", "aac"),
}


def validate_conversion(old: str, new: str) -> None:
    """Raise ValueError unless old -> new is a supported conversion."""
    if new not in SUPPORTED_CONVERSIONS.get(old, set()):
        raise ValueError(f"Unknown extension: cannot convert {old!r} to {new!r}")


def find_ffmpeg(ffmpeg_path: Optional[str] = None) -> str:
    """
    Resolve the ffmpeg executable.

    Args:
        ffmpeg_path: Explicit binary name or path, defaults to 'ffmpeg' on PATH

    Returns:
        Path to the executable

    Raises:
        ConversionError: if no executable is found
    """
    candidate = ffmpeg_path or "ffmpeg"
    resolved = which(candidate)
    if resolved is None:
        raise ConversionError(candidate, "ffmpeg executable not found")
    return resolved


def build_ffmpeg_command(ffmpeg: str, source: Path, target: Path) -> List[str]:
    """Stream-copy command; -n refuses to overwrite so ffmpeg never prompts."""
    return [ffmpeg, "-n", "-i", str(source), "-codec", "copy", str(target)]


def convert_file(source: Union[str, Path], new: str, ffmpeg: str,
                 reencode: bool = False) -> Path:
    """
    Convert one file next to the original.

    Args:
        source: File to convert
        new: Target extension without dot
        ffmpeg: ffmpeg executable
        reencode: Decode and re-encode with pydub instead of stream copying

    Returns:
        Path of the converted file

    Raises:
        ConversionError: if ffmpeg fails
    """
    source = Path(source)
    target = Path(change_extension(str(source), f".{new}"))

    if reencode:
        if target.exists():
            raise ConversionError(source, f"target already exists: {target}")
        muxer, codec = EXPORT_FORMATS[new]
        AudioSegment.converter = ffmpeg
        try:
            audio = AudioSegment.from_file(str(source), source.suffix.lstrip("."))
            parameters = ["-qscale:a", "0"] if new == "mp3" else None
            audio.export(str(target), format=muxer, codec=codec,
                         parameters=parameters)
        except Exception as e:
            raise ConversionError(source, str(e)) from e
        return target

    cmd = build_ffmpeg_command(ffmpeg, source, target)
    logger.debug(f"Running command: {' '.join(cmd)}")
    process = subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        stdin=subprocess.DEVNULL,
    )
    if process.returncode != 0:
        last_line = process.stderr.strip().splitlines()[-1:] or [""]
        raise ConversionError(
            source, f"ffmpeg exited with code {process.returncode}: {last_line[0]}"
        )
    return target


def convert_directory(directory: Union[str, Path], old: str, new: str,
                      ffmpeg_path: Optional[str] = None,
                      reencode: bool = False,
                      dry_run: bool = False,
                      on_progress: Optional[Callable[[ConversionResult, int], None]] = None,
                      show_bar: bool = False) -> List[ConversionResult]:
    """
    Convert every *.old file in a folder to *.new, one file at a time.

    A failing file is recorded and the remaining files are still converted.

    Args:
        directory: Folder to scan (not recursive)
        old: Source extension without dot
        new: Target extension without dot
        ffmpeg_path: ffmpeg executable, looked up on PATH if omitted
        reencode: Re-encode with pydub instead of stream copying
        dry_run: If True, only report what would be converted
        on_progress: Called with each result and the remaining count
        show_bar: Draw a progress bar on stderr

    Returns:
        One ConversionResult per source file

    Raises:
        ValueError: if old -> new is not supported
        DirectoryReadError: if the folder cannot be listed
        ConversionError: if ffmpeg cannot be found
    """
    validate_conversion(old, new)
    sources = list_audio_files(directory, [f".{old}"])
    ffmpeg = None if dry_run else find_ffmpeg(ffmpeg_path)

    progress_bar = ProgressBar(max_value=len(sources)) if show_bar and sources else None
    results = []
    remaining = len(sources)
    for source in sources:
        target = Path(change_extension(str(source), f".{new}"))
        if dry_run:
            result = ConversionResult(source, target)
        else:
            try:
                convert_file(source, new, ffmpeg, reencode=reencode)
                result = ConversionResult(source, target)
            except ConversionError as e:
                logger.debug(str(e))
                result = ConversionResult(source, target, error=str(e))

        results.append(result)
        remaining -= 1
        if progress_bar is not None:
            progress_bar.increment()
        if on_progress is not None:
            on_progress(result, remaining)

    if progress_bar is not None:
        progress_bar.finish()
    return results
