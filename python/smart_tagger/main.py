#!/usr/bin/env python3
"""
Smart Tagger - batch tag editing, numbering and conversion for MP3/M4A files.

Usage:
    smart-tagger write-smart /path/to/album "Author" "Album" [options]
"""

import argparse
import logging
import sys
from pathlib import Path

from smart_tagger.config import eprint, load_config, setup_logging, validate_config
from smart_tagger.converter import SUPPORTED_CONVERSIONS, convert_directory
from smart_tagger.errors import TaggerError
from smart_tagger.folder_manager import FolderManager
from smart_tagger.interactive import InteractivePrompts
from smart_tagger.models import ConversionResult
from smart_tagger.tag_handler import MAX_NUMBER, open_tag
from smart_tagger.tagger import run_smart_tagging

logger = logging.getLogger(__name__)

EXTENSIONS = ["mp3", "m4a"]


class TagCommands:
    """Runs one CLI subcommand."""

    def __init__(self, config: dict, args: argparse.Namespace,
                 prompts: InteractivePrompts):
        """
        Initialize command runner.

        Args:
            config: Configuration dictionary
            args: CLI arguments
            prompts: Interactive prompts handler
        """
        self.config = config
        self.args = args
        self.prompts = prompts
        self.folder_manager = FolderManager()

    def run(self) -> int:
        """Dispatch to the selected subcommand and return the exit code."""
        handlers = {
            "list": self.list_tags,
            "write": self.write_empty,
            "write-smart": self.write_smart,
            "convert": self.convert,
            "number": self.number,
            "set": self.set_tags,
        }
        return handlers[self.args.command]()

    def list_tags(self) -> int:
        """Print the tags of every file with the chosen extension."""
        for path, metadata in self.folder_manager.read_folder_tags(
            self.args.path, self.args.ext
        ):
            self.prompts.show_tags(path, metadata)
        return 0

    def write_empty(self) -> int:
        """Write the current (possibly empty) tags back to one file."""
        tag = open_tag(self.args.file, id3_version=self.config["id3_version"])
        tag.write()
        self.prompts.print(f"Wrote tags: {self.args.file}")
        return 0

    def write_smart(self) -> int:
        """Number and tag every audio file in a folder."""
        workers = self.args.workers or self.config["workers"]
        report = run_smart_tagging(
            self.args.path, self.args.author, self.args.album,
            prompts=self.prompts,
            max_workers=workers,
            id3_version=self.config["id3_version"],
        )
        return 1 if report.failed else 0

    def convert(self) -> int:
        """Convert every *.old file in a folder to *.new."""
        def show(result: ConversionResult, remaining: int) -> None:
            if self.args.dry_run:
                self.prompts.print(f"  [DRY RUN] Would convert: {result.source} -> {result.target.name}")
            elif result.success:
                self.prompts.print(f"Converted: {result.source} -> {result.target.name}")
            else:
                self.prompts.print(f"Failed: {result.error}")
            self.prompts.print(f"{remaining} files left")

        results = convert_directory(
            self.args.path, self.args.old, self.args.new,
            ffmpeg_path=self.config.get("ffmpeg_path"),
            reencode=self.args.reencode,
            dry_run=self.args.dry_run,
            on_progress=None if self.args.progress else show,
            show_bar=self.args.progress,
        )
        for result in results:
            if self.args.progress and not result.success:
                self.prompts.print(f"Failed: {result.error}")
        return 1 if any(not r.success for r in results) else 0

    def number(self) -> int:
        """Prefix files with their sorted position."""
        failures = 0
        for path, success, message in self.folder_manager.number_files(
            self.args.path, self.args.ext, dry_run=self.args.dry_run
        ):
            if not success:
                failures += 1
                self.prompts.print(f"  Failed: {path.name} - {message}")
            elif self.args.dry_run:
                self.prompts.print(f"  [DRY RUN] {path.name}: {message}")
            else:
                self.prompts.print(f"  Renamed: {path.name} -> {Path(message).name}")
        return 1 if failures else 0

    def set_tags(self) -> int:
        """Set individual fields on one file."""
        tag = open_tag(self.args.file, id3_version=self.config["id3_version"])
        if self.args.artist is not None:
            tag.set_artist(self.args.artist)
            tag.set_album_artist(self.args.artist)
        if self.args.album is not None:
            tag.set_album(self.args.album)
        if self.args.title is not None:
            tag.set_title(self.args.title)
        if self.args.track is not None:
            tag.set_track(self.args.track, 1)
        tag.write()
        self.prompts.print(f"Wrote tags: {self.args.file}")
        return 0


def _track_number(value: str) -> int:
    number = int(value)
    if not 0 <= number <= MAX_NUMBER:
        raise argparse.ArgumentTypeError(f"track must be in 0..{MAX_NUMBER}")
    return number


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build argument parser."""
    parser = argparse.ArgumentParser(
        description="Batch tag tools for MP3 (ID3v2) and M4A files.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Tag every file in a folder as one album, numbered from the file names
  smart-tagger write-smart /path/to/album "Ada" "Demo"

  # Show the tags of all MP3 files
  smart-tagger list mp3 /path/to/album

  # Prefix files with 1-, 2-, ... in name order
  smart-tagger number /path/to/album m4a --dry-run

  # Set a single file
  smart-tagger set song.mp3 --artist "Ada" --track 3
"""
    )

    # Global options
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to .env file (default: ./.env)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging"
    )

    parser.add_argument(
        "--log-file",
        help="Also write debug logging to this file"
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-essential output"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="list all tags with ext")
    list_parser.add_argument("ext", choices=EXTENSIONS)
    list_parser.add_argument("path", help="Folder to list")

    write_parser = subparsers.add_parser("write", help="write empty tags")
    write_parser.add_argument("file", help="Audio file")

    smart_parser = subparsers.add_parser(
        "write-smart", help="write smart tags according to file name"
    )
    smart_parser.add_argument("path", help="Folder of audio files")
    smart_parser.add_argument("author", help="Artist and album artist")
    smart_parser.add_argument("album", help="Album name")
    smart_parser.add_argument(
        "--workers",
        type=_positive_int,
        help="Parallel writers (default: SMART_TAGGER_WORKERS or 32)"
    )
    smart_parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Skip the confirmation prompt"
    )

    convert_parser = subparsers.add_parser("convert", help="convert aac files with ffmpeg")
    convert_parser.add_argument("path", help="Folder of files to convert")
    convert_parser.add_argument("old", help="Source extension, e.g. aac")
    convert_parser.add_argument("new", help="Target extension, mp3 or m4a")
    convert_parser.add_argument(
        "--reencode",
        action="store_true",
        help="Re-encode the audio instead of copying the stream"
    )
    convert_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview conversions without running ffmpeg"
    )
    convert_parser.add_argument(
        "--progress",
        action="store_true",
        help="Draw a progress bar instead of one line per file"
    )

    number_parser = subparsers.add_parser("number", help="rename the files")
    number_parser.add_argument("path", help="Folder to renumber")
    number_parser.add_argument("ext", choices=EXTENSIONS)
    number_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview renames without applying them"
    )

    set_parser = subparsers.add_parser("set", help="set a single file")
    set_parser.add_argument("file", help="the filename")
    set_parser.add_argument("--artist", "-a", help="the artist")
    set_parser.add_argument("--album", "-l", help="the album")
    set_parser.add_argument("--title", "-t", help="the title")
    set_parser.add_argument("--track", "-r", type=_track_number, help="the track number")

    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "convert":
        allowed = SUPPORTED_CONVERSIONS.get(args.old)
        if not allowed or args.new not in allowed:
            parser.error(f"Unknown extension: cannot convert {args.old} to {args.new}")

    # Load configuration
    config = load_config(args.env_file)
    problems = validate_config(config)
    if problems:
        for problem in problems:
            eprint(f"Invalid configuration: {problem}")
        return 1

    setup_logging(args.verbose, args.log_file or config.get("log_file"))

    prompts = InteractivePrompts(
        no_color=args.no_color,
        auto_yes=getattr(args, "yes", False),
        quiet=args.quiet
    )

    try:
        return TagCommands(config, args, prompts).run()
    except TaggerError as e:
        logger.debug("Command failed", exc_info=True)
        eprint(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
