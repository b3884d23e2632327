"""Interactive user prompts and confirmations."""

import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional

from smart_tagger.models import BatchPlan, BatchReport, FileResult, TagStatus, TrackMetadata

AFFIRMATIVE = "y"

STATUS_COLORS = {
    TagStatus.COMPLETE: "green",
    TagStatus.PARTIAL: "yellow",
    TagStatus.MISSING: "red",
}


class InteractivePrompts:
    """Handles user interaction and confirmations."""

    COLORS = {
        "reset": "\033[0m",
        "bold": "\033[1m",
        "green": "\033[92m",
        "yellow": "\033[93m",
        "red": "\033[91m",
        "cyan": "\033[96m",
        "dim": "\033[2m",
    }

    def __init__(self, no_color: bool = False, auto_yes: bool = False,
                 quiet: bool = False,
                 input_func: Optional[Callable[[str], str]] = None):
        """
        Initialize interactive prompts.

        Args:
            no_color: Disable colored output
            auto_yes: Auto-confirm the batch plan
            quiet: Suppress non-essential output
            input_func: Reads one line of operator input
        """
        self.no_color = no_color
        self.auto_yes = auto_yes
        self.quiet = quiet
        self.input_func = input_func or input
        self._print_lock = threading.Lock()

        if no_color:
            self.COLORS = {k: "" for k in self.COLORS}

    def _c(self, color: str, text: str) -> str:
        """Apply color to text."""
        return f"{self.COLORS.get(color, '')}{text}{self.COLORS['reset']}"

    def print(self, *args, **kwargs):
        """Print unless quiet mode."""
        if not self.quiet:
            with self._print_lock:
                print(*args, **kwargs)

    def show_plan(self, plan: BatchPlan) -> None:
        """Display the proposed track number for every file."""
        print(f"\n{self._c('cyan', f'Track numbers ({len(plan)} files):')}")
        for entry in plan:
            print(f"  {entry.path} -> {self._c('green', str(entry.track_number))}")

    def show_duplicates(self, duplicates: Dict[int, List[Path]]) -> None:
        """Warn about track numbers claimed by several files."""
        for number, paths in sorted(duplicates.items()):
            names = ", ".join(p.name for p in paths)
            print(self._c("yellow", f"Warning: track {number} is used by {names}"))

    def confirm_plan(self, plan: BatchPlan) -> bool:
        """
        Show the batch plan and ask once for approval.

        Only the exact answer 'y' (surrounding whitespace ignored) approves;
        anything else, including end of input, declines.

        Args:
            plan: Planned track assignments

        Returns:
            True if confirmed
        """
        self.show_plan(plan)

        if self.auto_yes:
            return True

        try:
            choice = self.input_func(f"{self._c('bold', 'Confirm? (y/n): ')}")
        except EOFError:
            print()
            return False
        return choice.strip() == AFFIRMATIVE

    def show_file_result(self, result: FileResult, remaining: int) -> None:
        """Report one finished file and the remaining count."""
        if result.success:
            line = f"Wrote tags: {result.path}"
        else:
            line = self._c("red", f"Failed: {result.path} - {result.error}")
        self.print(f"{line}\n{remaining} files left")

    def show_tags(self, path: Path, metadata: TrackMetadata) -> None:
        """Display one line of tags for a file."""
        status = metadata.get_status()
        print(
            f"{Path(path).name}: art: {metadata.artist!r} "
            f"alb_art: {metadata.album_artist!r} alb: {metadata.album!r} "
            f"track: {metadata.track_number!r} disc: {metadata.disc_number!r} "
            f"[{self._c(STATUS_COLORS[status], status.value)}]"
        )

    def show_report(self, report: BatchReport) -> None:
        """Display final batch summary."""
        if report.declined:
            self.print("Aborted, no files were changed.")
            return

        print(f"\n{self._c('bold', '=' * 60)}")
        print(f"{self._c('bold', 'Smart Tagging Summary')}")
        print("=" * 60)

        print(f"Files planned:       {report.total}")
        print(f"Tags written:        {self._c('green', str(len(report.succeeded)))}")
        print(f"Failed:              {len(report.failed)}")

        if report.failed:
            print(f"\n{self._c('red', 'Errors:')}")
            for result in report.failed[:10]:  # Limit displayed errors
                print(f"  - {result.path}: {result.error}")
            if len(report.failed) > 10:
                print(f"  ... and {len(report.failed) - 10} more errors")
            if report.succeeded:
                print(self._c(
                    "yellow",
                    f"{len(report.succeeded)} file(s) were already written "
                    "and keep their new tags.",
                ))
