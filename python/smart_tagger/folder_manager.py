"""Folder management for tag listing and numbered renaming."""

import logging
from pathlib import Path
from typing import List, Tuple, Union

from smart_tagger.models import TrackMetadata
from smart_tagger.tag_handler import open_tag
from smart_tagger.utils import list_audio_files

logger = logging.getLogger(__name__)


def _normalize_extension(extension: str) -> str:
    extension = extension.lower()
    return extension if extension.startswith(".") else f".{extension}"


class FolderManager:
    """Lists tags and renames audio files inside one folder."""

    def read_folder_tags(self, folder_path: Union[str, Path],
                         extension: str) -> List[Tuple[Path, TrackMetadata]]:
        """
        Read the tags of every file with the given extension.

        Args:
            folder_path: Folder to scan
            extension: 'mp3' or 'm4a' (leading dot optional)

        Returns:
            (path, metadata) pairs sorted by file name
        """
        files = list_audio_files(folder_path, [_normalize_extension(extension)])
        return [(path, open_tag(path).to_metadata()) for path in files]

    def generate_numbered_name(self, index: int, name: str) -> str:
        """Prefix a file name with its position: 1-name.mp3."""
        return f"{index}-{name}"

    def rename_audio_file(self, file_path: Union[str, Path], new_name: str,
                          dry_run: bool = False) -> Tuple[bool, str]:
        """
        Rename audio file to new name.

        Args:
            file_path: Current file path
            new_name: New filename (not full path)
            dry_run: If True, don't actually rename

        Returns:
            (success, new_path or error message)
        """
        current = Path(file_path)
        new_path = current.parent / new_name

        if new_path.exists():
            return False, f"Target file already exists: {new_path}"

        if dry_run:
            return True, f"Would rename to: {new_name}"

        try:
            current.rename(new_path)
            return True, str(new_path)
        except OSError as e:
            return False, str(e)

    def number_files(self, folder_path: Union[str, Path], extension: str,
                     dry_run: bool = False) -> List[Tuple[Path, bool, str]]:
        """
        Prefix every file of one extension with its 1-based sorted position.

        Args:
            folder_path: Folder to renumber
            extension: 'mp3' or 'm4a' (leading dot optional)
            dry_run: If True, don't actually rename

        Returns:
            (original path, success, new path or message) per file
        """
        files = list_audio_files(folder_path, [_normalize_extension(extension)])
        results = []
        for index, path in enumerate(files, start=1):
            new_name = self.generate_numbered_name(index, path.name)
            success, message = self.rename_audio_file(path, new_name, dry_run)
            if not success:
                logger.debug(f"Failed to rename {path}: {message}")
            results.append((path, success, message))
        return results
