"""Filesystem operations performed by the sync engine."""

import logging
import shutil
from pathlib import Path

from .comparator import versioned_name
from .scanner import LocalFile

logger = logging.getLogger(__name__)


class SyncOperations:
    """Copy, version and delete operations on local files.

    Every method raises OSError (or a subclass) on failure; the engine turns
    those into error events.
    """

    def copy_file(self, source: Path, destination: Path) -> Path:
        """Copy a file's content and timestamps, replacing any existing file.

        Args:
            source: File to copy
            destination: Target path

        Returns:
            Destination path

        Raises:
            IsADirectoryError: If a directory (or other non-file) occupies
                the destination path
        """
        if destination.exists() and not destination.is_file():
            raise IsADirectoryError(f"Destination is not a file: {destination}")
        shutil.copy2(source, destination)
        return destination

    def version_file(self, path: Path, date_format: str) -> Path:
        """Rename a file to its timestamped backup name in the same directory.

        Args:
            path: Existing file about to be overwritten
            date_format: Timestamp format for the backup name

        Returns:
            Path of the backup

        Raises:
            FileExistsError: If a backup with that name already exists
        """
        modified = LocalFile.from_path(path).mtime_utc
        backup = path.with_name(versioned_name(path, modified, date_format))
        if backup.exists():
            raise FileExistsError(f"Backup already exists: {backup}")
        path.rename(backup)
        logger.debug(f"Versioned {path} -> {backup.name}")
        return backup

    def delete_file(self, path: Path) -> None:
        """Delete a file."""
        path.unlink()

    def delete_directory(self, path: Path) -> None:
        """Delete a directory and everything below it.

        A symlink to a directory is removed without touching its target.
        """
        if path.is_symlink():
            path.unlink()
            return
        shutil.rmtree(path)

    def create_directory(self, path: Path) -> bool:
        """Create a directory if it does not exist.

        Returns:
            True if the directory was created
        """
        if path.is_dir():
            return False
        path.mkdir(parents=True)
        return True
