"""Directory listing utilities for sync operations."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class LocalFile:
    """Represents a file with the metadata used for comparison."""

    path: Path
    """Full path to the file"""

    size: int
    """File size in bytes"""

    mtime_ns: int
    """Last modification time in nanoseconds since the epoch"""

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def mtime_utc(self) -> datetime:
        """Last modification time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.mtime_ns / 1_000_000_000, tz=timezone.utc)

    @classmethod
    def from_path(cls, file_path: Path) -> "LocalFile":
        """Create LocalFile from a path.

        Args:
            file_path: Path to an existing file

        Returns:
            LocalFile instance

        Raises:
            OSError: If the file cannot be stat'ed
        """
        stat = file_path.stat()
        return cls(path=file_path, size=stat.st_size, mtime_ns=stat.st_mtime_ns)

    @classmethod
    def from_existing(cls, file_path: Path) -> Optional["LocalFile"]:
        """Create LocalFile if a regular file exists at the path, else None."""
        if not file_path.is_file():
            return None
        return cls.from_path(file_path)


@dataclass
class LocalDirectory:
    """Represents a directory found during a walk."""

    path: Path
    """Full path to the directory"""

    @property
    def name(self) -> str:
        return self.path.name


@dataclass
class DirectoryListing:
    """Files and subdirectories directly inside one directory."""

    path: Path
    files: dict[str, LocalFile] = field(default_factory=dict)
    directories: dict[str, LocalDirectory] = field(default_factory=dict)

    @property
    def file_names(self) -> set[str]:
        return set(self.files)

    @property
    def directory_names(self) -> set[str]:
        return set(self.directories)


def list_directory(directory: Path, missing_ok: bool = False) -> DirectoryListing:
    """List one level of a directory, without recursing.

    Entries are sorted by name. Symlinks are followed: a link to a directory
    is listed as a directory, a link to a file as a file. Dangling links and
    special files are skipped.

    Args:
        directory: Directory to list
        missing_ok: Return an empty listing if the directory does not exist

    Returns:
        DirectoryListing

    Raises:
        OSError: If the directory cannot be read (or is missing and
            missing_ok is False)
    """
    listing = DirectoryListing(path=directory)
    if missing_ok and not directory.exists():
        return listing

    for item in sorted(directory.iterdir(), key=lambda p: p.name):
        if item.is_dir():
            listing.directories[item.name] = LocalDirectory(path=item)
        elif item.is_file():
            try:
                listing.files[item.name] = LocalFile.from_path(item)
            except OSError as e:
                # Vanished between listing and stat
                logger.debug(f"Skipping {item}: {e}")
        else:
            logger.debug(f"Skipping special or dangling entry: {item}")

    return listing


def mirror_path(path: Path, source_root: Path, destination_root: Path) -> Path:
    """Map a path under the source root to the same place under the destination.

    The relative part of ``path`` is joined onto ``destination_root``, so
    repeated or overlapping names in ancestor directories are handled
    correctly.

    Args:
        path: Path inside source_root
        source_root: Root of the source tree
        destination_root: Root of the destination tree

    Returns:
        Mirrored destination path

    Raises:
        ValueError: If path is not inside source_root

    Examples:
        >>> mirror_path(Path("/src/a/src/b.txt"), Path("/src"), Path("/dst"))
        PosixPath('/dst/a/src/b.txt')
    """
    return destination_root / path.relative_to(source_root)
