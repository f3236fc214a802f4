"""File comparison logic for sync operations."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from ..utils import format_timestamp
from .modes import SyncMode
from .scanner import LocalFile


class SyncAction(str, Enum):
    """Actions that can be taken for a source file."""

    CREATE = "create"
    """Copy a file that is missing from the destination"""

    UPDATE = "update"
    """Overwrite a destination file whose timestamp differs"""

    VERSION = "version"
    """Keep the destination file as a backup, then overwrite it"""

    SKIP = "skip"
    """Timestamps are equal, nothing to do"""


@dataclass
class SyncDecision:
    """Represents a decision about how to sync a file."""

    action: SyncAction
    """Action to take"""

    reason: str
    """Human-readable reason for this decision"""

    source_file: LocalFile
    """File in the source tree"""

    destination_file: Optional[LocalFile]
    """File at the mirrored destination path (if it exists)"""

    destination_path: Path
    """Mirrored destination path"""


class FileComparator:
    """Decides what to do with a source file given its destination counterpart.

    Files are considered in sync when their last modification times are
    equal. Content is never compared.
    """

    def __init__(self, sync_mode: SyncMode):
        """Initialize file comparator.

        Args:
            sync_mode: Sync mode to use for comparison
        """
        self.sync_mode = sync_mode

    def compare(
        self,
        source_file: LocalFile,
        destination_file: Optional[LocalFile],
        destination_path: Path,
    ) -> SyncDecision:
        """Compare a source file with its destination counterpart.

        Args:
            source_file: File in the source tree
            destination_file: File at the mirrored path, or None if missing
            destination_path: Mirrored destination path

        Returns:
            SyncDecision for this file
        """
        if destination_file is None:
            return SyncDecision(
                action=SyncAction.CREATE,
                reason="New source file",
                source_file=source_file,
                destination_file=None,
                destination_path=destination_path,
            )

        if source_file.mtime_ns == destination_file.mtime_ns:
            return SyncDecision(
                action=SyncAction.SKIP,
                reason="Files have the same modification time",
                source_file=source_file,
                destination_file=destination_file,
                destination_path=destination_path,
            )

        if self.sync_mode.uses_versioning:
            return SyncDecision(
                action=SyncAction.VERSION,
                reason="Modification time differs, keeping previous version",
                source_file=source_file,
                destination_file=destination_file,
                destination_path=destination_path,
            )

        return SyncDecision(
            action=SyncAction.UPDATE,
            reason="Modification time differs",
            source_file=source_file,
            destination_file=destination_file,
            destination_path=destination_path,
        )


def names_to_delete(
    destination_names: Iterable[str], source_names: Iterable[str]
) -> list[str]:
    """Names present in the destination but not in the source, sorted."""
    return sorted(set(destination_names) - set(source_names))


def versioned_name(path: Path, timestamp: datetime, date_format: str) -> str:
    """Build the backup name of a file.

    Args:
        path: File being replaced
        timestamp: Last modification time of the file being replaced
        date_format: Timestamp format (see utils.format_timestamp)

    Returns:
        ``<stem>_<timestamp><suffix>``

    Examples:
        >>> versioned_name(Path("b.txt"), datetime(2024, 1, 2, 3, 4, 5),
        ...                "yyyyMMddHHmmss")
        'b_20240102030405.txt'
    """
    return f"{path.stem}_{format_timestamp(timestamp, date_format)}{path.suffix}"
