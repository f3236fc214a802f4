"""Persistence of exclusion lists keyed by job name.

A job created with the same name as an earlier one picks up the exclusion
patterns stored for that name. The engine never touches storage itself;
jobs talk to an ExclusionStore handed to them by the caller.
"""

import hashlib
import logging
import re
from pathlib import Path
from typing import Optional, Protocol

from .exclusions import read_exclusion_file, write_exclusion_file

logger = logging.getLogger(__name__)


class ExclusionStore(Protocol):
    """Loads and saves exclusion pattern lists by job name."""

    def load(self, name: str) -> list[str]:
        """Return the stored lines for a job (empty if none)."""
        ...

    def save(self, name: str, patterns: list[str]) -> None:
        """Replace the stored patterns for a job."""
        ...

    def delete(self, name: str) -> bool:
        """Remove the stored patterns for a job; True if any existed."""
        ...


class MemoryExclusionStore:
    """In-memory exclusion store, mainly for tests and embedding."""

    def __init__(self) -> None:
        self._data: dict[str, list[str]] = {}

    def load(self, name: str) -> list[str]:
        return list(self._data.get(name, []))

    def save(self, name: str, patterns: list[str]) -> None:
        self._data[name] = list(patterns)

    def delete(self, name: str) -> bool:
        return self._data.pop(name, None) is not None

    def names(self) -> list[str]:
        return sorted(self._data)


class FileExclusionStore:
    """Stores each job's exclusion list as a plain text file.

    Files hold one pattern per line and may contain ``;``/``#`` comments
    when edited by hand. The file name is derived from the job name so
    that any name can be used safely.
    """

    def __init__(self, store_dir: Optional[Path] = None):
        """Initialize the store.

        Args:
            store_dir: Directory holding the exclusion files. Defaults to
                      the ``exclusions`` directory of the FolderSync config
        """
        if store_dir is None:
            from ..config import config

            store_dir = config.exclusions_dir
        self.store_dir = store_dir
        self.store_dir.mkdir(parents=True, exist_ok=True)

    def _get_store_key(self, name: str) -> str:
        """Generate a file-system safe key for a job name.

        Args:
            name: Job name

        Returns:
            Readable prefix followed by a short hash of the name
        """
        prefix = re.sub(r"[^A-Za-z0-9_.-]+", "_", name).strip("._")[:40]
        digest = hashlib.sha256(name.encode()).hexdigest()[:12]
        return f"{prefix}-{digest}" if prefix else digest

    def get_store_file(self, name: str) -> Path:
        """Get the exclusion file path for a job name."""
        return self.store_dir / f"{self._get_store_key(name)}.exclude"

    def load(self, name: str) -> list[str]:
        """Load the exclusion lines stored for a job.

        Returns:
            Stored lines, or an empty list if none exist or the file
            cannot be read
        """
        store_file = self.get_store_file(name)
        try:
            lines = read_exclusion_file(store_file)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to load exclusions for {name!r}: {e}")
            return []
        logger.debug(f"Loaded {len(lines)} exclusion line(s) from {store_file}")
        return lines

    def save(self, name: str, patterns: list[str]) -> None:
        """Save the exclusion patterns for a job."""
        store_file = self.get_store_file(name)
        write_exclusion_file(store_file, patterns)
        logger.debug(f"Saved {len(patterns)} exclusion(s) to {store_file}")

    def delete(self, name: str) -> bool:
        """Delete the stored exclusions for a job.

        Returns:
            True if a file was removed, False if none existed
        """
        store_file = self.get_store_file(name)
        if store_file.exists():
            store_file.unlink()
            logger.debug(f"Cleared exclusions at {store_file}")
            return True
        return False
