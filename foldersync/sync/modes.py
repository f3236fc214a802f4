"""Sync modes for mirroring a source tree into a destination tree."""

from enum import Enum


class SyncMode(str, Enum):
    """How files are mirrored into the destination.

    Values are camelCase so they can be used directly in job files and in
    the literal ``source:mode:destination`` format.
    """

    COPY = "copy"
    """Copy new and changed files, never delete anything"""

    COPY_AND_DELETE = "copyAndDelete"
    """Like COPY, and delete destination entries missing from the source"""

    COPY_WITH_VERSIONING = "copyWithVersioning"
    """Like COPY, but keep a timestamped backup of every overwritten file"""

    @property
    def abbreviation(self) -> str:
        """Short form accepted on the command line."""
        return _ABBREVIATIONS[self]

    @property
    def allows_delete(self) -> bool:
        """Whether destination-only entries are removed."""
        return self is SyncMode.COPY_AND_DELETE

    @property
    def uses_versioning(self) -> bool:
        """Whether overwritten destination files are kept as backups."""
        return self is SyncMode.COPY_WITH_VERSIONING

    @classmethod
    def from_string(cls, value: str) -> "SyncMode":
        """Parse a sync mode from its value, abbreviation or member name.

        Args:
            value: Mode string, e.g. "copyAndDelete", "cad" or "COPY_AND_DELETE"

        Returns:
            Matching SyncMode

        Raises:
            ValueError: If the string does not name a sync mode

        Examples:
            >>> SyncMode.from_string("cwv")
            <SyncMode.COPY_WITH_VERSIONING: 'copyWithVersioning'>
        """
        normalized = value.strip().lower().replace("-", "_")
        for mode in cls:
            if normalized in (
                mode.value.lower(),
                mode.abbreviation,
                mode.name.lower(),
            ):
                return mode
        valid = ", ".join(f"{m.value} ({m.abbreviation})" for m in cls)
        raise ValueError(f"Invalid sync mode: {value!r}. Valid modes: {valid}")


_ABBREVIATIONS = {
    SyncMode.COPY: "c",
    SyncMode.COPY_AND_DELETE: "cad",
    SyncMode.COPY_WITH_VERSIONING: "cwv",
}
