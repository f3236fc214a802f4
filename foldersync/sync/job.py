"""Sync job definition: what to mirror, where, and how."""

import logging
import re
import threading
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from ..exceptions import ConfigurationError
from ..utils import DEFAULT_DATE_FORMAT
from .events import EventCallback, EventDispatcher, LogEvent
from .exclusions import ExclusionMatcher
from .loglevel import DEFAULT_LOG_LEVEL, LogLevel, is_enabled, parse_log_level
from .modes import SyncMode
from .store import ExclusionStore

logger = logging.getLogger(__name__)


class SyncJob:
    """A named source/destination pair with its sync settings.

    The job validates its paths when created: the source must be an existing
    directory and the destination must not lie inside the source. A missing
    destination directory is created.

    Examples:
        >>> job = SyncJob("docs", "/home/user/docs", "/mnt/backup/docs",
        ...               SyncMode.COPY_AND_DELETE)
        >>> job.exclusions.add(r"\\.tmp$")
        >>> job.subscribe(print, LogLevel.ERROR)
    """

    def __init__(
        self,
        name: str,
        source: Union[str, Path],
        destination: Union[str, Path],
        sync_mode: Union[SyncMode, str] = SyncMode.COPY,
        log_level: Union[LogLevel, int, str] = DEFAULT_LOG_LEVEL,
        date_format: str = DEFAULT_DATE_FORMAT,
        exclusions: Optional[Iterable[str]] = None,
        store: Optional[ExclusionStore] = None,
    ):
        """Create a sync job.

        Args:
            name: Job name; jobs with the same name share stored exclusions
            source: Directory to mirror
            destination: Directory receiving the mirror
            sync_mode: How files are mirrored
            log_level: Mask of event categories to emit
            date_format: Timestamp format for versioned backups
            exclusions: Initial exclusion patterns
            store: Exclusion store to load this job's patterns from

        Raises:
            ConfigurationError: If the paths violate the job invariants
        """
        if not name:
            raise ConfigurationError("Sync job name must not be empty")

        self.name = name
        self._source = Path(source).expanduser()
        self._destination = Path(destination).expanduser()
        self._validate_paths(self._source, self._destination)

        self.sync_mode = sync_mode  # type: ignore[assignment]
        self.log_level = log_level  # type: ignore[assignment]
        self.date_format = date_format or DEFAULT_DATE_FORMAT
        self.store = store
        self.exclusions = ExclusionMatcher()
        self.events = EventDispatcher()
        self._cancel_event = threading.Event()

        if store is not None:
            self.load_exclusions()
        if exclusions:
            self.exclusions.add_from_list(exclusions)

    def __repr__(self) -> str:
        return (
            f"SyncJob(name={self.name!r}, source={str(self.source)!r}, "
            f"destination={str(self.destination)!r}, "
            f"sync_mode={self.sync_mode.value!r})"
        )

    # ------------------------------------------------------------------
    # Paths and settings
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_paths(source: Path, destination: Path) -> None:
        """Check the path invariants and create the destination if needed.

        Raises:
            ConfigurationError: If the source is missing or not a directory,
                or the destination is the source or lies inside it
        """
        if not source.exists():
            raise ConfigurationError(f"Source location does not exist: {source}")
        if not source.is_dir():
            raise ConfigurationError(f"Source location is not a directory: {source}")

        source_resolved = source.resolve()
        destination_resolved = destination.resolve()
        if (
            destination_resolved == source_resolved
            or source_resolved in destination_resolved.parents
        ):
            raise ConfigurationError(
                f"Destination path can not be located in source path: "
                f"{destination} is inside {source}"
            )

        if destination.exists() and not destination.is_dir():
            raise ConfigurationError(
                f"Destination location is not a directory: {destination}"
            )
        if not destination.exists():
            try:
                destination.mkdir(parents=True)
            except OSError as e:
                raise ConfigurationError(
                    f"Cannot create destination {destination}: {e}"
                ) from e
            logger.debug(f"Created destination directory {destination}")

    @property
    def source(self) -> Path:
        return self._source

    @source.setter
    def source(self, value: Union[str, Path]) -> None:
        path = Path(value).expanduser()
        self._validate_paths(path, self._destination)
        self._source = path

    @property
    def destination(self) -> Path:
        return self._destination

    @destination.setter
    def destination(self, value: Union[str, Path]) -> None:
        path = Path(value).expanduser()
        self._validate_paths(self._source, path)
        self._destination = path

    @property
    def sync_mode(self) -> SyncMode:
        return self._sync_mode

    @sync_mode.setter
    def sync_mode(self, value: Union[SyncMode, str]) -> None:
        if isinstance(value, SyncMode):
            self._sync_mode = value
            return
        try:
            self._sync_mode = SyncMode.from_string(value)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    @property
    def log_level(self) -> LogLevel:
        return self._log_level

    @log_level.setter
    def log_level(self, value: Union[LogLevel, int, str]) -> None:
        try:
            self._log_level = parse_log_level(value)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    # ------------------------------------------------------------------
    # Exclusions
    # ------------------------------------------------------------------

    def load_exclusions(self) -> None:
        """Replace the exclusions with the ones stored for this job name."""
        if self.store is None:
            raise ConfigurationError(f"Sync job {self.name!r} has no exclusion store")
        self.exclusions.clear()
        self.exclusions.add_from_source(self.store.load(self.name))

    def save_exclusions(self) -> None:
        """Persist the current exclusions under this job name."""
        if self.store is None:
            raise ConfigurationError(f"Sync job {self.name!r} has no exclusion store")
        self.store.save(self.name, list(self.exclusions.patterns))

    def is_excluded(self, path: Path) -> bool:
        """Check whether a path matches any exclusion pattern."""
        return self.exclusions.matches(path)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def subscribe(
        self,
        callback: EventCallback,
        categories: Optional[Iterable[LogLevel]] = None,
    ) -> None:
        """Register an event callback (see EventDispatcher.subscribe)."""
        self.events.subscribe(callback, categories)

    def unsubscribe(
        self,
        callback: EventCallback,
        categories: Optional[Iterable[LogLevel]] = None,
    ) -> None:
        """Remove an event callback."""
        self.events.unsubscribe(callback, categories)

    def emit(self, category: LogLevel, message: str) -> None:
        """Emit an event if its category is enabled in the log level mask."""
        if is_enabled(self.log_level, category):
            self.events.emit(LogEvent(job=self, category=category, message=message))

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def cancel(self) -> None:
        """Ask a running sync to stop at the next checkpoint."""
        self._cancel_event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def reset_cancel(self) -> None:
        self._cancel_event.clear()

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    @classmethod
    def parse_literal(
        cls,
        literal: str,
        name: Optional[str] = None,
        default_mode: SyncMode = SyncMode.COPY,
        **kwargs: Any,
    ) -> "SyncJob":
        """Create a job from the literal format ``source:mode:destination``.

        The mode may be omitted (``source:destination``), in which case
        ``default_mode`` is used. Windows drive letters (``C:\\data``) are
        recognised in both paths.

        Args:
            literal: Literal sync job
            name: Job name (defaults to the source directory name)
            default_mode: Sync mode used when the literal names none
            **kwargs: Further SyncJob arguments

        Returns:
            SyncJob instance

        Raises:
            ValueError: If the literal is malformed
            ConfigurationError: If the resulting job is invalid

        Examples:
            >>> SyncJob.parse_literal("/data:cad:/backup/data")  # doctest: +SKIP
        """
        parts = _split_literal(literal)
        if len(parts) == 2:
            source, destination = parts
            mode: Union[SyncMode, str] = default_mode
        elif len(parts) == 3:
            source, mode, destination = parts
            mode = SyncMode.from_string(mode)
        else:
            raise ValueError(
                f"Invalid sync job literal: {literal!r}. "
                "Expected 'source:mode:destination' or 'source:destination'"
            )
        if not source or not destination:
            raise ValueError(f"Invalid sync job literal: {literal!r}. Empty path")

        job_name = name or Path(source).expanduser().name or source
        return cls(job_name, source, destination, mode, **kwargs)

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], store: Optional[ExclusionStore] = None
    ) -> "SyncJob":
        """Create a job from a dictionary (job file entry).

        Raises:
            KeyError: If name, source or destination is missing
            ConfigurationError: If the job is invalid
        """
        return cls(
            name=data["name"],
            source=data["source"],
            destination=data["destination"],
            sync_mode=data.get("syncMode", SyncMode.COPY),
            log_level=data.get("logLevel", DEFAULT_LOG_LEVEL),
            date_format=data.get("dateFormat", DEFAULT_DATE_FORMAT),
            exclusions=data.get("exclude"),
            store=store,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert the job to a dictionary for JSON serialization."""
        return {
            "name": self.name,
            "source": str(self.source),
            "destination": str(self.destination),
            "syncMode": self.sync_mode.value,
            "dateFormat": self.date_format,
            "logLevel": int(self.log_level),
            "exclude": list(self.exclusions.patterns),
        }


_DRIVE = re.compile(r"^[A-Za-z]:[\\/]")


def _split_literal(literal: str) -> list[str]:
    """Split a literal into its path and mode parts.

    Colons that belong to a drive letter are not separators. When the
    source starts with a drive letter, a destination starting with one is
    kept whole; otherwise the middle part is the mode.
    """
    source_has_drive = bool(_DRIVE.match(literal))
    end = literal.find(":", 2 if source_has_drive else 0)
    if end == -1:
        return [literal]
    source, rest = literal[:end], literal[end + 1 :]

    mode, sep, destination = rest.partition(":")
    if not sep or (source_has_drive and _DRIVE.match(rest)):
        return [source, rest]
    return [source, mode, destination]
