"""Persistent log sink writing sync events to a text file."""

import logging
import re
import threading
from datetime import datetime
from pathlib import Path

from .events import LogEvent
from .job import SyncJob

logger = logging.getLogger(__name__)

DEFAULT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class LogFileSink:
    """Event callback appending ``[<time>] <message>`` lines to a file.

    Examples:
        >>> sink = LogFileSink(Path("/var/log/foldersync/docs.log"))
        >>> job.subscribe(sink)  # doctest: +SKIP
    """

    def __init__(self, path: Path, time_format: str = DEFAULT_TIME_FORMAT):
        """Initialize the sink.

        Args:
            path: Log file; parent directories are created on first write
            time_format: strftime format of the timestamp prefix (local time)
        """
        self.path = path
        self.time_format = time_format
        self._lock = threading.Lock()

    def format_event(self, event: LogEvent) -> str:
        timestamp = event.timestamp.astimezone().strftime(self.time_format)
        return f"[{timestamp}] {event.message}"

    def __call__(self, event: LogEvent) -> None:
        line = self.format_event(event)
        try:
            with self._lock:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(f"{line}\n")
        except OSError as e:
            logger.warning(f"Failed to write sync log {self.path}: {e}")


def log_file_for(job: SyncJob, log_dir: Path) -> Path:
    """Default log file of a job: ``<log_dir>/<job name>.log``."""
    safe_name = re.sub(r"[^A-Za-z0-9_.-]+", "_", job.name).strip("._") or "sync"
    return log_dir / f"{safe_name}.log"
