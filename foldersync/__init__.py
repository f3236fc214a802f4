"""FolderSync - mirror a directory tree into another, with optional deletion,
versioning of overwritten files and regex exclusions."""

from .exceptions import (
    ConfigurationError,
    ExclusionPatternError,
    FolderSyncError,
    SyncConfigError,
)
from .sync import (
    DEFAULT_LOG_LEVEL,
    ExclusionMatcher,
    LogEvent,
    LogLevel,
    SyncEngine,
    SyncJob,
    SyncMode,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "SyncEngine",
    "SyncJob",
    "SyncMode",
    "LogLevel",
    "LogEvent",
    "DEFAULT_LOG_LEVEL",
    "ExclusionMatcher",
    "FolderSyncError",
    "ConfigurationError",
    "ExclusionPatternError",
    "SyncConfigError",
]
