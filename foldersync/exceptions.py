"""Exception classes for FolderSync."""


class FolderSyncError(Exception):
    """Base exception for all FolderSync errors."""


class ConfigurationError(FolderSyncError):
    """A sync job was configured with invalid paths or settings.

    Raised when the job is constructed (or its paths are changed), never
    during a sync run.
    """


class ExclusionPatternError(FolderSyncError, ValueError):
    """An exclusion pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid exclusion pattern {pattern!r}: {reason}")


class SyncConfigError(FolderSyncError):
    """A sync job file could not be loaded."""
