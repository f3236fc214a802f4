"""Sync engine for FolderSync - mirror a directory tree into another."""

from .comparator import FileComparator, SyncAction, SyncDecision
from .config import load_sync_jobs_from_json
from .engine import SyncEngine, SyncStats
from .events import EventDispatcher, LogEvent
from .exclusions import ExclusionMatcher, read_exclusion_file, write_exclusion_file
from .job import SyncJob
from .logsink import LogFileSink, log_file_for
from .loglevel import (
    ALL_LOG_LEVELS,
    DEFAULT_LOG_LEVEL,
    LogLevel,
    describe_log_level,
    is_enabled,
    parse_log_level,
)
from .modes import SyncMode
from .operations import SyncOperations
from .scanner import DirectoryListing, LocalDirectory, LocalFile, list_directory
from .store import ExclusionStore, FileExclusionStore, MemoryExclusionStore

__all__ = [
    "SyncEngine",
    "SyncStats",
    "SyncJob",
    "SyncMode",
    "SyncOperations",
    "LogLevel",
    "DEFAULT_LOG_LEVEL",
    "ALL_LOG_LEVELS",
    "is_enabled",
    "describe_log_level",
    "parse_log_level",
    "LogEvent",
    "EventDispatcher",
    "ExclusionMatcher",
    "read_exclusion_file",
    "write_exclusion_file",
    "ExclusionStore",
    "FileExclusionStore",
    "MemoryExclusionStore",
    "LogFileSink",
    "log_file_for",
    "load_sync_jobs_from_json",
    "FileComparator",
    "SyncAction",
    "SyncDecision",
    "DirectoryListing",
    "LocalDirectory",
    "LocalFile",
    "list_directory",
]
