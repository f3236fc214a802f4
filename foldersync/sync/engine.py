"""Core sync engine mirroring a source tree into a destination tree."""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

from .comparator import FileComparator, SyncAction, SyncDecision, names_to_delete
from .job import SyncJob
from .loglevel import LogLevel
from .operations import SyncOperations
from .scanner import DirectoryListing, LocalFile, list_directory, mirror_path

logger = logging.getLogger(__name__)


@dataclass
class SyncStats:
    """Counters collected during one sync run."""

    files_visited: int = 0
    directories_visited: int = 0
    created: int = 0
    updated: int = 0
    versioned: int = 0
    skipped: int = 0
    files_deleted: int = 0
    directories_deleted: int = 0
    errors: int = 0
    cancelled: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class SyncEngine:
    """Core sync engine that mirrors a job's source into its destination.

    The walk handles one directory level at a time: files are copied,
    destination-only files removed (CopyAndDelete), subdirectories entered,
    then destination-only subdirectories removed. A failure on one entry is
    reported as an ERROR event and the walk continues with the next entry.

    Examples:
        >>> engine = SyncEngine()
        >>> job = SyncJob("docs", "/home/user/docs", "/mnt/backup/docs")
        >>> stats = engine.run(job)
        >>> future = engine.start_async(job)
        >>> engine.cancel(job)
    """

    def __init__(self, operations: Optional[SyncOperations] = None):
        """Initialize sync engine.

        Args:
            operations: Filesystem operations (mainly replaced in tests)
        """
        self.operations = operations or SyncOperations()
        self._executor: Optional[ThreadPoolExecutor] = None

    def __enter__(self) -> "SyncEngine":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()

    def run(self, job: SyncJob) -> SyncStats:
        """Run one full sync pass, blocking until it completes or is cancelled.

        Filesystem errors never propagate; they are emitted as ERROR events
        and counted in the returned statistics. The job's cancellation flag
        is cleared when the run ends so the job can be run again.

        Args:
            job: Sync job to run

        Returns:
            Statistics of the run
        """
        stats = SyncStats()
        comparator = FileComparator(job.sync_mode)
        start_time = time.time()
        logger.debug(
            f"Starting sync {job.name!r}: {job.source} -> {job.destination} "
            f"({job.sync_mode.value})"
        )

        try:
            self._sync_directory(job, comparator, job.source, job.destination, stats)
        except Exception as e:
            self._report_error(job, stats, job.source, e)
        finally:
            stats.cancelled = job.is_cancelled
            job.reset_cancel()

        elapsed = time.time() - start_time
        logger.debug(f"Sync {job.name!r} took {elapsed:.2f}s: {stats.to_dict()}")

        job.emit(
            LogLevel.FINISHED,
            "Sync cancelled" if stats.cancelled else "Sync finished",
        )
        return stats

    def cancel(self, job: SyncJob) -> None:
        """Ask a running sync of the job to stop.

        The walk checks the flag before each directory and each file, so the
        file being processed when cancel is called is still completed.
        """
        logger.debug(f"Cancelling sync {job.name!r}")
        job.cancel()

    def start_async(self, job: SyncJob) -> "Future[SyncStats]":
        """Run the job on a worker thread.

        Runs are queued on a single worker, so jobs started on the same
        engine never run concurrently.

        Returns:
            Future resolving to the run's statistics
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="foldersync"
            )
        return self._executor.submit(self.run, job)

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker thread used by start_async."""
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None

    def _sync_directory(
        self,
        job: SyncJob,
        comparator: FileComparator,
        source_dir: Path,
        destination_dir: Path,
        stats: SyncStats,
    ) -> None:
        """Sync one directory level, then recurse into subdirectories."""
        if job.is_cancelled:
            return

        source_listing = list_directory(source_dir)

        for source_file in source_listing.files.values():
            if job.is_excluded(source_file.path):
                logger.debug(f"Excluded file: {source_file.path}")
                continue
            if job.is_cancelled:
                return
            try:
                stats.files_visited += 1
                job.emit(LogLevel.FILE, str(source_file.path))
                destination_path = mirror_path(
                    source_file.path, job.source, job.destination
                )
                decision = comparator.compare(
                    source_file,
                    LocalFile.from_existing(destination_path),
                    destination_path,
                )
                self._execute_decision(job, decision, stats)
            except Exception as e:
                self._report_error(job, stats, source_file.path, e)

        if job.sync_mode.allows_delete:
            self._delete_destination_files(job, source_listing, destination_dir, stats)

        for source_subdir in source_listing.directories.values():
            if job.is_excluded(source_subdir.path):
                logger.debug(f"Excluded directory: {source_subdir.path}")
                continue
            if job.is_cancelled:
                return
            try:
                stats.directories_visited += 1
                job.emit(LogLevel.DIRECTORY, str(source_subdir.path))
                destination_subdir = mirror_path(
                    source_subdir.path, job.source, job.destination
                )
                if self.operations.create_directory(destination_subdir):
                    logger.debug(f"Created directory {destination_subdir}")
                self._sync_directory(
                    job, comparator, source_subdir.path, destination_subdir, stats
                )
            except Exception as e:
                self._report_error(job, stats, source_subdir.path, e)

        if job.sync_mode.allows_delete and not job.is_cancelled:
            self._delete_destination_directories(
                job, source_listing, destination_dir, stats
            )

    def _execute_decision(
        self, job: SyncJob, decision: SyncDecision, stats: SyncStats
    ) -> None:
        """Apply the comparator's decision for one file."""
        source = decision.source_file.path
        destination = decision.destination_path

        if decision.action == SyncAction.SKIP:
            stats.skipped += 1
            return

        if decision.action == SyncAction.VERSION:
            backup = self.operations.version_file(destination, job.date_format)
            logger.debug(f"Kept previous version of {destination} as {backup}")
            self.operations.copy_file(source, destination)
            stats.versioned += 1
        elif decision.action == SyncAction.UPDATE:
            self.operations.copy_file(source, destination)
            stats.updated += 1
        else:
            self.operations.copy_file(source, destination)
            stats.created += 1

        logger.debug(f"{decision.action.value}: {source} -> {destination}")

    def _keep_destination_entry(
        self, job: SyncJob, destination_path: Path, source_path: Path
    ) -> bool:
        """Whether a destination-only entry must be left alone.

        Excluded entries are kept, and so is the source root or any
        directory containing it (a source nested inside the destination).
        """
        if job.is_excluded(destination_path) or job.is_excluded(source_path):
            return True
        resolved = destination_path.resolve()
        source_root = job.source.resolve()
        if resolved == source_root or resolved in source_root.parents:
            logger.debug(f"Not deleting {destination_path}: contains the source")
            return True
        return False

    def _delete_destination_files(
        self,
        job: SyncJob,
        source_listing: DirectoryListing,
        destination_dir: Path,
        stats: SyncStats,
    ) -> None:
        """Delete destination files that have no source file of the same name."""
        destination_listing = list_directory(destination_dir, missing_ok=True)
        for name in names_to_delete(
            destination_listing.file_names, source_listing.file_names
        ):
            path = destination_dir / name
            if self._keep_destination_entry(job, path, source_listing.path / name):
                continue
            try:
                self.operations.delete_file(path)
                stats.files_deleted += 1
                logger.debug(f"Deleted file {path}")
                job.emit(LogLevel.FILE_DELETED, str(path))
            except Exception as e:
                self._report_error(job, stats, path, e)

    def _delete_destination_directories(
        self,
        job: SyncJob,
        source_listing: DirectoryListing,
        destination_dir: Path,
        stats: SyncStats,
    ) -> None:
        """Delete destination subtrees that have no source directory of the same name."""
        destination_listing = list_directory(destination_dir, missing_ok=True)
        for name in names_to_delete(
            destination_listing.directory_names, source_listing.directory_names
        ):
            path = destination_dir / name
            if self._keep_destination_entry(job, path, source_listing.path / name):
                continue
            try:
                self.operations.delete_directory(path)
                stats.directories_deleted += 1
                logger.debug(f"Deleted directory {path}")
                job.emit(LogLevel.DIRECTORY_DELETED, str(path))
            except Exception as e:
                self._report_error(job, stats, path, e)

    def _report_error(
        self, job: SyncJob, stats: SyncStats, path: Path, error: Exception
    ) -> None:
        stats.errors += 1
        logger.debug(f"Failed to sync {path}: {error}")
        job.emit(LogLevel.ERROR, f"{path} {error}")
