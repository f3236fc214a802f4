"""CLI interface for FolderSync."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from .config import config
from .exceptions import FolderSyncError
from .output import OutputFormatter
from .sync import (
    ExclusionMatcher,
    FileExclusionStore,
    LogEvent,
    LogFileSink,
    LogLevel,
    SyncEngine,
    SyncJob,
    SyncMode,
    SyncStats,
    describe_log_level,
    load_sync_jobs_from_json,
    log_file_for,
    parse_log_level,
    read_exclusion_file,
)

logger = logging.getLogger(__name__)

MODE_CHOICES = [mode.value for mode in SyncMode] + [
    mode.abbreviation for mode in SyncMode
]

EVENT_LABELS = {
    LogLevel.ERROR: ("ERROR", "bold red"),
    LogLevel.DIRECTORY: ("DIR", "blue"),
    LogLevel.FILE: ("FILE", ""),
    LogLevel.FINISHED: ("DONE", "green"),
    LogLevel.FILE_DELETED: ("DEL", "yellow"),
    LogLevel.DIRECTORY_DELETED: ("DELDIR", "yellow"),
}


def _event_printer(out: OutputFormatter):
    """Create an event callback printing events to the console."""

    def print_event(event: LogEvent) -> None:
        label, style = EVENT_LABELS.get(event.category, (event.category.name, ""))
        if event.category == LogLevel.ERROR:
            out.error(f"{label:<6} {event.message}")
        elif not out.quiet and not out.json_output:
            out.console.print(
                f"{label:<6} {event.message}",
                style=style or None,
                markup=False,
                soft_wrap=True,
            )

    return print_event


def _run_job(engine: SyncEngine, job: SyncJob, out: OutputFormatter) -> SyncStats:
    """Run a job on the engine's worker thread; Ctrl+C cancels it."""
    future = engine.start_async(job)
    try:
        return future.result()
    except KeyboardInterrupt:
        out.warning("\nCancelling sync...")
        engine.cancel(job)
        future.result()
        raise


def _display_summary(out: OutputFormatter, job: SyncJob, stats: SyncStats) -> None:
    out.print_summary(
        f"Sync {job.name}" + (" (cancelled)" if stats.cancelled else ""),
        [
            ("Files visited", stats.files_visited),
            ("Directories visited", stats.directories_visited),
            ("Created", stats.created),
            ("Updated", stats.updated),
            ("Versioned", stats.versioned),
            ("Unchanged", stats.skipped),
            ("Files deleted", stats.files_deleted),
            ("Directories deleted", stats.directories_deleted),
            ("Errors", stats.errors),
        ],
    )


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pyfoldersync")
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """FolderSync - Mirror a directory tree into another directory."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("foldersync").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.argument("path", type=str)
@click.argument("destination", type=click.Path(), required=False)
@click.option(
    "--mode",
    "-m",
    type=click.Choice(MODE_CHOICES, case_sensitive=False),
    default=None,
    help="Sync mode (default: configured default, normally 'copy')",
)
@click.option("--name", "-n", help="Job name (default: source directory name)")
@click.option(
    "--log-level",
    "-l",
    help="Events to show: mask or names, e.g. 'error,file,finished' or 'all'",
)
@click.option(
    "--date-format",
    help="Timestamp format for versioned backups (default: yyyyMMddhhmmss)",
)
@click.option(
    "--exclude",
    "-e",
    multiple=True,
    help="Regular expression of paths to skip (repeatable)",
)
@click.option(
    "--exclude-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="File with one exclusion pattern per line (';' and '#' comment lines)",
)
@click.option(
    "--save-exclusions",
    is_flag=True,
    help="Store the job's exclusions for later runs with the same name",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Append emitted events to this file",
)
@click.option(
    "--write-log",
    is_flag=True,
    help="Append emitted events to the job's log in the config directory",
)
@click.pass_context
def sync(
    ctx: Any,
    path: str,
    destination: Optional[str],
    mode: Optional[str],
    name: Optional[str],
    log_level: Optional[str],
    date_format: Optional[str],
    exclude: tuple[str, ...],
    exclude_file: Optional[Path],
    save_exclusions: bool,
    log_file: Optional[Path],
    write_log: bool,
) -> None:
    """Mirror a source directory into a destination directory.

    PATH: Source directory, or a literal job in the format
          /source:mode:/destination (DESTINATION is then omitted)

    Sync Modes:
      - copy (c): Copy new and changed files
      - copyAndDelete (cad): Also delete files missing from the source
      - copyWithVersioning (cwv): Keep a timestamped copy of overwritten files

    Examples:
        foldersync sync ./docs /mnt/backup/docs
        foldersync sync ./docs /mnt/backup/docs -m cad -e '\\.tmp$'
        foldersync sync /home/user/pics:cwv:/mnt/backup/pics
        foldersync sync ./docs /mnt/backup/docs -l all --write-log
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        store = FileExclusionStore(config.exclusions_dir)
        job_kwargs: dict[str, Any] = {
            "log_level": (
                parse_log_level(log_level)
                if log_level
                else config.get_default_log_level()
            ),
            "date_format": date_format or config.get_default_date_format(),
            "store": store,
        }

        if destination is None:
            if mode is not None:
                out.error("Cannot use --mode with the literal job format")
                ctx.exit(1)
            job = SyncJob.parse_literal(
                path,
                name=name,
                default_mode=config.get_default_sync_mode(),
                **job_kwargs,
            )
        else:
            sync_mode = (
                SyncMode.from_string(mode) if mode else config.get_default_sync_mode()
            )
            source = Path(path).expanduser()
            job = SyncJob(
                name or source.resolve().name or str(source),
                source,
                destination,
                sync_mode,
                **job_kwargs,
            )

        job.exclusions.add_from_list(exclude)
        if exclude_file is not None:
            job.exclusions.add_from_source(read_exclusion_file(exclude_file))
        if save_exclusions:
            job.save_exclusions()
            out.info(f"Saved {len(job.exclusions)} exclusion(s) for {job.name!r}")
    except (FolderSyncError, ValueError, OSError) as e:
        out.error(f"Error: {e}")
        ctx.exit(1)
        return  # Unreachable, but helps type checker

    out.info(f"Sync job: {job.name}")
    out.info(f"Mode: {job.sync_mode.value}")
    out.info(f"Source: {job.source}")
    out.info(f"Destination: {job.destination}")
    if len(job.exclusions):
        out.info(f"Exclusions: {', '.join(job.exclusions.patterns)}")
    out.print("")

    job.subscribe(_event_printer(out))
    if write_log and log_file is None:
        log_file = log_file_for(job, config.log_dir)
    if log_file is not None:
        job.subscribe(LogFileSink(log_file))

    with SyncEngine() as engine:
        try:
            stats = _run_job(engine, job, out)
        except KeyboardInterrupt:
            out.warning("Sync cancelled by user")
            ctx.exit(130)
            return

    if out.json_output:
        out.output_json({"job": job.to_dict(), "stats": stats.to_dict()})
    else:
        _display_summary(out, job, stats)

    if stats.errors:
        ctx.exit(1)


@main.command("run-config")
@click.argument(
    "config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--write-log",
    is_flag=True,
    help="Append emitted events to each job's log in the config directory",
)
@click.pass_context
def run_config(ctx: Any, config_file: Path, write_log: bool) -> None:
    """Run every sync job defined in a JSON job file.

    CONFIG_FILE: JSON file containing a list of jobs, e.g.

    \b
        [{"name": "docs", "source": "/home/user/docs",
          "destination": "/mnt/backup/docs", "syncMode": "copyAndDelete"}]
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        jobs = load_sync_jobs_from_json(
            config_file, store=FileExclusionStore(config.exclusions_dir)
        )
    except FolderSyncError as e:
        out.error(f"Error: {e}")
        ctx.exit(1)
        return

    results = []
    failed = 0
    with SyncEngine() as engine:
        for job in jobs:
            out.info(f"Syncing {job.name}: {job.source} -> {job.destination}")
            job.subscribe(_event_printer(out))
            if write_log:
                job.subscribe(LogFileSink(log_file_for(job, config.log_dir)))
            try:
                stats = _run_job(engine, job, out)
            except KeyboardInterrupt:
                out.warning("Sync cancelled by user")
                ctx.exit(130)
                return
            if stats.errors:
                failed += 1
            results.append({"name": job.name, "stats": stats.to_dict()})
            if not out.json_output:
                _display_summary(out, job, stats)

    if out.json_output:
        out.output_json(results)
    if failed:
        out.warning(f"{failed} job(s) finished with errors")
        ctx.exit(1)


@main.group()
def exclude() -> None:
    """Manage stored exclusion patterns of named jobs."""


@exclude.command("list")
@click.argument("name")
@click.pass_context
def exclude_list(ctx: Any, name: str) -> None:
    """List the stored exclusion patterns of a job."""
    out: OutputFormatter = ctx.obj["out"]
    store = FileExclusionStore(config.exclusions_dir)
    matcher = ExclusionMatcher()
    try:
        matcher.add_from_source(store.load(name))
    except FolderSyncError as e:
        out.error(f"Error: {e}")
        ctx.exit(1)
        return
    patterns = list(matcher.patterns)

    if out.json_output:
        out.output_json({"name": name, "exclude": patterns})
        return
    if not patterns:
        out.info(f"No exclusions stored for {name!r}")
        return
    for pattern in patterns:
        out.console.print(pattern, markup=False, highlight=False, soft_wrap=True)


@exclude.command("add")
@click.argument("name")
@click.argument("patterns", nargs=-1)
@click.option(
    "--from-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Add the patterns listed in a file",
)
@click.pass_context
def exclude_add(
    ctx: Any, name: str, patterns: tuple[str, ...], from_file: Optional[Path]
) -> None:
    """Add exclusion patterns to a job."""
    out: OutputFormatter = ctx.obj["out"]
    store = FileExclusionStore(config.exclusions_dir)

    try:
        matcher = ExclusionMatcher()
        matcher.add_from_source(store.load(name))
        before = len(matcher)
        matcher.add_from_list(patterns)
        if from_file is not None:
            matcher.add_from_source(read_exclusion_file(from_file))
        store.save(name, list(matcher.patterns))
    except (FolderSyncError, OSError) as e:
        out.error(f"Error: {e}")
        ctx.exit(1)
        return

    out.success(f"Added {len(matcher) - before} exclusion(s) to {name!r}")


@exclude.command("remove")
@click.argument("name")
@click.argument("patterns", nargs=-1, required=True)
@click.pass_context
def exclude_remove(ctx: Any, name: str, patterns: tuple[str, ...]) -> None:
    """Remove exclusion patterns from a job."""
    out: OutputFormatter = ctx.obj["out"]
    store = FileExclusionStore(config.exclusions_dir)

    try:
        matcher = ExclusionMatcher()
        matcher.add_from_source(store.load(name))
        before = len(matcher)
        matcher.remove_all(patterns)
        store.save(name, list(matcher.patterns))
    except (FolderSyncError, OSError) as e:
        out.error(f"Error: {e}")
        ctx.exit(1)
        return

    out.success(f"Removed {before - len(matcher)} exclusion(s) from {name!r}")


@exclude.command("clear")
@click.argument("name")
@click.pass_context
def exclude_clear(ctx: Any, name: str) -> None:
    """Remove all stored exclusion patterns of a job."""
    out: OutputFormatter = ctx.obj["out"]
    store = FileExclusionStore(config.exclusions_dir)
    if store.delete(name):
        out.success(f"Cleared exclusions of {name!r}")
    else:
        out.info(f"No exclusions stored for {name!r}")


@main.command()
@click.option(
    "--mode",
    "-m",
    type=click.Choice(MODE_CHOICES, case_sensitive=False),
    help="Default sync mode",
)
@click.option("--log-level", "-l", help="Default log level mask or names")
@click.option("--date-format", help="Default timestamp format for versioned backups")
@click.pass_context
def defaults(
    ctx: Any,
    mode: Optional[str],
    log_level: Optional[str],
    date_format: Optional[str],
) -> None:
    """Show or change the defaults used by the sync command."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        if mode or log_level or date_format:
            path = config.save_defaults(
                sync_mode=SyncMode.from_string(mode) if mode else None,
                log_level=parse_log_level(log_level) if log_level else None,
                date_format=date_format,
            )
            out.success(f"Saved defaults to {path}")

        current = {
            "syncMode": config.get_default_sync_mode().value,
            "logLevel": int(config.get_default_log_level()),
            "dateFormat": config.get_default_date_format(),
        }
    except (FolderSyncError, ValueError, OSError) as e:
        out.error(f"Error: {e}")
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(current)
        return
    out.print_summary(
        "Defaults",
        [
            ("Sync mode", current["syncMode"]),
            ("Log level", describe_log_level(current["logLevel"])),
            ("Date format", current["dateFormat"]),
            ("Config file", config.get_config_path()),
        ],
    )


if __name__ == "__main__":
    main()
