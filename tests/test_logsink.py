"""Tests for the log file sink."""

from datetime import datetime, timezone

from helpers import write_file

from foldersync.sync import LogEvent, LogFileSink, LogLevel, SyncEngine, SyncJob
from foldersync.sync.logsink import log_file_for


class TestLogFileSink:
    """Tests for LogFileSink."""

    def test_appends_lines(self, tmp_path):
        sink = LogFileSink(tmp_path / "logs" / "job.log", time_format="%Y")
        when = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)

        sink(LogEvent(None, LogLevel.FILE, "/src/a.txt", when))  # type: ignore[arg-type]
        sink(LogEvent(None, LogLevel.FINISHED, "Sync finished", when))  # type: ignore[arg-type]

        assert (tmp_path / "logs" / "job.log").read_text().splitlines() == [
            "[2024] /src/a.txt",
            "[2024] Sync finished",
        ]

    def test_write_failure_is_logged(self, tmp_path, caplog):
        blocker = write_file(tmp_path / "blocker", "not a directory")
        sink = LogFileSink(blocker / "job.log")

        sink(LogEvent(None, LogLevel.ERROR, "boom"))  # type: ignore[arg-type]

        assert "Failed to write sync log" in caplog.text

    def test_records_a_sync_run(self, source_dir, dest_dir, tmp_path):
        write_file(source_dir / "a.txt", "a")
        job = SyncJob("docs", source_dir, dest_dir, log_level="file,finished")
        log_path = log_file_for(job, tmp_path / "logs")
        job.subscribe(LogFileSink(log_path))

        with SyncEngine() as engine:
            engine.run(job)

        lines = log_path.read_text().splitlines()
        assert len(lines) == 2
        assert lines[0].endswith(str(source_dir / "a.txt"))
        assert lines[1].endswith("] Sync finished")


def test_log_file_for_sanitizes_name(source_dir, dest_dir, tmp_path):
    job = SyncJob("my docs/2024", source_dir, dest_dir)

    assert log_file_for(job, tmp_path) == tmp_path / "my_docs_2024.log"
