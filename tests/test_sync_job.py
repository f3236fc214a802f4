"""Unit tests for sync jobs."""

from pathlib import Path

import pytest

from foldersync.exceptions import ConfigurationError, ExclusionPatternError
from foldersync.sync import (
    DEFAULT_LOG_LEVEL,
    LogEvent,
    LogLevel,
    MemoryExclusionStore,
    SyncJob,
    SyncMode,
)
from foldersync.sync.job import _split_literal


class TestSyncJob:
    """Tests for SyncJob construction and invariants."""

    def test_create_sync_job(self, source_dir, dest_dir):
        """Test creating a basic sync job with defaults."""
        job = SyncJob("docs", source_dir, dest_dir)

        assert job.name == "docs"
        assert job.source == source_dir
        assert job.destination == dest_dir
        assert job.sync_mode == SyncMode.COPY
        assert job.log_level == DEFAULT_LOG_LEVEL
        assert job.date_format == "yyyyMMddhhmmss"
        assert len(job.exclusions) == 0
        assert job.is_cancelled is False

    def test_destination_is_created(self, source_dir, tmp_path):
        destination = tmp_path / "a" / "b" / "c"

        SyncJob("docs", source_dir, destination)

        assert destination.is_dir()

    def test_string_arguments_are_normalized(self, source_dir, dest_dir):
        job = SyncJob(
            "docs",
            str(source_dir),
            str(dest_dir),
            sync_mode="cad",
            log_level="all",
        )

        assert isinstance(job.source, Path)
        assert job.sync_mode == SyncMode.COPY_AND_DELETE
        assert job.log_level & LogLevel.FILE

    def test_missing_source_raises(self, tmp_path, dest_dir):
        with pytest.raises(ConfigurationError, match="does not exist"):
            SyncJob("docs", tmp_path / "missing", dest_dir)

    def test_source_must_be_directory(self, tmp_path, dest_dir):
        source = tmp_path / "file.txt"
        source.write_text("x")

        with pytest.raises(ConfigurationError, match="not a directory"):
            SyncJob("docs", source, dest_dir)

    def test_destination_inside_source_raises(self, source_dir):
        destination = source_dir / "backup"

        with pytest.raises(ConfigurationError, match="can not be located"):
            SyncJob("docs", source_dir, destination)

        assert not destination.exists()

    def test_destination_equal_to_source_raises(self, source_dir):
        with pytest.raises(ConfigurationError):
            SyncJob("docs", source_dir, source_dir)

    def test_sibling_with_common_prefix_is_allowed(self, tmp_path, source_dir):
        """A sibling whose name starts with the source name is not nested."""
        job = SyncJob("docs", source_dir, tmp_path / "source-backup")

        assert job.destination.is_dir()

    def test_destination_containing_source_is_allowed(self, tmp_path):
        source = tmp_path / "outer" / "inner"
        source.mkdir(parents=True)

        job = SyncJob("docs", source, tmp_path / "mirror")

        assert job.source == source

    def test_reassigning_destination_is_validated(self, source_dir, dest_dir):
        job = SyncJob("docs", source_dir, dest_dir)

        with pytest.raises(ConfigurationError):
            job.destination = source_dir / "nested"

        assert job.destination == dest_dir

    def test_invalid_mode_raises(self, source_dir, dest_dir):
        with pytest.raises(ConfigurationError, match="Invalid sync mode"):
            SyncJob("docs", source_dir, dest_dir, sync_mode="mirror")

    def test_invalid_log_level_raises(self, source_dir, dest_dir):
        with pytest.raises(ConfigurationError):
            SyncJob("docs", source_dir, dest_dir, log_level="loud")

    def test_empty_name_raises(self, source_dir, dest_dir):
        with pytest.raises(ConfigurationError):
            SyncJob("", source_dir, dest_dir)

    def test_invalid_exclusion_raises(self, source_dir, dest_dir):
        with pytest.raises(ExclusionPatternError):
            SyncJob("docs", source_dir, dest_dir, exclusions=["[unclosed"])


class TestSyncJobEvents:
    """Tests for event emission gated by the log level mask."""

    def test_emit_respects_mask(self, source_dir, dest_dir):
        job = SyncJob("docs", source_dir, dest_dir)
        received: list[LogEvent] = []
        job.subscribe(received.append)

        job.emit(LogLevel.FILE, "/some/file")
        job.emit(LogLevel.ERROR, "/some/file boom")

        assert [(e.category, e.message) for e in received] == [
            (LogLevel.ERROR, "/some/file boom")
        ]
        assert received[0].job is job

    def test_unsubscribe(self, source_dir, dest_dir):
        job = SyncJob("docs", source_dir, dest_dir)
        received: list[LogEvent] = []
        job.subscribe(received.append)
        job.unsubscribe(received.append)

        job.emit(LogLevel.ERROR, "boom")

        assert received == []

    def test_cancel_and_reset(self, source_dir, dest_dir):
        job = SyncJob("docs", source_dir, dest_dir)

        job.cancel()
        assert job.is_cancelled is True

        job.reset_cancel()
        assert job.is_cancelled is False


class TestSyncJobExclusionStore:
    """Tests for reusing stored exclusions by job name."""

    def test_same_name_loads_stored_exclusions(self, source_dir, dest_dir):
        store = MemoryExclusionStore()
        first = SyncJob("docs", source_dir, dest_dir, store=store)
        first.exclusions.add(r"\.tmp$")
        first.save_exclusions()

        second = SyncJob("docs", source_dir, dest_dir, store=store)
        other = SyncJob("photos", source_dir, dest_dir, store=store)

        assert second.exclusions.patterns == (r"\.tmp$",)
        assert other.exclusions.patterns == ()

    def test_stored_comments_are_ignored(self, source_dir, dest_dir):
        store = MemoryExclusionStore()
        store.save("docs", ["# comment", "; comment", r"\.bak$", ""])

        job = SyncJob("docs", source_dir, dest_dir, store=store)

        assert job.exclusions.patterns == (r"\.bak$",)

    def test_explicit_exclusions_are_added_to_stored(self, source_dir, dest_dir):
        store = MemoryExclusionStore()
        store.save("docs", ["cache"])

        job = SyncJob("docs", source_dir, dest_dir, exclusions=["logs"], store=store)

        assert job.exclusions.patterns == ("cache", "logs")

    def test_save_without_store_raises(self, source_dir, dest_dir):
        job = SyncJob("docs", source_dir, dest_dir)

        with pytest.raises(ConfigurationError, match="no exclusion store"):
            job.save_exclusions()


class TestParseLiteral:
    """Tests for the source:mode:destination literal format."""

    def test_parse_with_mode(self, source_dir, dest_dir):
        job = SyncJob.parse_literal(f"{source_dir}:copyAndDelete:{dest_dir}")

        assert job.source == source_dir
        assert job.destination == dest_dir
        assert job.sync_mode == SyncMode.COPY_AND_DELETE
        assert job.name == "source"

    def test_parse_with_abbreviation(self, source_dir, dest_dir):
        job = SyncJob.parse_literal(f"{source_dir}:cwv:{dest_dir}", name="pics")

        assert job.sync_mode == SyncMode.COPY_WITH_VERSIONING
        assert job.name == "pics"

    def test_parse_without_mode(self, source_dir, dest_dir):
        job = SyncJob.parse_literal(f"{source_dir}:{dest_dir}")

        assert job.sync_mode == SyncMode.COPY

    def test_parse_without_mode_uses_default(self, source_dir, dest_dir):
        job = SyncJob.parse_literal(
            f"{source_dir}:{dest_dir}", default_mode=SyncMode.COPY_AND_DELETE
        )

        assert job.sync_mode == SyncMode.COPY_AND_DELETE

    def test_explicit_mode_overrides_default(self, source_dir, dest_dir):
        job = SyncJob.parse_literal(
            f"{source_dir}:c:{dest_dir}", default_mode=SyncMode.COPY_AND_DELETE
        )

        assert job.sync_mode == SyncMode.COPY

    def test_parse_invalid_mode(self, source_dir, dest_dir):
        with pytest.raises(ValueError, match="Invalid sync mode"):
            SyncJob.parse_literal(f"{source_dir}:mirror:{dest_dir}")

    def test_parse_without_separator(self, source_dir):
        with pytest.raises(ValueError, match="Invalid sync job literal"):
            SyncJob.parse_literal(str(source_dir))

    @pytest.mark.parametrize(
        "literal, expected",
        [
            ("/src:cad:/dst", ["/src", "cad", "/dst"]),
            ("/src:/dst", ["/src", "/dst"]),
            ("/src:c:/dst", ["/src", "c", "/dst"]),
            (r"C:\src:cad:D:\dst", [r"C:\src", "cad", r"D:\dst"]),
            (r"C:\src:D:\dst", [r"C:\src", r"D:\dst"]),
            ("C:/src:copy:/mnt/dst", ["C:/src", "copy", "/mnt/dst"]),
        ],
    )
    def test_split_literal(self, literal, expected):
        assert _split_literal(literal) == expected


class TestSerialization:
    """Tests for dictionary conversion."""

    def test_round_trip(self, source_dir, dest_dir):
        job = SyncJob(
            "docs",
            source_dir,
            dest_dir,
            SyncMode.COPY_WITH_VERSIONING,
            log_level=LogLevel.ERROR | LogLevel.FILE,
            date_format="yyyy-MM-dd",
            exclusions=[r"\.tmp$"],
        )

        data = job.to_dict()
        restored = SyncJob.from_dict(data)

        assert data == {
            "name": "docs",
            "source": str(source_dir),
            "destination": str(dest_dir),
            "syncMode": "copyWithVersioning",
            "dateFormat": "yyyy-MM-dd",
            "logLevel": 5,
            "exclude": [r"\.tmp$"],
        }
        assert restored.to_dict() == data

    def test_from_dict_defaults(self, source_dir, dest_dir):
        job = SyncJob.from_dict(
            {"name": "docs", "source": str(source_dir), "destination": str(dest_dir)}
        )

        assert job.sync_mode == SyncMode.COPY
        assert job.log_level == DEFAULT_LOG_LEVEL

    def test_from_dict_missing_key(self, source_dir):
        with pytest.raises(KeyError):
            SyncJob.from_dict({"name": "docs", "source": str(source_dir)})
