"""Tests for centralized logging system."""

from __future__ import annotations

from ziptree.core.config import LoggingPolicy
from ziptree.core.log_bus import LogBus, LogRecord, get_log_bus
from ziptree.core.logging import (
    VerbosityLevel,
    apply_logging_policy,
    get_logger,
    get_verbosity,
    set_colors,
    set_console,
    set_verbosity,
)


def _capture() -> list[LogRecord]:
    records: list[LogRecord] = []
    get_log_bus().subscribe(records.append)
    return records


class TestVerbosityLevel:
    """Test VerbosityLevel enum."""

    def test_verbosity_ordering(self):
        assert VerbosityLevel.QUIET < VerbosityLevel.NORMAL
        assert VerbosityLevel.NORMAL < VerbosityLevel.VERBOSE
        assert VerbosityLevel.VERBOSE < VerbosityLevel.DEBUG


class TestLoggingSetup:
    """Test logging setup functions."""

    def test_set_get_verbosity(self):
        set_verbosity(2)
        assert get_verbosity() == VerbosityLevel.VERBOSE

        set_verbosity(VerbosityLevel.DEBUG)
        assert get_verbosity() == VerbosityLevel.DEBUG

    def test_apply_logging_policy(self):
        apply_logging_policy(LoggingPolicy(level_name="quiet", source="cli"))
        assert get_verbosity() == VerbosityLevel.QUIET

        apply_logging_policy(LoggingPolicy(level_name="debug", source="env"))
        assert get_verbosity() == VerbosityLevel.DEBUG

    def test_logger_is_cached(self):
        assert get_logger("ziptree.x") is get_logger("ziptree.x")


class TestLogging:
    def test_records_reach_log_bus(self):
        records = _capture()
        get_logger("t").info("hello")

        assert records == [LogRecord(level_name="INFO", plain="[info] hello", logger_name="t")]

    def test_quiet_filters_info_but_keeps_warning(self):
        set_verbosity(VerbosityLevel.QUIET)
        records = _capture()
        log = get_logger("t")
        log.info("dropped")
        log.warning("kept")
        log.error("kept too")

        assert [r.level_name for r in records] == ["WARNING", "ERROR"]

    def test_debug_needs_debug_verbosity(self):
        records = _capture()
        log = get_logger("t")
        log.verbose("v")
        log.debug("d")
        assert records == []

        set_verbosity(VerbosityLevel.DEBUG)
        log.verbose("v")
        log.debug("d")
        assert [r.plain for r in records] == ["[verbose] v", "[debug] d"]

    def test_console_off_by_default(self, capsys):
        get_logger("t").warning("silent")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_console_routes_warnings_to_stderr(self, capsys):
        set_colors(False)
        set_console(True)
        log = get_logger("t")
        log.info("to stdout")
        log.warning("to stderr")

        captured = capsys.readouterr()
        assert captured.out == "[info] to stdout\n"
        assert captured.err == "[warning] to stderr\n"


class TestLogBus:
    def test_level_filter(self):
        bus = LogBus()
        errors: list[LogRecord] = []
        bus.subscribe(errors.append, level_name="ERROR")
        bus.publish(LogRecord("INFO", "[info] a", "t"))
        bus.publish(LogRecord("ERROR", "[error] b", "t"))
        assert [r.plain for r in errors] == ["[error] b"]

    def test_unsubscribe(self):
        bus = LogBus()
        seen: list[LogRecord] = []
        bus.subscribe(seen.append)
        bus.unsubscribe(seen.append)
        bus.publish(LogRecord("INFO", "x", "t"))
        assert seen == []

    def test_failing_subscriber_does_not_break_others(self, capsys):
        bus = LogBus()
        seen: list[LogRecord] = []

        def broken(_record):
            raise RuntimeError("subscriber bug")

        bus.subscribe(broken)
        bus.subscribe(seen.append)
        bus.publish(LogRecord("INFO", "x", "t"))

        assert len(seen) == 1
        assert "subscriber bug" in capsys.readouterr().err


class TestOperationSummary:
    def test_pack_logs_one_summary_line(self):
        import asyncio

        from ziptree.archives import ArchiveService
        from ziptree.core.config import ConfigResolver
        from ziptree.file_io import MemoryFileSystem

        fs = MemoryFileSystem()
        fs.add_file("/src/a.txt", b"abc")
        svc = ArchiveService(fs, resolver=ConfigResolver(cli_args={"logging.level": "normal"}))
        records = _capture()

        asyncio.run(svc.create_from_directory("/src", "/out.zip"))

        summaries = [r.plain for r in records if "archives.create_from_directory" in r.plain]
        assert len(summaries) == 1
        assert "status=succeeded" in summaries[0]
        assert "files_count=1" in summaries[0]
        assert "bytes=3" in summaries[0]
