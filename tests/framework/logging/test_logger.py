"""Tests for trellis.framework.logging.logger — buffering, filtering and flushing.

Covers:
- Insertion order and read-time filtering (level, category, except)
- Literal-prefix category patterns (prefix, not hierarchical)
- Unconditional buffer clear on flush
- Threshold and timer driven auto-flush, and the re-entrancy guard
"""

import dataclasses
import threading

import pytest

from trellis.framework.logging.logger import LogEntry, Logger, LogLevel, category_matches, parse_filter


@pytest.fixture
def log():
    logger = Logger()
    logger.init()
    yield logger
    logger.auto_flush_interval = 0


def _messages(entries):
    return [e.message for e in entries]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestParseFilter:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, []),
            ("", []),
            ("error,info", ["error", "info"]),
            ("Error, Warning  trace", ["error", "warning", "trace"]),
            (["System.*", " db "], ["system.*", "db"]),
        ],
    )
    def test_normalises(self, value, expected):
        assert parse_filter(value) == expected


class TestCategoryMatches:
    def test_exact(self):
        assert category_matches("db", ["db"])
        assert not category_matches("db.query", ["db"])

    def test_prefix_pattern(self):
        assert category_matches("system.db", ["system.*"])

    def test_prefix_not_hierarchical(self):
        # "system.*" is a literal prefix on "system", so "systemx" matches too
        assert category_matches("systemx", ["system.*"])
        assert category_matches("system", ["system.*"])
        assert not category_matches("sys", ["system.*"])


class TestLogEntry:
    def test_immutable(self):
        entry = LogEntry("m", "info", "app", 0.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            entry.message = "changed"


# ---------------------------------------------------------------------------
# Logging and filtering
# ---------------------------------------------------------------------------


class TestLog:
    def test_defaults(self, log):
        log.log("hello")
        [entry] = log.get_logs()
        assert (entry.level, entry.category) == (LogLevel.INFO, "application")
        assert entry.timestamp > 0

    def test_insertion_order(self, log):
        for i in range(5):
            log.log(f"m{i}", "info", "app")
        assert _messages(log.get_logs()) == ["m0", "m1", "m2", "m3", "m4"]
        assert log.log_count == 5

    def test_uninitialized_logger_initializes_itself(self):
        logger = Logger()
        logger.log("first")
        assert logger.is_initialized


class TestGetLogs:
    @pytest.fixture
    def filled(self, log):
        log.log("fail", "error", "db")
        log.log("ok", "info", "db")
        log.log("trace1", "trace", "sys")
        log.log("boot", "info", "system.boot")
        log.log("odd", "warning", "systemx")
        return log

    def test_level_filter_keeps_order(self, filled):
        assert _messages(filled.get_logs("error,info")) == ["fail", "ok", "boot"]

    def test_level_filter_case_insensitive(self, log):
        log.log("loud", "ERROR", "db")
        assert _messages(log.get_logs("error")) == ["loud"]
        assert _messages(log.get_logs("Error")) == ["loud"]

    def test_category_exact(self, filled):
        assert _messages(filled.get_logs(categories="db")) == ["fail", "ok"]

    def test_category_prefix_not_hierarchical(self, filled):
        assert _messages(filled.get_logs(categories="system.*")) == ["boot", "odd"]

    def test_except(self, filled):
        assert _messages(filled.get_logs(except_="system.*, sys")) == ["fail", "ok"]

    def test_composed_filters(self, filled):
        assert _messages(filled.get_logs(["info", "warning"], ["db", "system.*"], ["systemx"])) == ["ok", "boot"]

    def test_category_case_insensitive(self, log):
        log.log("m", "info", "App.Boot")
        assert _messages(log.get_logs(categories="app.*")) == ["m"]

    def test_buffer_not_modified(self, filled):
        filled.get_logs("error")
        assert len(filled.get_logs()) == 5


# ---------------------------------------------------------------------------
# Flushing
# ---------------------------------------------------------------------------


class TestFlush:
    def test_clears_without_observers(self, log):
        log.log("lost")
        log.flush()
        assert log.get_logs() == []
        assert log.log_count == 0

    def test_observers_see_entries_before_clear(self, log):
        seen = []
        log.on("flush", lambda dump: seen.append((dump, _messages(log.get_logs()))))
        log.log("a")
        log.log("b")
        log.flush(dump=True)
        assert seen == [(True, ["a", "b"])]
        assert log.get_logs() == []

    def test_clears_when_observer_raises(self, log):
        def broken(dump):
            raise RuntimeError("route failed")

        log.on("flush", broken)
        log.log("a")
        with pytest.raises(RuntimeError):
            log.flush()
        assert log.get_logs() == []
        assert log.log_count == 0


class TestAutoFlush:
    def test_threshold(self, log):
        dumps = []
        log.on("flush", dumps.append)
        log.auto_flush = 3
        log.auto_dump = True

        log.log("1")
        log.log("2")
        assert dumps == []
        log.log("3")

        assert dumps == [True]
        assert log.log_count == 0

    def test_zero_disables(self, log):
        dumps = []
        log.on("flush", dumps.append)
        log.auto_flush = 0
        for i in range(20):
            log.log(str(i))
        assert dumps == []
        assert log.log_count == 20

    def test_negative_clamped(self, log):
        log.auto_flush = -5
        assert log.auto_flush == 0

    def test_not_reentrant(self, log):
        log.auto_flush = 1
        calls = []

        def observer(dump):
            calls.append(log.processing)
            log.log("logged during flush")

        log.on("flush", observer)
        log.log("trigger")

        assert calls == [True]
        assert log.processing is False
        assert log.get_logs() == []

    def test_direct_flush_not_reentrant(self, log):
        log.auto_flush = 1
        depth = 0
        depths = []

        def observer(dump):
            nonlocal depth
            depth += 1
            depths.append(depth)
            log.log("logged during flush")
            log.flush(dump)
            depth -= 1

        log.on("flush", observer)
        log.flush(True)

        assert depths == [1]
        assert log.processing is False
        assert log.get_logs() == []


class TestTimer:
    def test_periodic_flush(self, log):
        flushed = threading.Event()
        log.on("flush", lambda dump: flushed.set())
        log.log("waiting")

        log.auto_flush_interval = 0.05
        assert flushed.wait(timeout=5.0)

        log.auto_flush_interval = 0
        assert log.auto_flush_interval == 0

    def test_second_start_is_noop(self, log):
        log.auto_flush_interval = 30
        log.auto_flush_interval = 10
        assert log.auto_flush_interval == 30

    def test_zero_when_stopped_is_noop(self, log):
        log.auto_flush_interval = 0
        assert log.auto_flush_interval == 0
