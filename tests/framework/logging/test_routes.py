"""Tests for log routes: base filtering/buffering, console, file, email.

Uses mocking to avoid spawning sendmail or opening SMTP connections.
"""

import io
import os
import subprocess
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console

from trellis.core.errors import InvalidPathError, NotSupportedError
from trellis.framework.logging.logger import LogEntry, Logger
from trellis.framework.logging.routes.base import LogRoute
from trellis.framework.logging.routes.console import ConsoleLogRoute
from trellis.framework.logging.routes.email import EmailLogRoute, encode_utf8_header, wrap_body
from trellis.framework.logging.routes.file import FileLogRoute

NOON = datetime(2026, 1, 15, 12, 0, 0).timestamp()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class RecordingRoute(LogRoute):
    def __init__(self, *, context=None):
        super().__init__(context=context)
        self.batches = []

    def process_logs(self, logs):
        self.batches.append([e.message for e in logs])


def _entry(message="msg", level="info", category="app"):
    return LogEntry(message, level, category, NOON)


@pytest.fixture
def log():
    logger = Logger()
    logger.init()
    logger.log("fail", "error", "db")
    logger.log("ok", "info", "db")
    logger.log("trace1", "trace", "sys")
    return logger


# ===========================================================================
# Base route
# ===========================================================================


class TestLogRoute:
    def test_filters_from_strings(self):
        route = RecordingRoute()
        route.configure({"levels": "Error, info", "categories": "db", "except": "db.secret"})
        assert route.levels == ["error", "info"]
        assert route.categories == ["db"]
        assert route.except_ == ["db.secret"]

    def test_collect_buffers_without_dump(self, log):
        route = RecordingRoute()
        route.levels = "error,info"
        route.collect_logs(log)
        assert [e.message for e in route.logs] == ["fail", "ok"]
        assert route.batches == []

    def test_collect_appends(self, log):
        route = RecordingRoute()
        route.collect_logs(log)
        route.collect_logs(log)
        assert len(route.logs) == 6

    def test_dump_processes_and_clears(self, log):
        route = RecordingRoute()
        route.categories = "sys"
        route.collect_logs(log)
        route.collect_logs(log, dump=True)
        assert route.batches == [["trace1", "trace1"]]
        assert route.logs == []

    def test_dump_with_nothing_pending(self, log):
        route = RecordingRoute()
        route.levels = "profile"
        route.collect_logs(log, dump=True)
        assert route.batches == []

    def test_enable_disable(self):
        route = RecordingRoute()
        route.disable()
        assert route.enabled is False
        route.enable()
        assert route.enabled is True

    def test_format(self):
        line = RecordingRoute().format_log_message(_entry("hello", "warning", "app.boot"))
        assert line == "2026-01-15 12:00:00 [warning] [app.boot] hello\n"

    def test_process_logs_is_abstract(self):
        with pytest.raises(NotSupportedError):
            LogRoute().process_logs([_entry()])


# ===========================================================================
# Console
# ===========================================================================


class TestConsoleLogRoute:
    def _route(self):
        buffer = io.StringIO()
        route = ConsoleLogRoute(console=Console(file=buffer, color_system=None, width=200))
        return route, buffer

    def test_one_line_per_entry_in_order(self):
        route, buffer = self._route()
        route.process_logs([_entry("first", "info", "app"), _entry("second", "error", "db")])
        assert buffer.getvalue().splitlines() == [
            "2026-01-15 12:00:00 [info] [app] first",
            "2026-01-15 12:00:00 [error] [db] second",
        ]

    def test_markup_not_interpreted(self):
        route, buffer = self._route()
        route.process_logs([_entry("[bold]literal[/bold]")])
        assert "[bold]literal[/bold]" in buffer.getvalue()

    @pytest.mark.parametrize(
        ("level", "style"),
        [("error", "red"), ("warning", "yellow"), ("info", "green"), ("trace", "green"), ("ERROR", "red")],
    )
    def test_colour_by_level(self, level, style):
        text = ConsoleLogRoute().render(_entry(level=level))
        assert text.spans[1].style == style

    def test_write_failure_does_not_reach_other_routes(self):
        console = MagicMock(spec=Console)
        console.print.side_effect = BrokenPipeError("stdout closed")
        broken = ConsoleLogRoute(console=console)
        recording = RecordingRoute()

        logger = Logger()
        logger.auto_flush = 1
        logger.on("flush", lambda dump: [r.collect_logs(logger, True) for r in (broken, recording)])
        logger.log("boom", "error", "db")

        console.print.assert_called_once()
        assert recording.batches == [["boom"]]
        assert broken.logs == []


# ===========================================================================
# File
# ===========================================================================


class TestFileLogRoute:
    def _route(self, directory, **config):
        route = FileLogRoute()
        route.configure({"log_path": str(directory), **config})
        route.init()
        return route

    def test_default_log_path_is_runtime(self, app, base_path):
        route = FileLogRoute()
        route.init()
        assert route.log_path == str(base_path / "runtime")

    def test_no_application_no_path(self, context):
        with pytest.raises(InvalidPathError):
            FileLogRoute().init()

    def test_relative_log_path_uses_base_path(self, app, base_path, monkeypatch):
        (base_path / "logs").mkdir()
        elsewhere = base_path / "runtime"
        (elsewhere / "logs").mkdir()
        monkeypatch.chdir(elsewhere)
        route = FileLogRoute()
        route.log_path = "logs"
        assert route.log_path == str(base_path / "logs")

    def test_invalid_log_path(self, tmp_path):
        with pytest.raises(InvalidPathError):
            FileLogRoute().log_path = tmp_path / "missing"

    def test_writes_formatted_lines(self, tmp_path):
        route = self._route(tmp_path, log_file="app.log")
        route.process_logs([_entry("one"), _entry("two", "error", "db")])
        route.process_logs([_entry("three")])
        assert (tmp_path / "app.log").read_text() == (
            "2026-01-15 12:00:00 [info] [app] one\n"
            "2026-01-15 12:00:00 [error] [db] two\n"
            "2026-01-15 12:00:00 [info] [app] three\n"
        )

    def test_limits_clamped(self, tmp_path):
        route = self._route(tmp_path, max_file_size=0, max_log_files=-3)
        assert route.max_file_size == 1
        assert route.max_log_files == 1

    def test_rotation(self, tmp_path):
        route = self._route(tmp_path, max_file_size=1, max_log_files=3)
        live = tmp_path / "application.log"
        live.write_text("x" * 2048)
        for index, content in ((1, "one"), (2, "two"), (3, "three")):
            (tmp_path / f"application.log.{index}").write_text(content)

        route.process_logs([_entry("fresh")])

        assert live.read_text() == "2026-01-15 12:00:00 [info] [app] fresh\n"
        assert (tmp_path / "application.log.1").read_text() == "x" * 2048
        assert (tmp_path / "application.log.2").read_text() == "one"
        assert (tmp_path / "application.log.3").read_text() == "two"
        assert not (tmp_path / "application.log.4").exists()

    def test_no_rotation_below_limit(self, tmp_path):
        route = self._route(tmp_path, max_file_size=1)
        (tmp_path / "application.log").write_text("small\n")
        route.process_logs([_entry("more")])
        assert not (tmp_path / "application.log.1").exists()

    def test_write_failure_is_swallowed(self, tmp_path):
        directory = tmp_path / "logs"
        directory.mkdir()
        route = self._route(directory)
        os.rmdir(directory)
        route.process_logs([_entry("dropped")])
        assert not directory.exists()


# ===========================================================================
# Email
# ===========================================================================


class TestEmailHelpers:
    def test_encode_utf8_header(self):
        assert encode_utf8_header("Journal") == "=?UTF-8?B?Sm91cm5hbA==?="

    def test_wrap_body_keeps_lines(self):
        text = "short\n" + " ".join(["word"] * 40) + "\n\nend"
        wrapped = wrap_body(text)
        assert all(len(line) <= 70 for line in wrapped.splitlines())
        assert wrapped.startswith("short\n")
        assert wrapped.endswith("\n\nend")


class TestEmailLogRoute:
    def _route(self, **config):
        route = EmailLogRoute()
        route.configure({"emails": "a@example.com, b@example.com", **config})
        route.init()
        return route

    def test_emails_from_string(self):
        assert self._route().emails == ["a@example.com", "b@example.com"]

    def test_default_subject_without_application(self, context):
        assert self._route().subject == "Application log"

    def test_default_subject_uses_application_name(self, app):
        assert self._route().subject == "Test App log"

    @patch("trellis.framework.logging.routes.email.subprocess.run")
    def test_one_message_per_recipient(self, mock_run, context):
        route = self._route(sendmail="/usr/sbin/sendmail -f ops@example.com")
        route.process_logs([_entry("disk full", "error", "ops")])

        assert mock_run.call_count == 2
        first = mock_run.call_args_list[0]
        assert first.args[0] == ["/usr/sbin/sendmail", "-f", "ops@example.com", "-t", "-i"]
        message = first.kwargs["input"].decode("utf-8")
        assert "To: a@example.com" in message
        assert message.endswith("2026-01-15 12:00:00 [error] [ops] disk full")
        assert "To: b@example.com" in mock_run.call_args_list[1].kwargs["input"].decode("utf-8")

    @patch("trellis.framework.logging.routes.email.subprocess.run")
    def test_sendmail_from_application(self, mock_run, context, base_path):
        from tests._support import DummyApplication

        DummyApplication({"base_path": str(base_path), "sendmail": "mailer"}, context=context)
        self._route().process_logs([_entry()])
        assert mock_run.call_args.args[0] == ["mailer", "-t", "-i"]

    def test_sender_headers(self, context):
        route = self._route(sent_from="Ops Team <ops@example.com>", subject="Nightly")
        message = route.build_message("a@example.com", route.subject, "body")
        assert "From: Ops Team <ops@example.com>" in message
        assert "Reply-To: ops@example.com" in message
        assert "Subject: Nightly" in message

    def test_bare_sender(self, context):
        route = self._route(sent_from="ops@example.com")
        message = route.build_message("a@example.com", "s", "body")
        assert "From: ops@example.com" in message

    def test_utf8_encoding(self, context):
        route = self._route(sent_from="Équipe <ops@example.com>", utf8=True)
        message = route.build_message("a@example.com", "Journal", "body")
        assert "Subject: =?UTF-8?B?Sm91cm5hbA==?=" in message
        assert f"From: {encode_utf8_header('Équipe')} <ops@example.com>" in message

    def test_extra_headers(self, context):
        route = self._route(headers="X-Priority: 1\nX-Env: prod")
        message = route.build_message("a@example.com", "s", "body")
        assert "X-Priority: 1\r\nX-Env: prod" in message

    def test_body_is_wrapped(self, context):
        route = self._route()
        with patch.object(route, "send_email") as send:
            route.process_logs([_entry(" ".join(["word"] * 60))])
        body = send.call_args.args[2]
        assert all(len(line) <= 70 for line in body.splitlines())

    @pytest.mark.parametrize(
        "error",
        [OSError("sendmail missing"), subprocess.CalledProcessError(75, ["sendmail"])],
    )
    def test_delivery_errors_swallowed(self, context, error):
        route = self._route()
        with patch("trellis.framework.logging.routes.email.subprocess.run", side_effect=error) as mock_run:
            route.process_logs([_entry()])
        assert mock_run.call_count == 2

    @patch("smtplib.SMTP")
    def test_smtp_transport(self, MockSMTP, context):
        server = MagicMock()
        MockSMTP.return_value.__enter__.return_value = server
        route = self._route(smtp_host="mail.example.com", smtp_port=2525, sent_from="ops@example.com")

        route.process_logs([_entry()])

        MockSMTP.assert_called_with("mail.example.com", 2525)
        assert server.sendmail.call_count == 2
        sender, recipients, _ = server.sendmail.call_args_list[0].args
        assert (sender, recipients) == ("ops@example.com", ["a@example.com"])
