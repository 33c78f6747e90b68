"""Email log route.

Sends every pending entry in one plain-text message per recipient.  The
message goes through the configured ``sendmail`` command by default, or
through SMTP when ``smtp_host`` is set.
"""

from __future__ import annotations

import base64
import re
import shlex
import subprocess
import textwrap
from email.utils import formatdate
from typing import TYPE_CHECKING

from trellis.core.logging import get_logger
from trellis.framework.logging.logger import LogEntry
from trellis.framework.logging.routes.base import LogRoute

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext

logger = get_logger(__name__)

_SENDER = re.compile(r"([^<]*)<([^>]*)>")

WRAP_WIDTH = 70


def encode_utf8_header(value: str) -> str:
    """RFC 2047 ``=?UTF-8?B?...?=`` encoded word."""
    encoded = base64.b64encode(value.encode("utf-8")).decode("ascii")
    return f"=?UTF-8?B?{encoded}?="


def wrap_body(text: str, width: int = WRAP_WIDTH) -> str:
    """Wrap each line at *width* columns, keeping existing line breaks."""
    lines = []
    for line in text.splitlines():
        lines.append(textwrap.fill(line, width, break_long_words=False, break_on_hyphens=False) if line else "")
    return "\n".join(lines)


class EmailLogRoute(LogRoute):
    """
    Mails log entries to a list of addresses.

    Configuration keys: ``emails`` (list or comma/space separated),
    ``subject``, ``sent_from`` (``"Name <addr>"`` or a bare address),
    ``headers`` (extra header lines), ``utf8`` (encode subject and sender
    name), ``smtp_host`` / ``smtp_port``, ``sendmail`` (command; defaults
    to the application's).
    """

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self._emails: list[str] = []
        self.subject: str | None = None
        self.sent_from: str | None = None
        self._headers: list[str] = []
        self.utf8 = False
        self.smtp_host: str | None = None
        self.smtp_port = 25
        self._sendmail: str | None = None

    # ── Properties ───────────────────────────────────────────────

    @property
    def emails(self) -> list[str]:
        return list(self._emails)

    @emails.setter
    def emails(self, value: str | list[str]) -> None:
        if isinstance(value, str):
            self._emails = [item for item in re.split(r"[\s,]+", value) if item]
        else:
            self._emails = list(value)

    @property
    def headers(self) -> list[str]:
        return list(self._headers)

    @headers.setter
    def headers(self, value: str | list[str]) -> None:
        if isinstance(value, str):
            self._headers = [line.strip() for line in value.splitlines() if line.strip()]
        else:
            self._headers = list(value)

    @property
    def sendmail(self) -> str:
        if self._sendmail:
            return self._sendmail
        app = self.context.app
        if app is not None:
            return app.sendmail
        return self.context.settings.sendmail

    @sendmail.setter
    def sendmail(self, value: str) -> None:
        self._sendmail = value

    def init(self) -> None:
        super().init()
        if self.subject is None:
            app = self.context.app
            self.subject = f"{app.name if app is not None else 'Application'} log"

    # ── Processing ───────────────────────────────────────────────

    def process_logs(self, logs: list[LogEntry]) -> None:
        body = wrap_body("".join(self.format_log_message(entry) for entry in logs))
        subject = self.subject or "Application log"
        for address in self._emails:
            self.send_email(address, subject, body)

    def build_message(self, to: str, subject: str, body: str) -> str:
        if self.utf8:
            subject = encode_utf8_header(subject)

        headers = [
            "MIME-Version: 1.0",
            f"Date: {formatdate(localtime=True)}",
            f"To: {to}",
            f"Subject: {subject}",
            "Content-Type: text/plain; charset=utf-8",
        ]
        if self.sent_from:
            name, address = self._parse_sender(self.sent_from)
            if name:
                if self.utf8:
                    name = encode_utf8_header(name)
                headers.append(f"From: {name} <{address}>")
            else:
                headers.append(f"From: {address}")
            headers.append(f"Reply-To: {address}")
        headers.extend(self._headers)
        return "\r\n".join(headers) + "\r\n\r\n" + body

    def send_email(self, to: str, subject: str, body: str) -> None:
        """Deliver one message; delivery errors are dropped."""
        message = self.build_message(to, subject, body).encode("utf-8")
        try:
            if self.smtp_host:
                self._send_smtp(to, message)
            else:
                subprocess.run(
                    [*shlex.split(self.sendmail), "-t", "-i"],
                    input=message,
                    capture_output=True,
                    check=True,
                )
        except (OSError, subprocess.SubprocessError) as exc:
            logger.debug("log_email_failed", to=to, error=str(exc))

    def _send_smtp(self, to: str, message: bytes) -> None:
        import smtplib

        sender = self._parse_sender(self.sent_from)[1] if self.sent_from else ""
        with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
            server.sendmail(sender, [to], message)

    @staticmethod
    def _parse_sender(value: str) -> tuple[str, str]:
        match = _SENDER.search(value)
        if match:
            return match.group(1).strip(), match.group(2).strip()
        return "", value.strip()


__all__ = ["EmailLogRoute", "encode_utf8_header", "wrap_body"]
