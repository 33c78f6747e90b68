"""
File log route with size based rotation.

Entries are appended to ``<log_path>/<log_file>``.  When the live file
grows past ``max_file_size`` kilobytes it is rotated before the next
write::

    application.log      → application.log.1
    application.log.1    → application.log.2
    ...
    application.log.N    → deleted            (N = max_log_files)

Writes hold an exclusive ``fcntl.flock`` on the file, so several
processes may share one log.  Persistence is best effort: I/O failures
are reported to framework diagnostics and otherwise dropped.
"""

from __future__ import annotations

import contextlib
import fcntl
import os
from typing import TYPE_CHECKING

from trellis.core.errors import InvalidPathError
from trellis.core.logging import get_logger
from trellis.framework.logging.logger import LogEntry
from trellis.framework.logging.routes.base import LogRoute

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext

logger = get_logger(__name__)


class FileLogRoute(LogRoute):
    """Appends formatted entries to a rotating log file."""

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self._log_path: str | None = None
        self._log_file = "application.log"
        self._max_file_size = 1024
        self._max_log_files = 5

    # ── Properties ───────────────────────────────────────────────

    @property
    def log_path(self) -> str | None:
        """Directory holding the log files; defaults to the application runtime path."""
        return self._log_path

    @log_path.setter
    def log_path(self, value: str | os.PathLike[str]) -> None:
        # relative paths are taken from the application base path
        app = self.context.app
        base = app.base_path if app is not None else os.getcwd()
        path = os.path.abspath(os.path.join(base, os.fspath(value)))
        if not os.path.isdir(path) or not os.access(path, os.W_OK):
            raise InvalidPathError("log", value)
        self._log_path = path

    @property
    def log_file(self) -> str:
        return self._log_file

    @log_file.setter
    def log_file(self, value: str) -> None:
        self._log_file = value

    @property
    def max_file_size(self) -> int:
        """Size in kilobytes that triggers rotation."""
        return self._max_file_size

    @max_file_size.setter
    def max_file_size(self, value: int) -> None:
        self._max_file_size = max(1, int(value))

    @property
    def max_log_files(self) -> int:
        """Number of rotated backups kept."""
        return self._max_log_files

    @max_log_files.setter
    def max_log_files(self, value: int) -> None:
        self._max_log_files = max(1, int(value))

    @property
    def log_file_path(self) -> str:
        if self._log_path is None:
            raise InvalidPathError("log", None, "FileLogRoute.log_path is not set.")
        return os.path.join(self._log_path, self._log_file)

    # ── Lifecycle ────────────────────────────────────────────────

    def init(self) -> None:
        super().init()
        if self._log_path is None:
            app = self.context.app
            if app is None:
                raise InvalidPathError(
                    "log", None, "FileLogRoute.log_path must be set when no application is running."
                )
            self.log_path = app.runtime_path

    # ── Processing ───────────────────────────────────────────────

    def process_logs(self, logs: list[LogEntry]) -> None:
        """Write *logs* to the live file, rotating it first if it is too large."""
        path = self.log_file_path
        text = "".join(self.format_log_message(entry) for entry in logs)
        try:
            if os.path.isfile(path) and os.path.getsize(path) > self._max_file_size * 1024:
                self.rotate_files()
            with open(path, "a", encoding="utf-8") as fh:
                fcntl.flock(fh, fcntl.LOCK_EX)
                try:
                    fh.write(text)
                    fh.flush()
                finally:
                    fcntl.flock(fh, fcntl.LOCK_UN)
        except OSError as exc:
            logger.debug("file_log_write_failed", path=path, error=str(exc), dropped=len(logs))

    def rotate_files(self) -> None:
        """Shift ``.N-1`` to ``.N`` down to the live file; the oldest backup is removed."""
        path = self.log_file_path
        for index in range(self._max_log_files, 0, -1):
            rotated = f"{path}.{index}"
            if not os.path.isfile(rotated):
                continue
            with contextlib.suppress(OSError):
                if index == self._max_log_files:
                    os.unlink(rotated)
                else:
                    os.replace(rotated, f"{path}.{index + 1}")
        if os.path.isfile(path):
            with contextlib.suppress(OSError):
                os.replace(path, f"{path}.1")
        logger.debug("log_files_rotated", path=path, keep=self._max_log_files)
