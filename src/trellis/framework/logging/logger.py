"""
In-memory application logger.

Manifesto:
    Producers should never wait on sinks.  :class:`Logger` only appends
    entries to an in-memory buffer; when the buffer reaches
    ``auto_flush`` entries (or the flush timer fires) it notifies the
    ``flush`` observers synchronously and then clears itself.  Routes
    registered by :class:`~trellis.framework.logging.router.LogRouter`
    copy what they are interested in during that notification and
    persist it on their own schedule.

    - **Read-time filtering:** entries are never altered in place;
      ``get_logs`` composes level ∩ category ∖ except predicates
    - **At-most-once delivery:** the buffer is cleared after every
      flush whether or not any observer kept the entries
    - **Non-reentrant flush:** a flush triggered while another flush is
      running (e.g. a route that logs during ``init``) is skipped

Architecture:
    ::

        log() ──► _logs ──(count >= auto_flush | timer)──► flush(dump)
                                                             │
                                      emit("flush", dump) ◄──┘
                                             │
                                   LogRouter.collect_logs(dump)
                                             │
                               route.collect_logs(logger, dump)
                                     └─► logger.get_logs(levels, categories, except)

Examples:
    >>> log = Logger()
    >>> log.log("fail", "error", "db")
    >>> log.log("ok", "info", "db")
    >>> log.log("trace1", "trace", "sys")
    >>> [e.message for e in log.get_logs("error,info")]
    ['fail', 'ok']

Tags:
    logging, buffer, filtering, observer, trellis-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import re
import threading
import time
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from trellis.core.component import Component
from trellis.core.logging import get_logger

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext

logger = get_logger(__name__)

_SEPARATORS = re.compile(r"[\s,]+")


class LogLevel(StrEnum):
    """Standard message levels."""

    TRACE = "trace"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    PROFILE = "profile"


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One logged message. Immutable once created."""

    message: str
    level: str
    category: str
    timestamp: float


FilterSpec = str | Iterable[str] | None


def parse_filter(value: FilterSpec) -> list[str]:
    """Normalise a filter to a list of lowercase names.

    Accepts ``"error, warning"`` style strings or any iterable of strings.
    """
    if not value:
        return []
    if isinstance(value, str):
        items: Iterable[str] = _SEPARATORS.split(value)
    else:
        items = value
    return [item.strip().lower() for item in items if item and item.strip()]


def category_matches(category: str, patterns: Iterable[str]) -> bool:
    """Whether *category* matches any of *patterns*.

    A pattern ending in ``.*`` matches every category that starts with
    the text before ``.*``.  This is a literal string prefix, so
    ``"system.*"`` also matches ``"systemx"``.  Any other pattern must be
    equal.  *category* and *patterns* are expected in lowercase.
    """
    for pattern in patterns:
        if category == pattern:
            return True
        if pattern.endswith(".*") and category.startswith(pattern[:-2]):
            return True
    return False


class Logger(Component):
    """Buffer of :class:`LogEntry` with threshold and timer based flushing.

    Observers subscribe with ``logger.on("flush", handler)``; *handler*
    receives the ``dump`` flag.
    """

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self._logs: list[LogEntry] = []
        self._log_count = 0
        self._auto_flush = 10000
        self.auto_dump = False
        self._processing = False
        self._lock = threading.RLock()
        self._timer_interval = 0.0
        self._timer_stop: threading.Event | None = None
        self._timer_thread: threading.Thread | None = None

    # ── Properties ───────────────────────────────────────────────

    @property
    def auto_flush(self) -> int:
        """Entries buffered before a forced flush; 0 disables."""
        return self._auto_flush

    @auto_flush.setter
    def auto_flush(self, value: int) -> None:
        self._auto_flush = max(0, int(value))

    @property
    def log_count(self) -> int:
        return self._log_count

    @property
    def processing(self) -> bool:
        return self._processing

    # ── Logging ──────────────────────────────────────────────────

    def log(self, message: str, level: str = LogLevel.INFO, category: str = "application") -> None:
        """Append a message; may trigger a synchronous flush."""
        if not self.is_initialized:
            self.init()

        entry = LogEntry(
            message=str(message),
            level=str(level or LogLevel.INFO),
            category=category or "application",
            timestamp=time.time(),
        )
        with self._lock:
            self._logs.append(entry)
            self._log_count += 1
            due = self._auto_flush > 0 and self._log_count >= self._auto_flush
        if due:
            self.flush(self.auto_dump)

    def get_logs(
        self,
        levels: FilterSpec = None,
        categories: FilterSpec = None,
        except_: FilterSpec = None,
    ) -> list[LogEntry]:
        """Return buffered entries that pass all filters, in insertion order.

        Args:
            levels: level names (case-insensitive); empty means all
            categories: category patterns; empty means all
            except_: category patterns to exclude

        The buffer itself is not modified.
        """
        level_set = set(parse_filter(levels))
        category_list = parse_filter(categories)
        except_list = parse_filter(except_)

        with self._lock:
            entries = list(self._logs)

        result = []
        for entry in entries:
            if level_set and entry.level.lower() not in level_set:
                continue
            category = entry.category.lower()
            if category_list and not category_matches(category, category_list):
                continue
            if except_list and category_matches(category, except_list):
                continue
            result.append(entry)
        return result

    def flush(self, dump: bool = False) -> None:
        """Notify ``flush`` observers, then clear the buffer.

        The buffer is cleared even if no observer is registered or an
        observer raises; entries not taken by an observer are lost.  A
        call made while a flush is already running is skipped.
        """
        with self._lock:
            if self._processing:
                return
            self._processing = True
            try:
                self.emit("flush", dump)
            finally:
                self._logs = []
                self._log_count = 0
                self._processing = False

    # ── Timer ────────────────────────────────────────────────────

    @property
    def auto_flush_interval(self) -> float:
        """Seconds between timer-driven flushes; 0 means no timer."""
        return self._timer_interval

    @auto_flush_interval.setter
    def auto_flush_interval(self, seconds: float) -> None:
        seconds = float(seconds or 0)
        if seconds > 0 and self._timer_thread is None:
            self._start_timer(seconds)
        elif seconds <= 0 and self._timer_thread is not None:
            self._stop_timer()

    def _start_timer(self, seconds: float) -> None:
        stop = threading.Event()

        def _loop() -> None:
            while not stop.wait(seconds):
                self.flush(self.auto_dump)

        self._timer_interval = seconds
        self._timer_stop = stop
        self._timer_thread = threading.Thread(target=_loop, daemon=True, name="trellis-log-flush")
        self._timer_thread.start()
        logger.debug("log_flush_timer_started", interval=seconds)

    def _stop_timer(self) -> None:
        if self._timer_stop is not None:
            self._timer_stop.set()
        if self._timer_thread is not None and self._timer_thread is not threading.current_thread():
            self._timer_thread.join(timeout=5.0)
        self._timer_thread = None
        self._timer_stop = None
        self._timer_interval = 0.0
        logger.debug("log_flush_timer_stopped")


__all__ = ["FilterSpec", "LogEntry", "LogLevel", "Logger", "category_matches", "parse_filter"]
