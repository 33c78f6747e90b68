"""
Log route base class.

Provides common functionality for log route implementations:
- Enable/disable
- Level filtering
- Category filtering (with ``.*`` prefix patterns and exclusions)
- A pending buffer filled by ``collect_logs`` and drained by ``process_logs``
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from trellis.core.component import Component
from trellis.core.errors import NotSupportedError
from trellis.framework.logging.logger import FilterSpec, LogEntry, parse_filter

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext
    from trellis.framework.logging.logger import Logger

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class LogRoute(Component):
    """
    Base class for log routes.

    Configuration keys: ``enabled``, ``levels``, ``categories``,
    ``except`` (stored as ``except_``).  Filters accept comma separated
    strings or lists.
    """

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self.enabled = True
        self._levels: list[str] = []
        self._categories: list[str] = []
        self._except: list[str] = []
        self.logs: list[LogEntry] = []

    @property
    def levels(self) -> list[str]:
        return list(self._levels)

    @levels.setter
    def levels(self, value: FilterSpec) -> None:
        self._levels = parse_filter(value)

    @property
    def categories(self) -> list[str]:
        return list(self._categories)

    @categories.setter
    def categories(self, value: FilterSpec) -> None:
        self._categories = parse_filter(value)

    @property
    def except_(self) -> list[str]:
        return list(self._except)

    @except_.setter
    def except_(self, value: FilterSpec) -> None:
        self._except = parse_filter(value)

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def format_log_message(self, entry: LogEntry) -> str:
        """Render one entry as ``<YYYY-MM-DD HH:MM:SS> [level] [category] message``."""
        stamp = datetime.fromtimestamp(entry.timestamp).strftime(TIME_FORMAT)
        return f"{stamp} [{entry.level}] [{entry.category}] {entry.message}\n"

    def collect_logs(self, logger: Logger, dump: bool = False) -> None:
        """Append matching entries from *logger* to the pending buffer.

        With *dump*, a non-empty buffer is processed immediately and then
        cleared.
        """
        self.logs.extend(logger.get_logs(self._levels, self._categories, self._except))
        if dump and self.logs:
            pending, self.logs = self.logs, []
            self.process_logs(pending)

    def process_logs(self, logs: list[LogEntry]) -> None:
        """Render and persist *logs*. Subclasses must override."""
        raise NotSupportedError(f"{type(self).__name__} does not implement process_logs().")
