"""Console log route for development."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from rich.console import Console
from rich.text import Text

from trellis.core.logging import get_logger
from trellis.framework.logging.logger import LogEntry, LogLevel
from trellis.framework.logging.routes.base import TIME_FORMAT, LogRoute

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext

logger = get_logger(__name__)


class ConsoleLogRoute(LogRoute):
    """
    Writes entries to standard output, one line each, in buffer order.

    Lines are colored by level: errors red, warnings yellow, everything
    else green.  Colors are dropped automatically when stdout is not a
    terminal.
    """

    LEVEL_STYLES = {
        LogLevel.ERROR: "red",
        LogLevel.WARNING: "yellow",
    }

    def __init__(self, *, context: TrellisContext | None = None, console: Console | None = None) -> None:
        super().__init__(context=context)
        self.color = True
        self._console = console

    @property
    def console(self) -> Console:
        if self._console is None:
            self._console = Console(highlight=False, no_color=not self.color)
        return self._console

    def render(self, entry: LogEntry) -> Text:
        stamp = datetime.fromtimestamp(entry.timestamp).strftime(TIME_FORMAT)
        style = self.LEVEL_STYLES.get(entry.level.lower(), "green")
        return Text.assemble(
            (stamp, "grey50"),
            (f" [{entry.level}] [{entry.category}] ", style),
            entry.message,
        )

    def process_logs(self, logs: list[LogEntry]) -> None:
        try:
            for entry in logs:
                self.console.print(self.render(entry), soft_wrap=True)
        except OSError as exc:
            logger.debug("console_log_write_failed", error=str(exc), dropped=len(logs))
