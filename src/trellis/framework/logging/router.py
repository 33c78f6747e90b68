"""
Log router.

Manifesto:
    The router is the only place where the logger and the sinks meet.
    It turns route declarations into live routes and wires two signals:

    - logger ``flush``  → every enabled route filters and buffers
    - application ``end`` → every enabled route filters and writes

    Producers pay only for the in-memory append; sink latency is paid at
    flush or at the end of the process.

Examples:
    Configured as an application component::

        components:
          log:
            class: LogRouter
            routes:
              - class: FileLogRoute
                levels: error, warning
              - class: ConsoleLogRoute
                categories: app.*
        preload: [log]

Tags:
    logging, routing, observer, trellis-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from trellis.core.component import Component
from trellis.core.factory import ComponentConfig
from trellis.core.logging import get_logger
from trellis.framework.logging.routes.base import LogRoute

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext

logger = get_logger(__name__)


class LogRouter(Component):
    """Creates configured routes and connects them to the logger and application."""

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self._routes: list[Any] = []

    @property
    def routes(self) -> list[Any]:
        """Route instances after ``init``; route configurations before."""
        return list(self._routes)

    @routes.setter
    def routes(self, configs: Iterable[ComponentConfig | LogRoute]) -> None:
        self._routes.extend(configs)

    def init(self) -> None:
        super().init()
        routes: list[LogRoute] = []
        for config in self._routes:
            route = config if isinstance(config, LogRoute) else self.context.create_component(config)
            route.init()
            routes.append(route)
        self._routes = routes

        self.context.logger.on("flush", self.collect_logs)
        app = self.context.app
        if app is not None:
            app.on("end", self.process_logs)
        logger.debug("log_router_initialized", routes=[type(r).__name__ for r in routes])

    def collect_logs(self, dump: bool = False) -> None:
        """Let each enabled route pull its entries from the logger."""
        log = self.context.logger
        for route in self._routes:
            if route.enabled:
                route.collect_logs(log, dump)

    def process_logs(self) -> None:
        """Final pass: each enabled route collects and writes immediately."""
        self.collect_logs(dump=True)

    def detach(self) -> None:
        """Disconnect from the logger and application signals."""
        self.context.logger.off("flush", self.collect_logs)
        app = self.context.app
        if app is not None:
            app.off("end", self.process_logs)


__all__ = ["LogRouter"]
