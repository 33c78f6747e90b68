"""
Explicit application context.

:class:`TrellisContext` owns the state every component needs to reach:
validated settings, the alias/class resolver, the application logger and
the (single) running application.  Components receive their context at
construction; a module-level current context exists for convenience
(``trellis.log(...)``, scripts, tests).

Usage::

    from trellis.core.context import TrellisContext

    with TrellisContext() as ctx:
        ctx.aliases.register_alias("plugins", "/srv/app/plugins")
        router = ctx.create_component({"class": "LogRouter", "routes": [...]})
        ctx.log("booted", "info", "app.boot")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .aliases import AliasResolver
from .errors import LifecycleError
from .factory import ComponentConfig, create_component
from .logging import get_logger
from .settings import TrellisSettings, get_settings

if TYPE_CHECKING:
    from trellis.core.application import Application
    from trellis.framework.logging.logger import Logger

logger = get_logger(__name__)


class TrellisContext:
    """Settings, aliases, logger and application for one process.

    The resolver and logger are created on first access and released via
    :meth:`close` (or the context-manager protocol).
    """

    def __init__(self, settings: TrellisSettings | None = None) -> None:
        self._settings = settings
        self._aliases: AliasResolver | None = None
        self._logger: Logger | None = None
        self._app: Application | None = None

    # ── Properties (lazy) ────────────────────────────────────────

    @property
    def settings(self) -> TrellisSettings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def debug(self) -> bool:
        return self.settings.debug

    @property
    def aliases(self) -> AliasResolver:
        if self._aliases is None:
            self._aliases = AliasResolver(debug=self.settings.debug)
        return self._aliases

    @property
    def logger(self) -> Logger:
        """The application :class:`~trellis.framework.logging.logger.Logger`."""
        if self._logger is None:
            log = self.create_component(
                {
                    "class": "Logger",
                    "auto_flush": self.settings.auto_flush,
                    "auto_dump": self.settings.auto_dump,
                }
            )
            log.init()
            self._logger = log
        return self._logger

    @property
    def app(self) -> Application | None:
        return self._app

    def set_application(self, app: Application | None) -> None:
        """Register the application; ``None`` disposes the current one.

        Raises:
            LifecycleError: an application is already registered.
        """
        if self._app is not None and app is not None:
            raise LifecycleError("Application can only be created once.")
        if app is None and self._app is not None:
            previous, self._app = self._app, None
            previous.dispose()
            return
        self._app = app

    def detach_application(self, app: Application) -> None:
        """Forget *app* without disposing it (failed construction)."""
        if self._app is app:
            self._app = None

    # ── Factory & logging shortcuts ──────────────────────────────

    def create_component(self, config: ComponentConfig, *args: Any) -> Any:
        return create_component(self, config, *args)

    def log(self, message: str, level: str = "info", category: str = "application") -> None:
        """Write a message to the application logger."""
        self.logger.log(message, level, category)

    def trace(self, message: str, category: str = "application") -> None:
        """Write a trace message; only in debug mode."""
        if self.debug:
            self.logger.log(message, "trace", category)

    # ── Lifecycle ────────────────────────────────────────────────

    def close(self) -> None:
        """Dispose of the application and stop the logger timer."""
        if self._app is not None:
            self.set_application(None)
        if self._logger is not None:
            self._logger.auto_flush_interval = 0

    def __enter__(self) -> TrellisContext:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


# ── Global convenience ───────────────────────────────────────────────────

_current_context: TrellisContext | None = None


def get_context() -> TrellisContext:
    """Get (or create) the current module-level :class:`TrellisContext`."""
    global _current_context
    if _current_context is None:
        _current_context = TrellisContext()
    return _current_context


def set_context(context: TrellisContext | None) -> TrellisContext | None:
    """Install *context* as current; returns the previous one."""
    global _current_context
    previous, _current_context = _current_context, context
    return previous


def reset_context() -> None:
    """Close and forget the current context (primarily for testing)."""
    global _current_context
    if _current_context is not None:
        _current_context.close()
    _current_context = None


__all__ = ["TrellisContext", "get_context", "reset_context", "set_context"]
