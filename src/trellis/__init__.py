"""
trellis-core: a component framework for Python applications.

Configured components built on demand, path aliases for class loading,
and a buffered application logger with pluggable routes.

Usage::

    import trellis

    app = trellis.create_console_application("config/console.yaml")
    trellis.log("booted", "info", "app.boot")
    app.run()
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from trellis.core.context import get_context

if TYPE_CHECKING:
    from trellis.core.application import Application
    from trellis.framework.console.application import ConsoleApplication

__version__ = "0.1.0"

AppConfig = Mapping[str, Any] | str | os.PathLike[str] | None


def create_application(cls: type[Application] | str, config: AppConfig = None) -> Application:
    """Create an application of class *cls* (a class or class name) in the current context."""
    context = get_context()
    app_class = context.aliases.get_class(cls)
    return app_class(config, context=context)


def create_console_application(config: AppConfig = None) -> ConsoleApplication:
    """Create a :class:`ConsoleApplication` in the current context."""
    from trellis.framework.console.application import ConsoleApplication

    return ConsoleApplication(config, context=get_context())


def app() -> Application | None:
    """The application registered in the current context."""
    return get_context().app


def log(message: str, level: str = "info", category: str = "application") -> None:
    """Log a message through the current context's logger."""
    get_context().log(message, level, category)


def trace(message: str, category: str = "application") -> None:
    """Log a trace message; only recorded in debug mode."""
    get_context().trace(message, category)


__all__ = [
    "__version__",
    "app",
    "create_application",
    "create_console_application",
    "get_context",
    "log",
    "trace",
]
