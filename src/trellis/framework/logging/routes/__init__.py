"""Log routes: sinks that receive filtered entries from the logger."""

from trellis.framework.logging.routes.base import LogRoute
from trellis.framework.logging.routes.console import ConsoleLogRoute
from trellis.framework.logging.routes.email import EmailLogRoute
from trellis.framework.logging.routes.file import FileLogRoute

__all__ = ["ConsoleLogRoute", "EmailLogRoute", "FileLogRoute", "LogRoute"]
