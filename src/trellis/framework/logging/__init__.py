"""Application logging: in-memory logger, log routes and the router."""

from trellis.framework.logging.logger import LogEntry, Logger, LogLevel, category_matches, parse_filter
from trellis.framework.logging.router import LogRouter
from trellis.framework.logging.routes import ConsoleLogRoute, EmailLogRoute, FileLogRoute, LogRoute

__all__ = [
    "ConsoleLogRoute",
    "EmailLogRoute",
    "FileLogRoute",
    "LogEntry",
    "LogLevel",
    "LogRoute",
    "LogRouter",
    "Logger",
    "category_matches",
    "parse_filter",
]
