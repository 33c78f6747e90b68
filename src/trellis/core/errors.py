"""
Structured error types for the Trellis framework.

Manifesto:
    Misconfiguration must fail fast and loudly, at the exact point where the
    bad value enters the system.  Persistence failures in log sinks, by
    contrast, are swallowed where they happen and never reach this module.
    Validation problems on data models are accumulated as user-facing
    messages and are never raised at all.

    - **Typed hierarchy:** One subclass per kind of misconfiguration
    - **Rich context:** Errors carry the offending alias / path / class
    - **Error chaining:** The original exception is kept as ``cause``

Architecture:
    ::

        TrellisError  (category, context, cause)
        ├── ConfigError                (CONFIG)
        │   ├── InvalidAliasError
        │   ├── InvalidPathError
        │   ├── MissingClassError
        │   ├── ClassNotFoundError
        │   └── ClassNameMismatchError
        ├── LifecycleError             (LIFECYCLE)
        │   └── NotSupportedError
        └── UsageError                 (USAGE)

Examples:
    >>> err = InvalidAliasError("app.models.User")
    >>> err.category
    <ErrorCategory.CONFIG: 'CONFIG'>
    >>> err.to_dict()["context"]
    {'alias': 'app.models.User'}

Tags:
    error-handling, exception-hierarchy, configuration, lifecycle,
    trellis-core

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification."""

    CONFIG = "CONFIG"  # Invalid alias, path, class or component config
    LIFECYCLE = "LIFECYCLE"  # Singleton misuse, abstract method not overridden
    USAGE = "USAGE"  # Console command called with bad action/options
    INTERNAL = "INTERNAL"  # Bugs, unexpected state


class TrellisError(Exception):
    """
    Base exception for all Trellis framework errors.

    Subclasses set ``default_category``; instances carry a free-form
    ``context`` dict that is rendered by :meth:`to_dict` for structured
    logging.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = dict(context or {})
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TrellisError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ConfigError("Bad route").with_context(route="file")
        """
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(TrellisError):
    """
    Configuration error.

    Raised synchronously at the point of misconfiguration; never retried.
    """

    default_category = ErrorCategory.CONFIG


class InvalidAliasError(ConfigError):
    """Alias root is unknown, or the alias does not point to an existing file."""

    def __init__(self, alias: str, message: str | None = None):
        self.alias = alias
        super().__init__(
            message
            or f'Alias "{alias}" is invalid. Make sure it points to an existing directory or file.',
            context={"alias": alias},
        )


class InvalidPathError(ConfigError):
    """A configured directory (base, runtime, log, command path) does not exist."""

    def __init__(self, kind: str, path: Any, message: str | None = None):
        self.kind = kind
        self.path = path
        super().__init__(
            message or f'{kind} "{path}" is not a valid directory.',
            context={"kind": kind, "path": str(path)},
        )


class MissingClassError(ConfigError):
    """Object configuration has no ``class`` element."""

    def __init__(self, message: str | None = None):
        super().__init__(message or 'Object configuration must contain a "class" element.')


class ClassNotFoundError(ConfigError):
    """A class name could not be resolved to a constructor."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Class "{name}" could not be found.', context={"class": name})


class ClassNameMismatchError(ConfigError):
    """Loaded class file's base name disagrees with the requested class name."""

    def __init__(self, name: str, file: str):
        self.name = name
        self.file = file
        super().__init__(
            f'Class name "{name}" does not match class file "{file}".',
            context={"class": name, "file": file},
        )


# =============================================================================
# LIFECYCLE ERRORS
# =============================================================================


class LifecycleError(TrellisError):
    """Framework object used against its lifecycle (e.g. second application)."""

    default_category = ErrorCategory.LIFECYCLE


class NotSupportedError(LifecycleError):
    """An abstract operation was called on a class that does not override it."""


# =============================================================================
# USAGE ERRORS
# =============================================================================


class UsageError(TrellisError):
    """Console command invoked with an unknown action or unknown options."""

    default_category = ErrorCategory.USAGE


__all__ = [
    "ErrorCategory",
    "TrellisError",
    "ConfigError",
    "InvalidAliasError",
    "InvalidPathError",
    "MissingClassError",
    "ClassNotFoundError",
    "ClassNameMismatchError",
    "LifecycleError",
    "NotSupportedError",
    "UsageError",
]
