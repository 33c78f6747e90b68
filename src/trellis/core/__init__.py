"""
Core primitives: errors, diagnostics, settings, components, aliases,
the component factory, the explicit context and the application.
"""

from trellis.core.aliases import CORE_CLASSES, AliasResolver
from trellis.core.component import Component
from trellis.core.context import TrellisContext, get_context, reset_context, set_context
from trellis.core.errors import (
    ClassNameMismatchError,
    ClassNotFoundError,
    ConfigError,
    ErrorCategory,
    InvalidAliasError,
    InvalidPathError,
    LifecycleError,
    MissingClassError,
    NotSupportedError,
    TrellisError,
    UsageError,
)
from trellis.core.events import Signal
from trellis.core.factory import create_component

__all__ = [
    "AliasResolver",
    "CORE_CLASSES",
    "ClassNameMismatchError",
    "ClassNotFoundError",
    "Component",
    "ConfigError",
    "ErrorCategory",
    "InvalidAliasError",
    "InvalidPathError",
    "LifecycleError",
    "MissingClassError",
    "NotSupportedError",
    "Signal",
    "TrellisContext",
    "TrellisError",
    "UsageError",
    "create_component",
    "get_context",
    "reset_context",
    "set_context",
]
