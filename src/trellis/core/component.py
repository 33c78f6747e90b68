"""
Base class for every configurable Trellis object.

Properties are ordinary Python ``@property`` accessors, so assigning a
configuration value runs the setter's validation.  Lifecycle is a single
``init()`` step that the owner (application, router, factory caller)
invokes after configuration has been applied.

Usage::

    class Mailer(Component):
        def __init__(self, *, context=None):
            super().__init__(context=context)
            self._host = "localhost"

        @property
        def host(self) -> str:
            return self._host

        @host.setter
        def host(self, value: str) -> None:
            if not value:
                raise ConfigError("Mailer.host cannot be empty")
            self._host = value

    mailer = Mailer()
    mailer.configure({"host": "smtp.example.com"})
    mailer.init()

Tags:
    trellis-core, component, lifecycle, properties, observer

Doc-Types:
    api-reference
"""

from __future__ import annotations

import keyword
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from .events import Handler, Signal

if TYPE_CHECKING:
    from .context import TrellisContext


def property_name(key: str) -> str:
    """Map a configuration key to the attribute it sets (``except`` -> ``except_``)."""
    return f"{key}_" if keyword.iskeyword(key) else key


class Component:
    """Configurable object with an init lifecycle and synchronous signals."""

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        self._context = context
        self._initialized = False
        self._signals: dict[str, Signal] = {}

    # ── Context ──────────────────────────────────────────────────

    @property
    def context(self) -> TrellisContext:
        """The owning context; falls back to the current global context."""
        if self._context is None:
            from .context import get_context

            return get_context()
        return self._context

    # ── Lifecycle ────────────────────────────────────────────────

    def init(self) -> None:
        """Initialize the component.

        Overrides must call the parent implementation so the component
        is marked as initialized.
        """
        self._initialized = True

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def configure(self, config: Mapping[str, Any] | None) -> None:
        """Assign each configuration entry as a property."""
        if not config:
            return
        for key, value in config.items():
            setattr(self, property_name(key), value)

    # ── Signals ──────────────────────────────────────────────────

    def signal(self, event: str) -> Signal:
        if event not in self._signals:
            self._signals[event] = Signal(event)
        return self._signals[event]

    def on(self, event: str, handler: Handler) -> Handler:
        """Subscribe *handler* to *event*. Handlers run synchronously, in order."""
        return self.signal(event).connect(handler)

    def off(self, event: str, handler: Callable[..., Any]) -> bool:
        if event not in self._signals:
            return False
        return self._signals[event].disconnect(handler)

    def emit(self, event: str, *args: Any, **kwargs: Any) -> None:
        """Notify subscribers of *event*; returns after all have completed."""
        if event in self._signals:
            self._signals[event].emit(*args, **kwargs)

    def clear_listeners(self) -> None:
        for sig in self._signals.values():
            sig.clear()
        self._signals.clear()


__all__ = ["Component", "property_name"]
