"""
Synchronous signals for component lifecycle hooks.

A :class:`Signal` is an ordered list of handlers.  ``emit`` calls each
handler in registration order and returns only after the last one has
finished; there are no deferred or asynchronous observers.  The logger's
``flush`` and the application's ``end`` notifications rely on this: the
logger clears its buffer as soon as ``emit`` returns.

Tags:
    trellis-core, events, observer, lifecycle

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

Handler = Callable[..., Any]


class Signal:
    """Ordered, synchronous observer list."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._handlers: list[Handler] = []

    def connect(self, handler: Handler) -> Handler:
        """Append *handler*; returns it so this can be used as a decorator."""
        self._handlers.append(handler)
        return handler

    def disconnect(self, handler: Handler) -> bool:
        """Remove the first registration of *handler*. Returns whether it was found."""
        try:
            self._handlers.remove(handler)
        except ValueError:
            return False
        return True

    def emit(self, *args: Any, **kwargs: Any) -> None:
        """Invoke every handler in registration order.

        Exceptions propagate to the emitter; the handler list is
        snapshotted first so handlers may (dis)connect during emission.
        """
        for handler in list(self._handlers):
            handler(*args, **kwargs)

    def clear(self) -> None:
        self._handlers.clear()

    @property
    def handlers(self) -> list[Handler]:
        return list(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    def __repr__(self) -> str:
        return f"Signal({self.name!r}, handlers={len(self._handlers)})"


__all__ = ["Handler", "Signal"]
