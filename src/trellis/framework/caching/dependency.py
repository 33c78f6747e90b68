"""Cache dependencies."""

from __future__ import annotations

from typing import Any


class CacheDependency:
    """Invalidates a cached value when its dependent data changes.

    The data is captured by :meth:`evaluate_dependency` when the value is
    stored and compared again on every read.  Subclasses override
    :meth:`generate_dependent_data`.  Instances are stored alongside the
    value, so they must be serializable.
    """

    def __init__(self) -> None:
        self._data: Any = None

    def evaluate_dependency(self) -> None:
        self._data = self.generate_dependent_data()

    @property
    def has_changed(self) -> bool:
        return self.generate_dependent_data() != self._data

    @property
    def dependent_data(self) -> Any:
        return self._data

    def generate_dependent_data(self) -> Any:
        return None


__all__ = ["CacheDependency"]
