"""Validator that delegates to a model method."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from trellis.framework.validators.base import Validator

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext
    from trellis.framework.model import Model


class InlineValidator(Validator):
    """Calls ``model.<method>(attribute, params)`` for each attribute."""

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self.method: str = ""
        self.params: dict[str, Any] = {}

    def validate_attribute(self, model: Model, attribute: str) -> None:
        getattr(model, self.method)(attribute, self.params)
