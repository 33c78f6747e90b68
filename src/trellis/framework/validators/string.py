"""String length validator (rule name ``length``)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from trellis.framework.validators.base import Validator

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext
    from trellis.framework.model import Model


class StringValidator(Validator):
    """Checks the length of a string attribute against ``min``, ``max`` and ``is_``."""

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self.min: int | None = None
        self.max: int | None = None
        self.is_: int | None = None
        self.too_short: str | None = None
        self.too_long: str | None = None
        self.allow_empty = True

    def validate_attribute(self, model: Model, attribute: str) -> None:
        value = getattr(model, attribute, None)
        if self.allow_empty and self.is_empty(value):
            return
        if not isinstance(value, str):
            self.add_error(model, attribute, self.message or "{attribute} is invalid.")
            return

        length = len(value)
        if self.min is not None and length < self.min:
            message = self.too_short or "{attribute} is too short (minimum is {min} characters)."
            self.add_error(model, attribute, message, {"min": self.min})
        if self.max is not None and length > self.max:
            message = self.too_long or "{attribute} is too long (maximum is {max} characters)."
            self.add_error(model, attribute, message, {"max": self.max})
        if self.is_ is not None and length != self.is_:
            message = self.message or "{attribute} is of the wrong length (should be {length} characters)."
            self.add_error(model, attribute, message, {"length": self.is_})
