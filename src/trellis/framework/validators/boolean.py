"""Boolean validator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from trellis.framework.validators.base import Validator

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext
    from trellis.framework.model import Model


class BooleanValidator(Validator):
    """Attribute must equal ``true_value`` or ``false_value`` (``"1"``/``"0"`` by default)."""

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self.true_value: Any = "1"
        self.false_value: Any = "0"
        self.strict = False
        self.allow_empty = True

    def validate_attribute(self, model: Model, attribute: str) -> None:
        value = getattr(model, attribute, None)
        if self.allow_empty and self.is_empty(value):
            return

        if self.strict:
            valid = any(
                type(value) is type(candidate) and value == candidate
                for candidate in (self.true_value, self.false_value)
            )
        else:
            valid = str(value) in (str(self.true_value), str(self.false_value))

        if not valid:
            self.add_error(
                model,
                attribute,
                self.message or "{attribute} must be either {true} or {false}.",
                {"true": self.true_value, "false": self.false_value},
            )
