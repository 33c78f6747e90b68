"""Required value validator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from trellis.framework.validators.base import Validator

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext
    from trellis.framework.model import Model


class RequiredValidator(Validator):
    """Attribute must not be blank, or must equal ``required_value`` when set.

    Without ``strict`` the comparison is made on string forms, so ``1``
    satisfies ``required_value="1"``.
    """

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self.required_value: Any = None
        self.strict = False

    def validate_attribute(self, model: Model, attribute: str) -> None:
        value = getattr(model, attribute, None)
        if self.required_value is not None:
            if self.strict:
                matches = type(value) is type(self.required_value) and value == self.required_value
            else:
                matches = value is not None and str(value) == str(self.required_value)
            if not matches:
                self.add_error(
                    model, attribute, self.message or "{attribute} must be {value}.", {"value": self.required_value}
                )
        elif self.is_empty(value, trim=True):
            self.add_error(model, attribute, self.message or "{attribute} cannot be blank.")
