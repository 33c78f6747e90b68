"""List membership validator (rule name ``in``)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from trellis.core.errors import ConfigError
from trellis.framework.validators.base import Validator

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext
    from trellis.framework.model import Model


class RangeValidator(Validator):
    """Attribute must be one of ``range`` (or, with ``not_``, none of them)."""

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self.range: list[Any] | None = None
        self.not_ = False
        self.strict = False
        self.allow_empty = True

    def validate_attribute(self, model: Model, attribute: str) -> None:
        value = getattr(model, attribute, None)
        if self.allow_empty and self.is_empty(value):
            return
        if not isinstance(self.range, (list, tuple, set, frozenset)):
            raise ConfigError('The "range" property must be specified with a list of values.')

        if self.strict:
            found = any(type(value) is type(item) and value == item for item in self.range)
        else:
            found = value in self.range or str(value) in {str(item) for item in self.range}

        if not self.not_ and not found:
            self.add_error(model, attribute, self.message or "{attribute} is not in the list.")
        elif self.not_ and found:
            self.add_error(model, attribute, self.message or "{attribute} is in the list.")
