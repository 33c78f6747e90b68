"""Numeric validator (rule name ``numerical``)."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from trellis.framework.validators.base import Validator

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext
    from trellis.framework.model import Model


class NumberValidator(Validator):
    """Attribute must be a number (or an integer with ``integer_only``), optionally within ``min``/``max``."""

    integer_pattern = re.compile(r"^\s*[+-]?\d+\s*$")
    number_pattern = re.compile(r"^\s*[-+]?[0-9]*\.?[0-9]+([eE][-+]?[0-9]+)?\s*$")

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self.integer_only = False
        self.min: float | None = None
        self.max: float | None = None
        self.too_small: str | None = None
        self.too_big: str | None = None
        self.allow_empty = True

    def validate_attribute(self, model: Model, attribute: str) -> None:
        value = getattr(model, attribute, None)
        if self.allow_empty and self.is_empty(value):
            return
        if isinstance(value, bool):
            value = str(value)

        if self.integer_only:
            if not self.integer_pattern.match(str(value)):
                self.add_error(model, attribute, self.message or "{attribute} must be an integer.")
                return
        elif not self.number_pattern.match(str(value)):
            self.add_error(model, attribute, self.message or "{attribute} must be a number.")
            return

        number = float(value)
        if self.min is not None and number < float(self.min):
            message = self.too_small or "{attribute} is too small (minimum is {min})."
            self.add_error(model, attribute, message, {"min": self.min})
        if self.max is not None and number > float(self.max):
            message = self.too_big or "{attribute} is too big (maximum is {max})."
            self.add_error(model, attribute, message, {"max": self.max})
