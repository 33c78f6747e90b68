"""URL validator."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from trellis.framework.validators.base import Validator

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext
    from trellis.framework.model import Model

MAX_LENGTH = 2000


class UrlValidator(Validator):
    """
    Attribute must be an absolute URL with one of ``valid_schemes``.

    With ``default_scheme`` set, a value without ``://`` is prefixed with
    it and the attribute is updated to the normalised URL.
    """

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self.pattern = r"^{schemes}://(([A-Z0-9][A-Z0-9_-]*)(\.[A-Z0-9][A-Z0-9_-]*)+)"
        self.valid_schemes = ["http", "https"]
        self.default_scheme: str | None = None
        self.allow_empty = True

    def validate_value(self, value: Any) -> str | None:
        """Normalised URL, or ``None`` when *value* is not valid."""
        if not isinstance(value, str) or len(value) >= MAX_LENGTH:
            return None
        if self.default_scheme and "://" not in value:
            value = f"{self.default_scheme}://{value}"
        schemes = "(" + "|".join(re.escape(s) for s in self.valid_schemes) + ")"
        pattern = self.pattern.replace("{schemes}", schemes)
        if re.match(pattern, value, re.IGNORECASE):
            return value
        return None

    def validate_attribute(self, model: Model, attribute: str) -> None:
        value = getattr(model, attribute, None)
        if self.allow_empty and self.is_empty(value):
            return
        normalised = self.validate_value(value)
        if normalised is None:
            self.add_error(model, attribute, self.message or "{attribute} is not a valid URL.")
        else:
            setattr(model, attribute, normalised)
