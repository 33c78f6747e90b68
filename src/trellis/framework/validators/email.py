"""Email address validator."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from trellis.framework.validators.base import Validator

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext
    from trellis.framework.model import Model

_LOCAL = r"[a-zA-Z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[a-zA-Z0-9!#$%&'*+/=?^_`{|}~-]+)*"
_DOMAIN = r"(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?\.)+[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?"

MAX_LENGTH = 254


class EmailValidator(Validator):
    """Attribute must be an email address; ``allow_name`` also accepts ``Name <addr>``."""

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self.pattern = f"^{_LOCAL}@{_DOMAIN}$"
        self.full_pattern = f"^[^@]*<{_LOCAL}@{_DOMAIN}>$"
        self.allow_name = False
        self.allow_empty = True

    def validate_value(self, value: Any) -> bool:
        if not isinstance(value, str) or len(value) > MAX_LENGTH:
            return False
        if re.match(self.pattern, value):
            return True
        return bool(self.allow_name and re.match(self.full_pattern, value))

    def validate_attribute(self, model: Model, attribute: str) -> None:
        value = getattr(model, attribute, None)
        if self.allow_empty and self.is_empty(value):
            return
        if not self.validate_value(value):
            self.add_error(model, attribute, self.message or "{attribute} is not a valid email address.")
