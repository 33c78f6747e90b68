"""IP address validator."""

from __future__ import annotations

import ipaddress
from typing import TYPE_CHECKING, Any

from trellis.framework.validators.base import Validator

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext
    from trellis.framework.model import Model


class IpValidator(Validator):
    """Attribute must be an IPv4 or IPv6 address."""

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self.allow_empty = True

    @staticmethod
    def is_ipv4(value: Any) -> bool:
        try:
            ipaddress.IPv4Address(str(value))
        except ValueError:
            return False
        return True

    @staticmethod
    def is_ipv6(value: Any) -> bool:
        try:
            ipaddress.IPv6Address(str(value))
        except ValueError:
            return False
        return True

    def validate_attribute(self, model: Model, attribute: str) -> None:
        value = getattr(model, attribute, None)
        if self.allow_empty and self.is_empty(value):
            return
        if not self.is_ipv4(value) and not self.is_ipv6(value):
            self.add_error(model, attribute, self.message or "{attribute} must be an IP address.")
