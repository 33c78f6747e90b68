"""
Validator base class and the rule → validator factory.

Manifesto:
    Validation problems are data, not exceptions.  A validator inspects
    one or more attributes of a :class:`~trellis.framework.model.Model`
    and records user-facing messages on it; nothing is raised for
    invalid input.  Only a malformed *rule* (missing ``attributes`` or
    ``validator``, ``in`` without a range) is a configuration error.

    - **Declarative rules:** ``{"attributes": "email, name", "validator": "required"}``
    - **Scenarios:** ``on`` / ``except`` restrict a rule to some scenarios
    - **Inline rules:** a validator name that is a model method calls it

Architecture:
    ::

        Model.rules()
            └─► Validator.create_validator(name, model, attributes, params)
                    ├── model has method ``name``   → InlineValidator
                    ├── name in BUILTIN_VALIDATORS → built-in class
                    └── otherwise                  → class name / alias / import string

        Model.validate() ─► validator.validate(model) ─► validate_attribute(model, attr)
                                                        └─► add_error(model, attr, message, params)

Examples:
    >>> class Signup(Model):
    ...     def rules(self):
    ...         return [
    ...             {"attributes": "email", "validator": "required"},
    ...             {"attributes": "email", "validator": "email"},
    ...             {"attributes": "age", "validator": "numerical", "integer_only": True, "min": 18},
    ...         ]

Tags:
    validation, rules, scenarios, model, trellis-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from trellis.core.component import Component
from trellis.core.errors import NotSupportedError

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext
    from trellis.framework.model import Model

_SEPARATORS = re.compile(r"[\s,]+")

BUILTIN_VALIDATORS: dict[str, str] = {
    "required": "RequiredValidator",
    "url": "UrlValidator",
    "length": "StringValidator",
    "numerical": "NumberValidator",
    "boolean": "BooleanValidator",
    "in": "RangeValidator",
    "ip": "IpValidator",
    "email": "EmailValidator",
}


def split_names(value: str | Iterable[str] | None) -> list[str]:
    """``"a, b c"`` or ``["a", "b"]`` to a list of names."""
    if not value:
        return []
    if isinstance(value, str):
        return [item for item in _SEPARATORS.split(value) if item]
    return list(value)


class Validator(Component):
    """Base class for validators. Subclasses implement :meth:`validate_attribute`."""

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self._attributes: list[str] = []
        self.skip_on_error = False
        self._on: frozenset[str] | None = None
        self._except: frozenset[str] | None = None
        self.message: str | None = None

    # ── Properties ───────────────────────────────────────────────

    @property
    def attributes(self) -> list[str]:
        return list(self._attributes)

    @attributes.setter
    def attributes(self, value: str | Iterable[str]) -> None:
        self._attributes = split_names(value)

    @property
    def on(self) -> frozenset[str] | None:
        """Scenarios the rule applies to; ``None`` means all."""
        return self._on

    @on.setter
    def on(self, value: str | Iterable[str] | None) -> None:
        names = split_names(value)
        self._on = frozenset(names) if names else None

    @property
    def except_(self) -> frozenset[str] | None:
        """Scenarios the rule never applies to."""
        return self._except

    @except_.setter
    def except_(self, value: str | Iterable[str] | None) -> None:
        names = split_names(value)
        self._except = frozenset(names) if names else None

    # ── Validation ───────────────────────────────────────────────

    def validate(self, model: Model, attributes: Iterable[str] | None = None) -> None:
        """Validate *attributes* (default: all of this rule's) on *model*."""
        if attributes is not None:
            wanted = set(attributes)
            names = [name for name in self._attributes if name in wanted]
        else:
            names = self._attributes
        for attribute in names:
            if not self.skip_on_error or not model.has_errors(attribute):
                self.validate_attribute(model, attribute)

    def validate_attribute(self, model: Model, attribute: str) -> None:
        raise NotSupportedError(f"{type(self).__name__} does not implement validate_attribute().")

    def apply_to(self, scenario: str) -> bool:
        """Whether this rule is active in *scenario*."""
        if self._except and scenario in self._except:
            return False
        return not self._on or scenario in self._on

    def add_error(self, model: Model, attribute: str, message: str, params: Mapping[str, Any] | None = None) -> None:
        """Record *message* on *model*, substituting ``{attribute}`` and *params*."""
        replacements = {"{attribute}": model.get_attribute_label(attribute)}
        for key, value in (params or {}).items():
            replacements[key if key.startswith("{") else f"{{{key}}}"] = str(value)
        for placeholder, value in replacements.items():
            message = message.replace(placeholder, value)
        model.add_error(attribute, message)

    @staticmethod
    def is_empty(value: Any, trim: bool = False) -> bool:
        """``None``, ``""``, an empty collection, or (with *trim*) whitespace only."""
        if value is None or value == "":
            return True
        if isinstance(value, (list, tuple, dict, set, frozenset)) and not value:
            return True
        return trim and isinstance(value, str) and not value.strip()

    # ── Factory ──────────────────────────────────────────────────

    @classmethod
    def create_validator(
        cls,
        name: str | type,
        model: Model,
        attributes: str | Iterable[str],
        params: Mapping[str, Any] | None = None,
    ) -> Validator:
        """Build the validator for one rule.

        *name* is a model method (inline rule), a built-in alias such as
        ``"required"`` or ``"in"``, or any class name / alias / import
        string the context can resolve.
        """
        params = dict(params or {})
        on = params.pop("on", None)
        except_ = params.pop("except", params.pop("except_", None))

        if isinstance(name, str) and callable(getattr(model, name, None)):
            from trellis.framework.validators.inline import InlineValidator

            validator: Validator = InlineValidator(context=model.context)
            validator.method = name
            if "skip_on_error" in params:
                validator.skip_on_error = params.pop("skip_on_error")
            validator.params = params
            validator.attributes = attributes
        else:
            class_spec = BUILTIN_VALIDATORS.get(name, name) if isinstance(name, str) else name
            validator = model.context.create_component({"class": class_spec, **params, "attributes": attributes})

        validator.on = on
        validator.except_ = except_
        return validator


__all__ = ["BUILTIN_VALIDATORS", "Validator", "split_names"]
