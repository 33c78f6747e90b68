"""
Data model with declarative validation rules.

Subclasses list their attributes and rules; :meth:`Model.validate`
collects user-facing error messages per attribute.  Invalid input never
raises.

Usage::

    class Contact(Model):
        def __init__(self, **kwargs):
            super().__init__()
            self.name = None
            self.email = None
            self.attributes = kwargs

        def rules(self):
            return [
                {"attributes": "name, email", "validator": "required"},
                {"attributes": "email", "validator": "email", "on": "signup"},
            ]

    contact = Contact(name="Ada", email="not-an-email")
    contact.scenario = "signup"
    contact.validate()          # False
    contact.get_error("email")  # "Email is not a valid email address."
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from trellis.core.component import Component
from trellis.core.errors import ConfigError
from trellis.framework.validators.base import Validator

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext

_CAMEL_BOUNDARY = re.compile(r"(?<![A-Z])[A-Z]")


class Model(Component):
    """Base class for validated data models."""

    def __init__(self, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self._errors: dict[str, list[str]] = {}
        self._validators: list[Validator] | None = None
        self._scenario = ""

    # ── Declarations (override) ──────────────────────────────────

    def attribute_names(self) -> list[str]:
        """Names of the model's attributes; defaults to its public instance attributes."""
        return [name for name in vars(self) if not name.startswith("_")]

    def rules(self) -> list[Mapping[str, Any]]:
        """Validation rules: mappings with ``attributes``, ``validator`` and validator options."""
        return []

    def attribute_labels(self) -> dict[str, str]:
        return {}

    # ── Scenario ─────────────────────────────────────────────────

    @property
    def scenario(self) -> str:
        return self._scenario

    @scenario.setter
    def scenario(self, value: str) -> None:
        self._scenario = value

    # ── Validation ───────────────────────────────────────────────

    def validate(self, attributes: Iterable[str] | None = None, clear_errors: bool = True) -> bool:
        """Run every rule active in the current scenario. Returns ``True`` when there are no errors."""
        if clear_errors:
            self.clear_errors()
        names = list(attributes) if attributes is not None else None
        for validator in self.get_validators():
            validator.validate(self, names)
        return not self.has_errors()

    @property
    def validators(self) -> list[Validator]:
        """All validators built from :meth:`rules`, regardless of scenario."""
        if self._validators is None:
            self._validators = self.create_validators()
        return list(self._validators)

    def get_validators(self, attribute: str | None = None) -> list[Validator]:
        """Validators active in the current scenario, optionally only those for *attribute*."""
        return [
            validator
            for validator in self.validators
            if validator.apply_to(self._scenario) and (attribute is None or attribute in validator.attributes)
        ]

    def create_validators(self) -> list[Validator]:
        validators = []
        for rule in self.rules():
            if "attributes" not in rule or "validator" not in rule:
                raise ConfigError(
                    f"{type(self).__name__} has an invalid validation rule. "
                    "The rule must specify attributes to be validated and the validator name."
                )
            params = {key: value for key, value in rule.items() if key not in ("attributes", "validator")}
            validators.append(Validator.create_validator(rule["validator"], self, rule["attributes"], params))
        return validators

    def is_attribute_required(self, attribute: str) -> bool:
        from trellis.framework.validators.required import RequiredValidator

        return any(isinstance(v, RequiredValidator) for v in self.get_validators(attribute))

    # ── Errors ───────────────────────────────────────────────────

    def has_errors(self, attribute: str | None = None) -> bool:
        if attribute is None:
            return bool(self._errors)
        return attribute in self._errors

    def get_errors(self, attribute: str | None = None) -> dict[str, list[str]] | list[str]:
        """All errors by attribute, or the list for one *attribute*."""
        if attribute is None:
            return {name: list(messages) for name, messages in self._errors.items()}
        return list(self._errors.get(attribute, []))

    def get_error(self, attribute: str) -> str | None:
        """First error for *attribute*."""
        messages = self._errors.get(attribute)
        return messages[0] if messages else None

    def add_error(self, attribute: str, error: str) -> None:
        self._errors.setdefault(attribute, []).append(error)

    def add_errors(self, errors: Mapping[str, str | Iterable[str]]) -> None:
        for attribute, messages in errors.items():
            if isinstance(messages, str):
                self.add_error(attribute, messages)
            else:
                for message in messages:
                    self.add_error(attribute, message)

    def clear_errors(self, attribute: str | None = None) -> None:
        if attribute is None:
            self._errors = {}
        else:
            self._errors.pop(attribute, None)

    # ── Attributes ───────────────────────────────────────────────

    @property
    def attributes(self) -> dict[str, Any]:
        return self.get_attributes()

    @attributes.setter
    def attributes(self, values: Mapping[str, Any]) -> None:
        self.set_attributes(values)

    def get_attributes(self, names: Iterable[str] | None = None) -> dict[str, Any]:
        values = {name: getattr(self, name, None) for name in self.attribute_names()}
        if names is None:
            return values
        return {name: values.get(name) for name in names}

    def set_attributes(self, values: Mapping[str, Any]) -> None:
        """Assign *values*; names that are not declared attributes are ignored."""
        declared = set(self.attribute_names())
        for name, value in values.items():
            if name in declared:
                setattr(self, name, value)

    def unset_attributes(self, names: Iterable[str] | None = None) -> None:
        for name in names if names is not None else self.attribute_names():
            if hasattr(self, name):
                setattr(self, name, None)

    # ── Labels ───────────────────────────────────────────────────

    def get_attribute_label(self, attribute: str) -> str:
        return self.attribute_labels().get(attribute) or self.generate_attribute_label(attribute)

    @staticmethod
    def generate_attribute_label(name: str) -> str:
        """``first_name`` / ``firstName`` → ``First Name``."""
        spaced = _CAMEL_BOUNDARY.sub(lambda m: f" {m.group(0)}", name)
        for separator in "-_.":
            spaced = spaced.replace(separator, " ")
        return " ".join(word.capitalize() for word in spaced.lower().split())


__all__ = ["Model"]
