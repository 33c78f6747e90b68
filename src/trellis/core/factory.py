"""
Create component instances from configuration.

Manifesto:
    Every configurable object in an application (log routes, caches,
    console commands, user components) is described the same way: either
    a bare class name, or a mapping with a ``class`` element plus initial
    property values.  One factory turns both forms into live objects so
    the rest of the framework never calls constructors directly.

Features:
    - ``create_component()`` — resolve the class, construct, assign props
    - Extra positional arguments are forwarded to the constructor
    - ``Component`` subclasses also receive the owning context

Examples:
    >>> router = create_component(ctx, {
    ...     "class": "LogRouter",
    ...     "routes": [{"class": "ConsoleLogRoute", "levels": "error,warning"}],
    ... })
    >>> cmd = create_component(ctx, "HelpCommand", "help", runner)

Tags:
    trellis-core, factory-pattern, configuration, class-loading

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .component import Component, property_name
from .errors import MissingClassError
from .logging import get_logger

if TYPE_CHECKING:
    from .context import TrellisContext

logger = get_logger(__name__)

ComponentConfig = str | type | Mapping[str, Any]


def split_config(config: ComponentConfig) -> tuple[str | type, dict[str, Any]]:
    """Separate the class element from the property values.

    The caller's mapping is never mutated.

    Raises:
        MissingClassError: a mapping without ``class``, or an unsupported type.
    """
    if isinstance(config, (str, type)):
        return config, {}
    if isinstance(config, Mapping):
        if "class" not in config:
            raise MissingClassError()
        properties = {key: value for key, value in config.items() if key != "class"}
        return config["class"], properties
    raise MissingClassError(
        f"Component configuration must be a class name or a mapping, got {type(config).__name__}."
    )


def create_component(context: TrellisContext, config: ComponentConfig, *args: Any) -> Any:
    """Create an object and initialize its properties from *config*.

    The class is resolved through the context's alias resolver and loaded
    on demand.  *args* are passed to the constructor.  ``init()`` is not
    called; that is the owner's responsibility.
    """
    class_spec, properties = split_config(config)
    cls = context.aliases.get_class(class_spec)

    if issubclass(cls, Component):
        obj = cls(*args, context=context)
        obj.configure(properties)
    else:
        obj = cls(*args)
        for key, value in properties.items():
            setattr(obj, property_name(key), value)

    logger.debug("component_created", cls=cls.__name__, properties=sorted(properties))
    return obj


def class_name_of(class_spec: str | type) -> str:
    """Short class name for a class, alias or import string."""
    if isinstance(class_spec, type):
        return class_spec.__name__
    return class_spec.rsplit(":", 1)[-1].rsplit(".", 1)[-1]


__all__ = ["ComponentConfig", "class_name_of", "create_component", "split_config"]
