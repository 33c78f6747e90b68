"""
Application: configuration root, component registry and process lifecycle.

Manifesto:
    An application is configured once, from a mapping or a YAML/JSON
    file, and owns every long-lived component of the process.  Components
    are declared up front and built on first use, so a configuration may
    describe far more than a given run needs.

    - **Lazy components:** ``Unregistered → Configured → Live``
    - **One live instance per id:** the pending config is dropped once
      the component is built
    - **Clean shutdown:** signals and normal exit both end in ``on_end``,
      which emits ``end`` so routers can write what is still buffered

Architecture:
    ::

        Application(config)
            │ context.set_application(self)
            │ base_path        → alias "application"
            │ configure(rest)  → name, params, components, import, ...
            │ preload_components()
            └ init()

        run() ─► install SIGHUP/SIGINT/SIGTERM + atexit
              └► process_request()          (subclass)
                   │ uncaught exception → log "trellis.exception.uncaught", exit 6
                   ▼
              end(code) ─► sys.exit ─► atexit ─► on_end() ─► emit("end")

Examples:
    >>> app = MyApplication({
    ...     "name": "Reports",
    ...     "base_path": "/srv/reports",
    ...     "components": {"log": {"class": "LogRouter", "routes": [...]}},
    ...     "preload": ["log"],
    ... })
    >>> app.get_component("log")
    <trellis.framework.logging.router.LogRouter object at ...>

Tags:
    application, lifecycle, components, registry, signals, trellis-core

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

import atexit
import hashlib
import json
import os
import signal
import sys
import threading
import traceback
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from .component import Component, property_name
from .errors import ConfigError, InvalidPathError, NotSupportedError
from .factory import ComponentConfig, class_name_of, split_config
from .logging import get_logger

if TYPE_CHECKING:
    from .context import TrellisContext

logger = get_logger(__name__)

# Exit statuses for process termination paths.
EXIT_SIGHUP = 1
EXIT_SIGINT = 2
EXIT_SIGTERM = 15
EXIT_UNCAUGHT = 6

UNCAUGHT_CATEGORY = "trellis.exception.uncaught"


def load_config(config: Mapping[str, Any] | str | os.PathLike[str] | None) -> dict[str, Any]:
    """Return a fresh dict from a mapping or a ``.yaml``/``.yml``/``.json`` file.

    Raises:
        ConfigError: the file cannot be read or does not hold a mapping.
    """
    if config is None:
        return {}
    if isinstance(config, Mapping):
        return dict(config)

    path = Path(config)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read application config {path}: {exc}", cause=exc) from exc

    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigError(f"Application config {path} must contain a mapping.")
    return dict(data)


def _is_component_config(value: Any) -> bool:
    return isinstance(value, (str, type, Mapping))


class Application(Component):
    """Base class for applications. Subclasses implement :meth:`process_request`.

    Only one application may exist per :class:`TrellisContext`.
    """

    def __init__(
        self,
        config: Mapping[str, Any] | str | os.PathLike[str] | None = None,
        *,
        context: TrellisContext | None = None,
    ) -> None:
        super().__init__(context=context)
        self._name = "My Application"
        self._id: str | None = None
        self._base_path: str | None = None
        self._runtime_path: str | None = None
        self._params: dict[str, Any] = {}
        self._sendmail: str | None = None
        self._preload: list[str] = []
        self._imports: list[str] = []
        self._live: dict[str, Any] = {}
        self._pending: dict[str, dict[str, Any]] = {}
        self._registry_lock = threading.RLock()
        self._previous_handlers: dict[int, Any] = {}
        self._exit_hook_installed = False
        self._ended = False

        self.context.set_application(self)
        try:
            settings = load_config(config)
            self.base_path = settings.pop("base_path", None) or os.getcwd()
            self.configure(settings)
            self.preload_components()
            self.init()
        except BaseException:
            self.context.detach_application(self)
            raise

    # ── Properties ───────────────────────────────────────────────

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value

    @property
    def id(self) -> str:
        """Unique identifier; md5 of base path and name unless set explicitly."""
        if self._id is None:
            self._id = hashlib.md5(f"{self._base_path}{self._name}".encode("utf-8")).hexdigest()
        return self._id

    @id.setter
    def id(self, value: str) -> None:
        self._id = value

    @property
    def base_path(self) -> str:
        return self._base_path or os.getcwd()

    @base_path.setter
    def base_path(self, value: str | os.PathLike[str]) -> None:
        path = os.path.abspath(os.fspath(value))
        if not os.path.isdir(path):
            raise InvalidPathError("base", value, f'Application base path "{value}" is not a valid directory.')
        self._base_path = path
        self.context.aliases.register_alias("application", path)

    @property
    def runtime_path(self) -> str:
        """Directory for generated files; defaults to ``<base_path>/runtime``."""
        if self._runtime_path is None:
            self.runtime_path = os.path.join(self.base_path, "runtime")
        return self._runtime_path

    @runtime_path.setter
    def runtime_path(self, value: str | os.PathLike[str]) -> None:
        path = os.path.abspath(os.fspath(value))
        if not os.path.isdir(path) or not os.access(path, os.W_OK):
            raise InvalidPathError(
                "runtime",
                value,
                f'Application runtime path "{value}" is not valid. '
                "Make sure it is a directory writable by the process.",
            )
        self._runtime_path = path

    @property
    def params(self) -> dict[str, Any]:
        """User parameters; assigning a mapping merges it into the current ones."""
        return self._params

    @params.setter
    def params(self, value: Mapping[str, Any]) -> None:
        self._params.update(value)

    @property
    def sendmail(self) -> str:
        return self._sendmail or self.context.settings.sendmail

    @sendmail.setter
    def sendmail(self, value: str) -> None:
        self._sendmail = value

    @property
    def preload(self) -> list[str]:
        return list(self._preload)

    @preload.setter
    def preload(self, value: str | Iterable[str]) -> None:
        self._preload = [value] if isinstance(value, str) else list(value)

    @property
    def imports(self) -> list[str]:
        """Aliases imported at configuration time (config key ``import``)."""
        return list(self._imports)

    @imports.setter
    def imports(self, aliases: str | Iterable[str]) -> None:
        if isinstance(aliases, str):
            aliases = [aliases]
        for alias in aliases:
            self.context.aliases.resolve_class(alias)
            self._imports.append(alias)

    import_ = imports

    @property
    def components(self) -> dict[str, Any]:
        """Live components by id."""
        with self._registry_lock:
            return dict(self._live)

    @components.setter
    def components(self, value: Mapping[str, Any]) -> None:
        self.set_components(value)

    @property
    def cache(self) -> Any:
        """The ``cache`` component, or ``None`` when not configured."""
        return self.get_component("cache")

    # ── Component registry ───────────────────────────────────────

    def has_component(self, id: str) -> bool:
        """Whether *id* is live or has a pending configuration."""
        with self._registry_lock:
            return id in self._live or id in self._pending

    def get_component(self, id: str, create_if_null: bool = True) -> Any:
        """Return the live component *id*, building it from its configuration if needed.

        A configuration with ``enabled: False`` is never built; ``None``
        is returned instead, as for unknown ids.
        """
        with self._registry_lock:
            if id in self._live:
                return self._live[id]
            if id not in self._pending or not create_if_null:
                return None

            config = dict(self._pending[id])
            if not config.pop("enabled", True):
                return None

            self.context.trace(f'Loading "{id}" application component', "system.application")
            component = self.context.create_component(config)
            if callable(getattr(component, "init", None)):
                component.init()
            self._live[id] = component
            del self._pending[id]
            return component

    def set_component(self, id: str, component: Any, merge: bool = True) -> None:
        """Register a component instance or configuration under *id*.

        * ``None`` removes *id* entirely.
        * An object becomes the live component (initialized if needed).
        * A configuration whose class differs from the current entry
          replaces it; otherwise its values are merged into the pending
          configuration, or assigned onto the live component.
        * A configuration without ``class`` keeps the class of the
          existing entry; for an unknown *id* it raises
          :class:`~trellis.core.errors.MissingClassError`.
        """
        with self._registry_lock:
            if component is None:
                self._live.pop(id, None)
                self._pending.pop(id, None)
                return

            if not _is_component_config(component):
                if isinstance(component, Component) and not component.is_initialized:
                    component.init()
                self._live[id] = component
                self._pending.pop(id, None)
                return

            if isinstance(component, Mapping) and "class" not in component:
                # property override for a component declared earlier
                if id in self._live:
                    component = {"class": type(self._live[id]), **component}
                elif id in self._pending:
                    component = {"class": self._pending[id]["class"], **component}

            class_spec, properties = split_config(component)
            config = {"class": class_spec, **properties}

            if id in self._live:
                existing = self._live[id]
                if class_name_of(class_spec) != type(existing).__name__:
                    del self._live[id]
                    self._pending[id] = config
                    return
                for key, value in properties.items():
                    if key != "enabled":
                        setattr(existing, property_name(key), value)
                return

            pending = self._pending.get(id)
            if merge and pending is not None and class_name_of(pending["class"]) == class_name_of(class_spec):
                pending.update(properties)
            else:
                self._pending[id] = config

    def set_components(self, components: Mapping[str, ComponentConfig | Any], merge: bool = True) -> None:
        for id, component in components.items():
            self.set_component(id, component, merge)

    def get_component_config(self, id: str) -> dict[str, Any] | None:
        """Pending configuration for *id*, or ``None`` once it is live."""
        with self._registry_lock:
            config = self._pending.get(id)
            return dict(config) if config is not None else None

    def preload_components(self) -> None:
        """Build every component listed in ``preload``."""
        for id in self._preload:
            self.get_component(id)

    # ── Lifecycle ────────────────────────────────────────────────

    def run(self) -> None:
        """Install process handlers and handle the request."""
        self._install_handlers()
        self.context.trace("Application started", "system.application")
        try:
            self.process_request()
        except Exception as exc:
            self.handle_exception(exc)
            self.end(EXIT_UNCAUGHT)

    def process_request(self) -> None:
        """Handle the current request. Must be overridden."""
        raise NotSupportedError(f"{type(self).__name__} does not implement process_request().")

    def handle_exception(self, exc: BaseException) -> None:
        """Log an uncaught exception and print it to stderr."""
        text = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        self.context.log(text.rstrip(), "error", UNCAUGHT_CATEGORY)
        sys.stderr.write(text)
        sys.stderr.flush()

    def end(self, status: int = 0) -> None:
        """Terminate the process with *status*; ``on_end`` runs at exit."""
        sys.exit(status)

    def on_end(self) -> None:
        """Emit ``end`` once; registered as an at-exit hook by :meth:`run`."""
        if self._ended:
            return
        self._ended = True
        self.context.trace("Application closed", "system.application")
        self.emit("end")

    def dispose(self) -> None:
        """Flush pending log entries, restore process handlers and drop listeners."""
        self.context.logger.flush(dump=True)
        self._remove_handlers()
        self.clear_listeners()
        logger.debug("application_disposed", app=self._name)

    # ── Process handlers ─────────────────────────────────────────

    def _install_handlers(self) -> None:
        if not self._exit_hook_installed:
            atexit.register(self.on_end)
            self._exit_hook_installed = True

        if threading.current_thread() is not threading.main_thread():
            logger.debug("signal_handlers_skipped", reason="not main thread")
            return

        for name, status in (("SIGHUP", EXIT_SIGHUP), ("SIGINT", EXIT_SIGINT), ("SIGTERM", EXIT_SIGTERM)):
            signum = getattr(signal, name, None)
            if signum is None or signum in self._previous_handlers:
                continue
            self._previous_handlers[signum] = signal.signal(signum, self._make_signal_handler(status))

    def _make_signal_handler(self, status: int):
        def _handler(signum: int, frame: Any) -> None:
            logger.debug("signal_received", signum=signum, status=status)
            self.end(status)

        return _handler

    def _remove_handlers(self) -> None:
        if self._exit_hook_installed:
            atexit.unregister(self.on_end)
            self._exit_hook_installed = False
        if threading.current_thread() is threading.main_thread():
            for signum, previous in self._previous_handlers.items():
                signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
        self._previous_handlers.clear()


__all__ = [
    "Application",
    "EXIT_SIGHUP",
    "EXIT_SIGINT",
    "EXIT_SIGTERM",
    "EXIT_UNCAUGHT",
    "UNCAUGHT_CATEGORY",
    "load_config",
]
