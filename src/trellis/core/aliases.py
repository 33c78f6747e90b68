"""
Path aliases and the class registry.

Manifesto:
    Configuration refers to classes by short strings: a bare class name
    (``"FileLogRoute"``), a path alias (``"application.models.User"``) or
    a Python import string (``"myapp.routes:SlackRoute"``).  This module
    turns those strings into constructors, loading class files lazily on
    first use so an application only pays for what it configures.

    - **Aliases:** ``root.seg.seg`` → ``<root dir>/seg/seg``
    - **Directory imports:** ``root.seg.*`` adds a directory to the
      include path; bare class names are then searched there
    - **Class-per-file:** ``<dir>/<ClassName>.py`` must export ``ClassName``
    - **Explicit registry:** built-in classes are a name → import-string
      table, imported on first lookup

Architecture:
    ::

        resolve_alias("app.models.User")  → "/base/models/User"
        resolve_alias("app.models.*")     → "/base/models"
        resolve_class("app.models.User")  → "User"   (deferred file mapping)
        resolve_class("app.models.*")     → "/base/models"  (include path)
        get_class("User")                 → <class User>

        lookup order in get_class(name):
            1. registered classes
            2. deferred class-file map
            3. built-in class table
            4. include directories

Guardrails:
    ❌ Importing every plugin module at startup
    ✅ ``resolve_class(alias)`` records a mapping, ``get_class`` loads it
    ❌ ``User = SomethingElse`` inside ``User.py``
    ✅ In debug mode that raises :class:`ClassNameMismatchError`

Tags:
    trellis-core, aliases, class-loading, registry, importlib

Doc-Types:
    api-reference
"""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
import os
import sys
import threading
from pathlib import Path
from types import ModuleType

from .errors import ClassNameMismatchError, ClassNotFoundError, InvalidAliasError
from .logging import get_logger

logger = get_logger(__name__)

SYSTEM_PATH = str(Path(__file__).resolve().parent.parent)

# Built-in classes, imported on first lookup.
CORE_CLASSES: dict[str, str] = {
    "Application": "trellis.core.application:Application",
    "Component": "trellis.core.component:Component",
    # Logging
    "Logger": "trellis.framework.logging.logger:Logger",
    "LogRouter": "trellis.framework.logging.router:LogRouter",
    "LogRoute": "trellis.framework.logging.routes.base:LogRoute",
    "ConsoleLogRoute": "trellis.framework.logging.routes.console:ConsoleLogRoute",
    "EmailLogRoute": "trellis.framework.logging.routes.email:EmailLogRoute",
    "FileLogRoute": "trellis.framework.logging.routes.file:FileLogRoute",
    # Console
    "ConsoleApplication": "trellis.framework.console.application:ConsoleApplication",
    "CommandRunner": "trellis.framework.console.runner:CommandRunner",
    "ConsoleCommand": "trellis.framework.console.command:ConsoleCommand",
    "HelpCommand": "trellis.framework.console.help:HelpCommand",
    # Caching
    "Cache": "trellis.framework.caching.base:Cache",
    "CacheDependency": "trellis.framework.caching.dependency:CacheDependency",
    "MemCache": "trellis.framework.caching.memcache:MemCache",
    "MemoryCache": "trellis.framework.caching.memory:MemoryCache",
    # Models & validators
    "Model": "trellis.framework.model:Model",
    "Validator": "trellis.framework.validators.base:Validator",
    "BooleanValidator": "trellis.framework.validators.boolean:BooleanValidator",
    "EmailValidator": "trellis.framework.validators.email:EmailValidator",
    "InlineValidator": "trellis.framework.validators.inline:InlineValidator",
    "IpValidator": "trellis.framework.validators.ip:IpValidator",
    "NumberValidator": "trellis.framework.validators.number:NumberValidator",
    "RangeValidator": "trellis.framework.validators.range:RangeValidator",
    "RequiredValidator": "trellis.framework.validators.required:RequiredValidator",
    "StringValidator": "trellis.framework.validators.string:StringValidator",
    "UrlValidator": "trellis.framework.validators.url:UrlValidator",
}


def import_string(target: str) -> type:
    """Import ``"package.module:Name"`` and return ``Name``."""
    module_name, _, attr = target.partition(":")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ClassNotFoundError(target) from exc


class AliasResolver:
    """Alias table, class registry and include path for one context.

    All tables live for the lifetime of the resolver.  A re-entrant lock
    guards them so a resolver may be shared between threads.
    """

    def __init__(self, *, debug: bool = False) -> None:
        self.debug = debug
        self._aliases: dict[str, str] = {"system": SYSTEM_PATH}
        self._resolved: dict[str, str] = {}
        self._imports: dict[str, str] = {}
        self._classes: dict[str, type] = {}
        self._class_map: dict[str, str] = {}
        self._modules: dict[str, ModuleType] = {}
        self._include_paths: list[str] = []
        self._lock = threading.RLock()

    # ── Aliases ──────────────────────────────────────────────────

    def register_alias(self, alias: str, path: str | os.PathLike[str] | None) -> None:
        """Create, replace or (with a falsy *path*) remove a root alias.

        Neither existence nor writability of *path* is checked here.
        """
        with self._lock:
            if not path:
                self._aliases.pop(alias, None)
            else:
                self._aliases[alias] = os.path.abspath(os.fspath(path))
            prefix = f"{alias}."
            for key in [k for k in self._resolved if k.startswith(prefix)]:
                del self._resolved[key]
        logger.debug("alias_registered", alias=alias, path=self._aliases.get(alias))

    def resolve_alias(self, alias: str) -> str | None:
        """Translate *alias* into a filesystem path.

        Returns ``None`` when the root segment is not a registered alias.
        A trailing ``*`` segment yields the directory itself.  The result
        is not checked for existence.
        """
        with self._lock:
            if alias in self._aliases:
                return self._aliases[alias]
            if alias in self._resolved:
                return self._resolved[alias]

            root, sep, rest = alias.partition(".")
            if not sep or root not in self._aliases:
                return None

            parts = rest.split(".")
            if parts[-1] == "*":
                parts = parts[:-1]
            path = os.path.join(self._aliases[root], *parts)
            self._resolved[alias] = path
            return path

    @property
    def aliases(self) -> dict[str, str]:
        return dict(self._aliases)

    @property
    def include_paths(self) -> list[str]:
        """Directories searched for ``<Name>.py`` class files.

        Empty until the first directory import, which also adds the
        working directory ahead of the imported one.
        """
        return list(self._include_paths)

    # ── Class resolution ─────────────────────────────────────────

    def resolve_class(self, alias: str, force_load: bool = False) -> str:
        """Import a class or a directory by alias.

        * ``"Name"`` - returned as-is; with *force_load* it is recorded as
          imported when the name is already resolvable.
        * ``"root.path.Name"`` - records ``Name`` → ``<path>.py`` for
          deferred loading, or loads it immediately with *force_load*.
          Returns ``"Name"``.
        * ``"root.path.*"`` - adds the directory to the include path and
          returns it.

        Raises:
            InvalidAliasError: unknown root alias, or forced load of a
                file that does not exist.
            ClassNameMismatchError: debug mode, file does not export a
                class of its own base name.
        """
        with self._lock:
            if alias in self._imports:
                return self._imports[alias]

            if "." not in alias:
                if force_load and self.has_class(alias):
                    self._imports[alias] = alias
                return alias

            class_name = alias.rsplit(".", 1)[1]
            path = self.resolve_alias(alias)
            if path is None:
                raise InvalidAliasError(alias)

            if class_name != "*":
                class_file = f"{path}.py"
                if force_load:
                    if not os.path.isfile(class_file) or not os.access(class_file, os.R_OK):
                        raise InvalidAliasError(
                            alias,
                            f'Alias "{alias}" is invalid. Make sure it points to an existing '
                            "Python file and the file is readable.",
                        )
                    self._classes[class_name] = self._load_class_file(class_name, class_file)
                    self._imports[alias] = class_name
                else:
                    self._class_map[class_name] = class_file
                return class_name

            if not os.path.isdir(path):
                raise InvalidAliasError(alias)
            if not self._include_paths:
                self._include_paths.append(os.getcwd())
            if path not in self._include_paths:
                self._include_paths.append(path)
            self._imports[alias] = path
            return path

    def register_class(self, name: str, cls: type) -> None:
        """Bind *cls* under *name* explicitly."""
        with self._lock:
            self._classes[name] = cls

    def map_class_file(self, name: str, class_file: str | os.PathLike[str]) -> None:
        """Record that *name* is defined in *class_file*; loaded on first lookup."""
        with self._lock:
            self._class_map[name] = os.path.abspath(os.fspath(class_file))

    def has_class(self, name: str) -> bool:
        """Whether *name* can be resolved without raising."""
        with self._lock:
            if name in self._classes or name in self._class_map or name in CORE_CLASSES:
                return True
            return self._find_in_include_paths(name) is not None

    def get_class(self, spec: str | type) -> type:
        """Return the constructor for a class name, alias or import string.

        Raises:
            ClassNotFoundError: nothing matches *spec*.
        """
        if isinstance(spec, type):
            return spec

        with self._lock:
            if spec in self._classes:
                return self._classes[spec]

            if ":" in spec:
                cls = import_string(spec)
                self._classes[spec] = cls
                return cls

            if "." in spec:
                name = self.resolve_class(spec, force_load=True)
                return self._classes[name]

            if spec in self._class_map:
                cls = self._load_class_file(spec, self._class_map[spec])
            elif spec in CORE_CLASSES:
                cls = import_string(CORE_CLASSES[spec])
            else:
                class_file = self._find_in_include_paths(spec)
                if class_file is None:
                    raise ClassNotFoundError(spec)
                cls = self._load_class_file(spec, class_file)

            self._classes[spec] = cls
            return cls

    # ── Internals ────────────────────────────────────────────────

    def _find_in_include_paths(self, name: str) -> str | None:
        for directory in self._include_paths:
            class_file = os.path.join(directory, f"{name}.py")
            if os.path.isfile(class_file):
                return class_file
        return None

    def _load_class_file(self, name: str, class_file: str) -> type:
        module = self._modules.get(class_file)
        if module is None:
            digest = hashlib.md5(class_file.encode("utf-8")).hexdigest()[:12]
            module_name = f"_trellis_class_{Path(class_file).stem}_{digest}"
            spec = importlib.util.spec_from_file_location(module_name, class_file)
            if spec is None or spec.loader is None:
                raise ClassNotFoundError(name)
            module = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = module
            try:
                spec.loader.exec_module(module)
            except BaseException:
                sys.modules.pop(module_name, None)
                raise
            self._modules[class_file] = module
            logger.debug("class_file_loaded", name=name, file=class_file)

        cls = getattr(module, name, None)
        if cls is None or not isinstance(cls, type):
            if self.debug:
                raise ClassNameMismatchError(name, class_file)
            raise ClassNotFoundError(name)
        if self.debug and cls.__name__ != Path(class_file).stem:
            raise ClassNameMismatchError(cls.__name__, class_file)
        return cls


__all__ = ["AliasResolver", "CORE_CLASSES", "SYSTEM_PATH", "import_string"]
