"""
Console command base class.

A command groups related actions.  ``<script> <command> <action>
--option=value arg ...`` calls ``action_<action>(option=value,
args=[arg, ...])`` on the command.  Options that name a method parameter
are passed to it; the remaining ones are assigned to command attributes
of the same name.

Usage::

    class BackupCommand(ConsoleCommand):
        compress = False

        def action_index(self, target: str = "backups", args=None) -> int:
            ...
            return 0

    # trellis run app.yaml backup --target=/srv/bak --compress
"""

from __future__ import annotations

import inspect
import re
from typing import TYPE_CHECKING, Any

from rich.console import Console

from trellis.core.component import Component
from trellis.core.errors import UsageError

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext
    from trellis.framework.console.runner import CommandRunner

_OPTION = re.compile(r"^--(\w+)(=(.*))?$", re.DOTALL)

ACTION_PREFIX = "action_"


class ConsoleCommand(Component):
    """Base class for console commands. Actions are ``action_<name>`` methods."""

    default_action = "index"

    def __init__(self, name: str, runner: CommandRunner, *, context: TrellisContext | None = None) -> None:
        super().__init__(context=context)
        self._name = name
        self._runner = runner
        self._console: Console | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def runner(self) -> CommandRunner:
        return self._runner

    @property
    def console(self) -> Console:
        if self._console is None:
            self._console = Console(highlight=False)
        return self._console

    def echo(self, text: str) -> None:
        """Print *text* to stdout without markup processing."""
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)

    # ── Dispatch ─────────────────────────────────────────────────

    def run(self, args: list[str]) -> Any:
        """Parse *args* and call the matching action.

        Returns the action's result (an exit status or ``None``).

        Raises:
            UsageError: unknown action, unknown options.
        """
        options, positionals = self.resolve_request(args)
        action = positionals.pop(0) if positionals else self.default_action

        method = getattr(self, f"{ACTION_PREFIX}{action}", None)
        if not action.isidentifier() or not callable(method):
            self.usage_error(f'Unknown action "{action}".')

        params: dict[str, Any] = {}
        for pname, param in inspect.signature(method).parameters.items():
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            if pname == "args":
                params[pname] = positionals
            elif pname in options:
                value = options.pop(pname)
                if isinstance(param.default, list) and not isinstance(value, list):
                    value = [value]
                elif isinstance(value, list) and not isinstance(param.default, list):
                    self.usage_error(f'Option "--{pname}" requires a single value.')
                params[pname] = value
            elif param.default is not param.empty:
                params[pname] = param.default
            else:
                params[pname] = None

        unknown = []
        for oname, value in options.items():
            if oname.startswith("_") or not hasattr(self, oname) or callable(getattr(self, oname)):
                unknown.append(oname)
                continue
            try:
                setattr(self, oname, value)
            except AttributeError:
                # read-only property
                unknown.append(oname)
        if unknown:
            self.usage_error(f"Unknown options: {', '.join(unknown)}")

        return method(**params)

    @staticmethod
    def resolve_request(args: list[str]) -> tuple[dict[str, Any], list[str]]:
        """Split *args* into ``--name[=value]`` options and positional arguments.

        A flag without a value is ``True``; a repeated option collects its
        values into a list.
        """
        options: dict[str, Any] = {}
        positionals: list[str] = []
        for arg in args:
            match = _OPTION.match(arg)
            if match is None:
                positionals.append(arg)
                continue
            name = match.group(1)
            value: Any = match.group(3) if match.group(2) is not None else True
            if name in options:
                current = options[name]
                options[name] = [*current, value] if isinstance(current, list) else [current, value]
            else:
                options[name] = value
        return options, positionals

    # ── Help ─────────────────────────────────────────────────────

    @property
    def actions(self) -> list[str]:
        """Action names, sorted."""
        return sorted(
            name[len(ACTION_PREFIX):]
            for name in dir(self)
            if name.startswith(ACTION_PREFIX) and callable(getattr(self, name))
        )

    @property
    def help(self) -> str:
        """Usage text listing every action and its options."""
        script = self._runner.script_name
        lines = []
        for action in self.actions:
            method = getattr(self, f"{ACTION_PREFIX}{action}")
            hints = []
            for pname, param in inspect.signature(method).parameters.items():
                if pname == "args" or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                    continue
                if isinstance(param.default, list):
                    hint = f"--{pname}=value --{pname}=value ..."
                else:
                    hint = f"--{pname}=value"
                hints.append(hint if param.default is param.empty else f"[{hint}]")
            prefix = "" if action == self.default_action else f"{action} "
            lines.append(f"{script} {self._name} {prefix}{' '.join(hints)}".rstrip())

        if not lines:
            return f"Usage: {script} {self._name}"
        if len(lines) == 1:
            return f"Usage: {lines[0]}"
        return "Usage:\n" + "\n".join(f"   {line}" for line in lines)

    def usage_error(self, message: str) -> None:
        """Abort the command with a usage error; the runner prints help."""
        raise UsageError(message, context={"command": self._name})


__all__ = ["ConsoleCommand"]
