"""Command runner: maps the first CLI argument to a console command."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from rich.console import Console

from trellis.core.component import Component
from trellis.core.errors import UsageError
from trellis.core.logging import get_logger

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext
    from trellis.framework.console.command import ConsoleCommand

logger = get_logger(__name__)

COMMAND_SUFFIX = "Command.py"


class CommandRunner(Component):
    """
    Dispatches ``<script> <command> [action] [--options] [args]``.

    ``commands`` maps lowercase command names to a class name, alias,
    ``.py`` file path or component configuration.  A missing or unknown
    command falls back to ``help``.
    """

    def __init__(self, *, context: TrellisContext | None = None, err_console: Console | None = None) -> None:
        super().__init__(context=context)
        self._commands: dict[str, Any] = {}
        self.script_name = "trellis"
        self._err_console = err_console

    @property
    def commands(self) -> dict[str, Any]:
        return dict(self._commands)

    @commands.setter
    def commands(self, value: Mapping[str, Any]) -> None:
        self._commands.update(value)

    @property
    def err_console(self) -> Console:
        if self._err_console is None:
            self._err_console = Console(stderr=True, highlight=False)
        return self._err_console

    def run(self, argv: list[str]) -> int:
        """Run the command named in *argv* (``argv[0]`` is the script).

        Returns:
            Exit status; 1 after a usage error.
        """
        if argv:
            self.script_name = os.path.basename(argv[0])
        args = list(argv[1:])

        name = args[0].lower() if args else "help"
        command = self.create_command(name)
        if command is None:
            command = self.create_command("help")
        else:
            args = args[1:]

        command.init()
        try:
            status = command.run(args)
        except UsageError as exc:
            self.err_console.print(f"Error: {exc.message}\n\n{command.help}", markup=False, highlight=False)
            return 1
        return int(status or 0)

    def create_command(self, name: str) -> ConsoleCommand | None:
        """Instantiate command *name*; ``None`` if it is unknown."""
        if name not in self._commands:
            if name == "help":
                return self.context.create_component("HelpCommand", "help", self)
            return None

        config = self._commands[name]
        if isinstance(config, str) and config.endswith(".py"):
            class_name = os.path.splitext(os.path.basename(config))[0]
            self.context.aliases.map_class_file(class_name, config)
            config = class_name
        return self.context.create_component(config, name, self)

    @staticmethod
    def find_commands(path: str | os.PathLike[str]) -> dict[str, str]:
        """Map ``<Name>Command.py`` files under *path* to ``name`` → file."""
        path = os.fspath(path)
        if not os.path.isdir(path):
            return {}
        commands = {}
        for entry in sorted(os.listdir(path)):
            full = os.path.join(path, entry)
            if entry.endswith(COMMAND_SUFFIX) and len(entry) > len(COMMAND_SUFFIX) and os.path.isfile(full):
                commands[entry[: -len(COMMAND_SUFFIX)].lower()] = full
        return commands

    def add_commands(self, path: str | os.PathLike[str]) -> None:
        """Register commands found under *path*; existing names are kept."""
        for name, file in self.find_commands(path).items():
            self._commands.setdefault(name, file)
        logger.debug("console_commands_added", path=os.fspath(path), commands=sorted(self._commands))


__all__ = ["CommandRunner"]
