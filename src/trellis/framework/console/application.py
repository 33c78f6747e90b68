"""Console application: an :class:`Application` whose request is ``sys.argv``."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from trellis.core.application import Application
from trellis.core.errors import InvalidPathError

if TYPE_CHECKING:
    from trellis.core.context import TrellisContext
    from trellis.framework.console.runner import CommandRunner


class ConsoleApplication(Application):
    """
    Runs console commands.

    Commands come from ``command_map`` (explicit entries) and from
    ``<Name>Command.py`` files under ``command_path`` (default
    ``<base_path>/commands``).  Explicit entries win.
    """

    def __init__(
        self,
        config: Mapping[str, Any] | str | os.PathLike[str] | None = None,
        *,
        context: TrellisContext | None = None,
        argv: list[str] | None = None,
    ) -> None:
        self._command_map: dict[str, Any] = {}
        self._command_path: str | None = None
        self._runner: CommandRunner | None = None
        self.argv = argv
        super().__init__(config, context=context)

    @property
    def command_map(self) -> dict[str, Any]:
        return dict(self._command_map)

    @command_map.setter
    def command_map(self, value: Mapping[str, Any]) -> None:
        self._command_map = dict(value)

    @property
    def command_path(self) -> str:
        if self._command_path is None:
            return os.path.join(self.base_path, "commands")
        return self._command_path

    @command_path.setter
    def command_path(self, value: str | os.PathLike[str]) -> None:
        path = os.path.abspath(os.fspath(value))
        if not os.path.isdir(path):
            raise InvalidPathError("command", value, f'The command path "{value}" is not a valid directory.')
        self._command_path = path

    @property
    def command_runner(self) -> CommandRunner:
        if self._runner is None:
            self._runner = self.create_command_runner()
        return self._runner

    def create_command_runner(self) -> CommandRunner:
        runner = self.context.create_component("CommandRunner")
        runner.init()
        runner.commands = self._command_map
        runner.add_commands(self.command_path)
        return runner

    def init(self) -> None:
        super().init()
        self._runner = self.create_command_runner()

    def run_command(self, argv: list[str]) -> int:
        """Dispatch *argv* through the command runner and return the exit status."""
        return self.command_runner.run(argv)

    def process_request(self) -> None:
        self.end(self.run_command(self.argv if self.argv is not None else sys.argv))


__all__ = ["ConsoleApplication"]
