"""Console applications and commands."""

from trellis.framework.console.application import ConsoleApplication
from trellis.framework.console.command import ConsoleCommand
from trellis.framework.console.help import HelpCommand
from trellis.framework.console.runner import CommandRunner

__all__ = ["CommandRunner", "ConsoleApplication", "ConsoleCommand", "HelpCommand"]
