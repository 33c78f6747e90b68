"""Built-in ``help`` command."""

from __future__ import annotations

from trellis.framework.console.command import ConsoleCommand


class HelpCommand(ConsoleCommand):
    """Lists available commands, or shows the usage of one command.

    Always returns exit status 1.
    """

    def run(self, args: list[str]) -> int:
        runner = self.runner
        script = runner.script_name
        name = args[0].lower() if args else None

        command = runner.create_command(name) if name and name in runner.commands else None
        if command is not None:
            command.init()
            self.echo(command.help)
            return 1

        names = sorted(runner.commands)
        lines = [
            "Trellis command runner",
            f"Usage: {script} <command-name> [parameters...]",
            "",
        ]
        if names:
            lines.append("The following commands are available:")
            lines.extend(f" - {n}" for n in names)
            lines.append("")
            lines.append(f"To see individual command help, use the following:\n   {script} help <command-name>")
        else:
            lines.append("No available commands.")
            lines.append("Please define them under the following directory:")
            lines.append(f"\t{self.context.aliases.resolve_alias('application.commands') or 'commands'}")
        self.echo("\n".join(lines))
        return 1


__all__ = ["HelpCommand"]
