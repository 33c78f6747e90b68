"""
Root Typer application for the ``trellis`` CLI.

``trellis run CONFIG [ARGS]...`` boots a console application from a
YAML/JSON config file and dispatches ``ARGS`` to its command runner.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.markup import escape
from typer import Typer

from trellis.cli.utils import err_console

app = Typer(
    name="trellis",
    help="trellis - component framework and log routing for Python applications.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from trellis import __version__

        typer.echo(f"trellis-core {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """trellis CLI - run console applications and inspect settings."""
    from trellis.core.logging import configure_logging
    from trellis.core.settings import get_settings

    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_format == "json")


# ── Commands ─────────────────────────────────────────────────────────────


@app.command(
    "run",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def run_command(
    config: Path = typer.Argument(..., exists=True, dir_okay=False, help="Application config (YAML or JSON)."),
    args: list[str] | None = typer.Argument(None, help="Command, action, options and arguments."),
) -> None:
    """Run a console command: [bold]trellis run app.yaml <command> [action] [--opt=value][/bold]."""
    from trellis.core.context import TrellisContext
    from trellis.core.errors import ConfigError, LifecycleError
    from trellis.framework.console.application import ConsoleApplication

    argv = ["trellis", *(args or [])]
    with TrellisContext() as ctx:
        try:
            application = ConsoleApplication(config, context=ctx, argv=argv)
        except (ConfigError, LifecycleError) as exc:
            err_console.print(f"[red]Configuration Error:[/red] {escape(exc.message)}")
            raise typer.Exit(1) from exc
        status = application.run_command(argv)
        application.on_end()
    raise typer.Exit(status)


# ── Sub-command registration ─────────────────────────────────────────────

from trellis.cli.config import app as config_app  # noqa: E402

app.add_typer(config_app, name="config", help="Settings inspection.")


if __name__ == "__main__":
    app()
