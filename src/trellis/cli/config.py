"""
CLI: ``trellis config`` - settings inspection.
"""

from __future__ import annotations

import typer

from trellis.cli.utils import console

app = typer.Typer(no_args_is_help=True)


@app.command("show")
def show_config(
    format: str = typer.Option("table", "--format", "-f", help="Output format: table, json, env"),
) -> None:
    """Show the effective settings."""
    from trellis.core.settings import get_settings

    settings = get_settings()

    if format == "json":
        console.print_json(settings.model_dump_json())
        return

    if format == "env":
        for key, value in sorted(settings.model_dump().items()):
            console.print(f"TRELLIS_{key.upper()}={value}", markup=False, highlight=False)
        return

    from rich.table import Table

    table = Table(title="Trellis settings")
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in sorted(settings.model_dump().items()):
        table.add_row(key, str(value))
    console.print(table)
