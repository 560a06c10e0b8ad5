"""Command registration utilities for the Tubetrack CLI."""

from __future__ import annotations

import typer
from rich.console import Console

from tubetrack.cli.commands import summaries


def register_commands(app: typer.Typer, console: Console) -> None:
    """Attach command groups to the provided Typer application."""

    summaries.register(app, console)

    @app.callback(invoke_without_command=True)
    def main_callback(ctx: typer.Context) -> None:
        """Summarize and analyze YouTube playlists."""

        if ctx.invoked_subcommand is None:
            console.print("[bold green]Tubetrack CLI ready for commands.[/bold green]")


__all__ = ["register_commands"]
