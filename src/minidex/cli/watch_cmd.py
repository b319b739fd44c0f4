"""Watch command - live dashboard."""

import typer

from minidex.tui.app import run_tui

app = typer.Typer(help="Launch the live dashboard")


@app.callback(invoke_without_command=True)
def watch(ctx: typer.Context) -> None:
    """Launch the Textual dashboard (polls the service, cancel with 'x')."""
    if ctx.invoked_subcommand is not None:
        return
    settings = ctx.obj["settings"]
    run_tui(settings)
