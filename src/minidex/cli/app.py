"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer

from minidex.config import get_settings
from minidex.config.settings import configure_logging

app = typer.Typer(
    name="minidex",
    help="MiniDex - live order book, trades and order entry for a remote mini exchange.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: ./config or package config)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Config profile (e.g. dev) to overlay on default.toml"
    ),
) -> None:
    """Configure logging and store options in context."""
    settings = get_settings(profile, config_dir)
    configure_logging(settings)
    ctx.obj = {"settings": settings, "config_dir": config_dir, "profile": profile}


# Subcommands registered from other modules
from minidex.cli import book, orders, watch_cmd  # noqa: E402

app.add_typer(book.app, name="book")
app.add_typer(orders.app, name="orders")
app.add_typer(watch_cmd.app, name="watch")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
