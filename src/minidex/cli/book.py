"""Book subcommand: show, trades, history, status (one fetch each)."""

from __future__ import annotations

import asyncio

import typer

from minidex.book import BookView
from minidex.cli.render import format_history_row, format_order, format_trade
from minidex.config import Settings
from minidex.sync import ExchangeSync

app = typer.Typer(help="Read the order book, trades and order history")


async def _fetch_view(settings: Settings) -> BookView:
    sync = ExchangeSync.from_settings(settings)
    try:
        await sync.refresh()
        return sync.view()
    finally:
        await sync.stop()


def _load(ctx: typer.Context) -> BookView:
    view = asyncio.run(_fetch_view(ctx.obj["settings"]))
    if view.last_error:
        typer.echo(f"Error: {view.last_error}", err=True)
        raise typer.Exit(1)
    return view


@app.command("show")
def show(
    ctx: typer.Context,
    depth: int = typer.Option(0, "--depth", "-d", help="Show at most N orders per side (0 = all)"),
) -> None:
    """Active buy and sell ladders, best price first."""
    view = _load(ctx)
    typer.echo(view.summary + f"  [{'LIVE' if view.live else 'IDLE'}]")
    for title, ladder, empty in (
        ("Buy Orders", view.buys, "No active buys"),
        ("Sell Orders", view.sells, "No active sells"),
    ):
        typer.echo(f"\n{title}")
        rows = ladder[:depth] if depth > 0 else ladder
        if not rows:
            typer.echo(f"  {empty}")
        for order in rows:
            typer.echo(f"  {format_order(order)}")
    if view.spread is not None:
        typer.echo(f"\nSpread: {view.spread:g} (bid {view.best_bid:g} / ask {view.best_ask:g})")


@app.command("trades")
def trades(
    ctx: typer.Context,
    limit: int = typer.Option(50, "--limit", "-n", help="Max trades to show"),
) -> None:
    """Trades, newest first."""
    view = _load(ctx)
    if not view.trades:
        typer.echo("No trades yet")
        return
    for trade in view.trades[:limit]:
        typer.echo(format_trade(trade))


@app.command("history")
def history(
    ctx: typer.Context,
    limit: int = typer.Option(50, "--limit", "-n", help="Max orders to show"),
) -> None:
    """All orders (active and closed), newest first."""
    view = _load(ctx)
    if not view.orders:
        typer.echo("No orders yet")
        return
    typer.echo(f"{'ID':<11} {'TYPE':<5} {'PRICE':<11} {'QTY':<8} {'STATUS':<9} CREATED")
    for order in view.orders[:limit]:
        typer.echo(format_history_row(order))


@app.command("status")
def status(ctx: typer.Context) -> None:
    """One-line activity summary."""
    view = _load(ctx)
    typer.echo(f"{view.summary}  {'LIVE' if view.live else 'IDLE'}")
