"""Orders subcommand: submit, cancel."""

from __future__ import annotations

import asyncio

import typer

from minidex.config import Settings
from minidex.sync import ExchangeSync, MutationResult

app = typer.Typer(help="Submit and cancel orders")


async def _submit(settings: Settings, side: str, price: str, quantity: str) -> MutationResult:
    sync = ExchangeSync.from_settings(settings)
    try:
        return await sync.submit(side, price, quantity)
    finally:
        await sync.stop()


async def _cancel(settings: Settings, order_id: str) -> MutationResult:
    sync = ExchangeSync.from_settings(settings)
    try:
        return await sync.cancel(order_id)
    finally:
        await sync.stop()


@app.command("submit")
def submit(
    ctx: typer.Context,
    side: str = typer.Argument(..., help="buy or sell"),
    price: str = typer.Argument(..., help="Limit price (>= 0)"),
    quantity: str = typer.Argument(..., help="Quantity (> 0)"),
) -> None:
    """Place an order. The book is re-fetched right after a successful submit."""
    result = asyncio.run(_submit(ctx.obj["settings"], side, price, quantity))
    if not result.ok:
        typer.echo(f"Error: {result.error}", err=True)
        raise typer.Exit(1)
    if result.order is not None:
        typer.echo(f"Submitted order #{result.order.id} ({result.order.status.value})")
    else:
        typer.echo("Order submitted.")


@app.command("cancel")
def cancel(
    ctx: typer.Context,
    order_id: str = typer.Argument(..., help="Order id to cancel"),
) -> None:
    """Cancel a resting order."""
    result = asyncio.run(_cancel(ctx.obj["settings"], order_id))
    if not result.ok:
        typer.echo(f"Error: {result.error}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Canceled order #{order_id}")
