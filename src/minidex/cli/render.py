"""Plain-text rendering of orders and trades for the CLI."""

from __future__ import annotations

from datetime import datetime

from minidex.models import Order, Trade


def format_time(ts: datetime | None) -> str:
    if ts is None:
        return ""
    return ts.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def format_number(value: float) -> str:
    return f"{value:g}"


def units(quantity: float) -> str:
    return f"{format_number(quantity)} unit{'' if quantity == 1 else 's'}"


def format_order(order: Order) -> str:
    line = f"#{order.id:<10} {units(order.quantity)} @ ${format_number(order.price)}  {order.status.value}"
    created = format_time(order.created_at)
    return f"{line}  {created}" if created else line


def format_history_row(order: Order) -> str:
    return (
        f"#{order.id:<10} {order.side.value.upper():<5} ${format_number(order.price):<10} "
        f"{format_number(order.quantity):<8} {order.status.value:<9} {format_time(order.created_at)}"
    ).rstrip()


def format_trade(trade: Trade) -> str:
    line = f"Buy:{trade.buy_order_id} -> Sell:{trade.sell_order_id}  {units(trade.quantity)} @ ${format_number(trade.price)}"
    created = format_time(trade.created_at)
    return f"{line}  {created}" if created else line
