"""Snapshot -> ladders and history views. Pure functions, no I/O, no mutation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Iterable, Sequence

from minidex.errors import DataShapeError
from minidex.models import TERMINAL_STATUSES, Order, OrderSide, OrderStatus, Trade

if TYPE_CHECKING:
    from minidex.sync.store import Snapshot


def _checked_status(order: Order) -> OrderStatus:
    status = order.status
    if not isinstance(status, OrderStatus):
        try:
            status = OrderStatus(status)
        except ValueError:
            raise DataShapeError(f"Unknown status {status!r} on order {order.id}") from None
    return status


def is_active(order: Order) -> bool:
    """Positive remaining quantity and a non-terminal status."""
    return order.quantity > 0 and _checked_status(order) not in TERMINAL_STATUSES


def _epoch(ts: datetime | None) -> float:
    """Sort key for display ordering; a missing timestamp counts as epoch 0."""
    if ts is None:
        return 0.0
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.timestamp()


def active_buy_ladder(orders: Iterable[Order]) -> tuple[Order, ...]:
    """Active buys, best (highest) price first. sorted() is stable, so equal prices keep feed order."""
    active = [o for o in orders if o.side == OrderSide.BUY and is_active(o)]
    return tuple(sorted(active, key=lambda o: o.price, reverse=True))


def active_sell_ladder(orders: Iterable[Order]) -> tuple[Order, ...]:
    """Active sells, best (lowest) price first."""
    active = [o for o in orders if o.side == OrderSide.SELL and is_active(o)]
    return tuple(sorted(active, key=lambda o: o.price))


def order_history(orders: Iterable[Order]) -> tuple[Order, ...]:
    """All orders, newest first."""
    orders = list(orders)
    for o in orders:
        _checked_status(o)
    return tuple(sorted(orders, key=lambda o: _epoch(o.created_at), reverse=True))


def trade_history(trades: Iterable[Trade]) -> tuple[Trade, ...]:
    """All trades, newest first."""
    return tuple(sorted(trades, key=lambda t: _epoch(t.created_at), reverse=True))


def is_live(buy_ladder: Sequence[Order], sell_ladder: Sequence[Order]) -> bool:
    """Display hint only: true when either side has a resting order."""
    return len(buy_ladder) + len(sell_ladder) > 0


@dataclass(frozen=True, slots=True)
class BookView:
    """Everything the presentation layer reads, derived from one Snapshot."""

    version: int
    buys: tuple[Order, ...]
    sells: tuple[Order, ...]
    orders: tuple[Order, ...]
    trades: tuple[Trade, ...]
    live: bool
    last_error: str | None = None
    busy: bool = False

    @property
    def best_bid(self) -> float | None:
        return self.buys[0].price if self.buys else None

    @property
    def best_ask(self) -> float | None:
        return self.sells[0].price if self.sells else None

    @property
    def spread(self) -> float | None:
        bb, ba = self.best_bid, self.best_ask
        if bb is not None and ba is not None:
            return ba - bb
        return None

    @property
    def summary(self) -> str:
        return f"Active: {len(self.buys)} buys • {len(self.sells)} sells • {len(self.trades)} trades"


def project(snapshot: Snapshot) -> BookView:
    """Derive the full view from one snapshot. Raises DataShapeError on unknown statuses."""
    buys = active_buy_ladder(snapshot.orders)
    sells = active_sell_ladder(snapshot.orders)
    return BookView(
        version=snapshot.version,
        buys=buys,
        sells=sells,
        orders=order_history(snapshot.orders),
        trades=trade_history(snapshot.trades),
        live=is_live(buys, sells),
        last_error=snapshot.last_error,
        busy=snapshot.busy,
    )


class BookProjector:
    """Caches the last BookView by snapshot version."""

    def __init__(self) -> None:
        self._view: BookView | None = None

    def view(self, snapshot: Snapshot) -> BookView:
        if self._view is None or self._view.version != snapshot.version:
            self._view = project(snapshot)
        return self._view
