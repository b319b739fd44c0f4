"""Order book projection: ladders, history views, liveness."""

from minidex.book.projector import (
    BookProjector,
    BookView,
    active_buy_ladder,
    active_sell_ladder,
    is_active,
    is_live,
    order_history,
    project,
    trade_history,
)

__all__ = [
    "BookProjector",
    "BookView",
    "active_buy_ladder",
    "active_sell_ladder",
    "is_active",
    "is_live",
    "order_history",
    "project",
    "trade_history",
]
