"""Canonical schema (Pydantic) - Order, Trade, OrderForm."""

from minidex.models.order import (
    TERMINAL_STATUSES,
    Order,
    OrderForm,
    OrderSide,
    OrderStatus,
)
from minidex.models.trade import Trade

__all__ = [
    "Order",
    "OrderForm",
    "OrderSide",
    "OrderStatus",
    "TERMINAL_STATUSES",
    "Trade",
]
