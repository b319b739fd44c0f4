"""Service JSON -> canonical Order / Trade. Anything that does not fit raises DataShapeError."""

from __future__ import annotations

from typing import Any

import pydantic

from minidex.errors import DataShapeError
from minidex.models import Order, Trade


def _describe(exc: pydantic.ValidationError) -> str:
    first = exc.errors()[0]
    loc = ".".join(str(p) for p in first.get("loc", ()))
    return f"{loc}: {first.get('msg', 'invalid')}" if loc else first.get("msg", "invalid")


def parse_order(raw: Any) -> Order:
    """One order object. Unknown status or side values are rejected, never defaulted."""
    if not isinstance(raw, dict):
        raise DataShapeError(f"Malformed order: expected object, got {type(raw).__name__}")
    try:
        return Order.model_validate(raw)
    except pydantic.ValidationError as e:
        raise DataShapeError(f"Malformed order {raw.get('id', '?')}: {_describe(e)}") from e


def parse_trade(raw: Any) -> Trade:
    if not isinstance(raw, dict):
        raise DataShapeError(f"Malformed trade: expected object, got {type(raw).__name__}")
    try:
        return Trade.model_validate(raw)
    except pydantic.ValidationError as e:
        raise DataShapeError(f"Malformed trade {raw.get('id', '?')}: {_describe(e)}") from e


def parse_orders(payload: Any) -> list[Order]:
    """Order list. Only the flat-array shape (each order carrying ``status``) is accepted;
    the ``{"buy": [...], "sell": [...]}`` book shape is a DataShapeError."""
    if not isinstance(payload, list):
        raise DataShapeError("Malformed order list: expected a JSON array of orders")
    return [parse_order(row) for row in payload]


def parse_trades(payload: Any) -> list[Trade]:
    if not isinstance(payload, list):
        raise DataShapeError("Malformed trade list: expected a JSON array of trades")
    return [parse_trade(row) for row in payload]
