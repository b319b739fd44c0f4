"""Parsing service JSON into Order / Trade."""

import pytest

from minidex.errors import DataShapeError
from minidex.models import OrderSide, OrderStatus
from minidex.service.normalize import parse_order, parse_orders, parse_trades


def test_parse_order_wire_names(make_order):
    o = parse_order(make_order("7", "sell", 15.5, 2, status="PARTIAL", created="2026-01-02T10:00:00Z"))
    assert o.id == "7"
    assert o.side is OrderSide.SELL
    assert o.status is OrderStatus.PARTIAL
    assert o.price == 15.5
    assert o.created_at is not None and o.created_at.year == 2026


def test_parse_order_int_id_and_upper_side():
    o = parse_order({"id": 42, "type": "BUY", "price": 1, "quantity": 1, "status": "OPEN"})
    assert o.id == "42"
    assert o.side is OrderSide.BUY
    assert o.created_at is None


def test_unknown_status_is_a_data_error(make_order):
    with pytest.raises(DataShapeError, match="status"):
        parse_order(make_order("1", "buy", 10, 5, status="EXPIRED"))


def test_order_list_must_be_flat_array(make_order):
    with pytest.raises(DataShapeError):
        parse_orders({"buy": [make_order("1", "buy", 10, 5)], "sell": []})
    with pytest.raises(DataShapeError):
        parse_orders(["not an order"])


def test_trades_with_dangling_order_refs_parse():
    trades = parse_trades([{"buyOrderId": 999, "sellOrderId": "gone", "price": 3, "quantity": 1}])
    assert trades[0].buy_order_id == "999"
    assert trades[0].sell_order_id == "gone"
    assert trades[0].id is None


def test_models_are_frozen(make_order):
    o = parse_order(make_order("1", "buy", 10, 5))
    with pytest.raises(Exception):
        o.quantity = 0


def test_unparseable_created_at_is_blank_not_an_error(make_order):
    orders = parse_orders(
        [
            make_order("9", "buy", 10, 1, created="not-a-date"),
            make_order("10", "buy", 11, 1, created=""),
        ]
    )
    assert [o.created_at for o in orders] == [None, None]
    trades = parse_trades([{"buyOrderId": "9", "sellOrderId": "3", "price": 3, "quantity": 1, "createdAt": "yesterday"}])
    assert trades[0].created_at is None


def test_structural_fields_still_rejected(make_order):
    with pytest.raises(DataShapeError, match="price"):
        parse_order(make_order("1", "buy", -1, 5, created="not-a-date"))
