"""Shared fixtures: an in-memory order service behind httpx.MockTransport."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable

import httpx
import pytest

ORDERS_PATH = "/api/orders/db"
TRADES_PATH = "/api/orders/trades/db"
CREATE_PATH = "/api/orders"


class FakeOrderService:
    """Minimal stand-in for the remote service.

    ``responses`` overrides (method, path) with a fixed response; ``gates``
    holds a path's response until the event is set; ``raise_on`` makes a path
    fail at the network level.
    """

    def __init__(self, orders: list[dict[str, Any]] | None = None, trades: list[dict[str, Any]] | None = None):
        self.orders = list(orders or [])
        self.trades = list(trades or [])
        self.calls: list[tuple[str, str]] = []
        self.responses: dict[tuple[str, str], httpx.Response] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.raise_on: set[str] = set()
        self._next_id = 100

    async def handler(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path
        self.calls.append((method, path))
        gate = self.gates.get(path)
        if gate is not None:
            await gate.wait()
        if path in self.raise_on:
            raise httpx.ConnectError("connection refused", request=request)
        if (method, path) in self.responses:
            return self.responses[(method, path)]
        if method == "GET" and path == ORDERS_PATH:
            return httpx.Response(200, json=self.orders)
        if method == "GET" and path == TRADES_PATH:
            return httpx.Response(200, json=self.trades)
        if method == "POST" and path == CREATE_PATH:
            body = json.loads(request.content)
            self._next_id += 1
            order = {
                "id": str(self._next_id),
                "type": body["type"],
                "price": body["price"],
                "quantity": body["quantity"],
                "status": "OPEN",
                "createdAt": "2026-01-02T10:00:00Z",
            }
            self.orders.append(order)
            return httpx.Response(201, json=order)
        if method == "DELETE" and path.startswith(CREATE_PATH + "/"):
            order_id = path.rsplit("/", 1)[1]
            for order in self.orders:
                if order["id"] == order_id and order["status"] in ("OPEN", "PARTIAL"):
                    order["status"] = "CANCELED"
                    return httpx.Response(200, json={"ok": True})
            return httpx.Response(404, json={"message": "Order not found or not cancelable"})
        return httpx.Response(404, json={"error": "no route"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def count(self, method: str, path: str) -> int:
        return sum(1 for c in self.calls if c == (method, path))

    @property
    def writes(self) -> list[tuple[str, str]]:
        return [c for c in self.calls if c[0] in ("POST", "DELETE")]


def order(id: str, side: str, price: float, quantity: float, status: str = "OPEN", created: str | None = None) -> dict[str, Any]:
    raw: dict[str, Any] = {"id": id, "type": side, "price": price, "quantity": quantity, "status": status}
    if created is not None:
        raw["createdAt"] = created
    return raw


@pytest.fixture
def book_orders() -> list[dict[str, Any]]:
    return [
        order("1", "buy", 10, 5),
        order("2", "buy", 12, 3),
        order("3", "sell", 15, 2, status="FILLED"),
    ]


@pytest.fixture
def fake_service(book_orders) -> FakeOrderService:
    trades = [{"id": "t1", "buyOrderId": "9", "sellOrderId": "3", "price": 15, "quantity": 2}]
    return FakeOrderService(orders=book_orders, trades=trades)


@pytest.fixture
def wait_until() -> Callable[..., Any]:
    async def _wait(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("condition not met in time")
            await asyncio.sleep(0.005)

    return _wait


@pytest.fixture
def make_order() -> Callable[..., dict[str, Any]]:
    return order
