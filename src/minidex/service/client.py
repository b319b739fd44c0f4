"""Remote order service REST client - list orders/trades, create and cancel orders.

Thin request/response wrapper: one round trip per call, no retries, no caching.
Every failure is raised as a minidex error; callers decide what to do with it.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
import structlog

from minidex.errors import (
    DataShapeError,
    NotFoundOrConflictError,
    OrderRejectedError,
    ServiceRejection,
    TransportError,
)
from minidex.models import Order, OrderSide, Trade
from minidex.service.normalize import parse_order, parse_orders, parse_trades

log = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:4000"


def service_message(resp: httpx.Response, default: str) -> str:
    """Error text from a failed response: body ``error``, then ``message``, then ``default``."""
    try:
        body = resp.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        for key in ("error", "message"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return default


def _json_body(resp: httpx.Response, what: str) -> Any:
    try:
        return resp.json()
    except ValueError as e:
        raise DataShapeError(f"Malformed {what} response: body is not JSON") from e


class OrderServiceClient:
    """Async client for the order service HTTP API."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        orders_path: str = "/api/orders/db",
        trades_path: str = "/api/orders/trades/db",
        create_path: str = "/api/orders",
        timeout: float | None = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.orders_path = orders_path
        self.trades_path = trades_path
        self.create_path = create_path.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> OrderServiceClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(
        self,
        method: str,
        path: str,
        failure: str,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        try:
            resp = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            reason = str(e) or type(e).__name__
            log.warning("service_unreachable", method=method, path=path, error=reason)
            raise TransportError(f"{failure}: {reason}") from e
        log.debug("service_response", method=method, path=path, status=resp.status_code)
        return resp

    async def list_orders(self) -> list[Order]:
        """GET the order list (flat array, active and historical)."""
        failure = "Failed to fetch orders"
        resp = await self._send("GET", self.orders_path, failure)
        if not resp.is_success:
            raise ServiceRejection(service_message(resp, failure), resp.status_code)
        return parse_orders(_json_body(resp, "order list"))

    async def list_trades(self) -> list[Trade]:
        failure = "Failed to fetch trades"
        resp = await self._send("GET", self.trades_path, failure)
        if not resp.is_success:
            raise ServiceRejection(service_message(resp, failure), resp.status_code)
        return parse_trades(_json_body(resp, "trade list"))

    async def create_order(self, side: OrderSide | str, price: float, quantity: float) -> Order | None:
        """POST a new order. Returns the created order, or None if the service only acked."""
        failure = "Order failed"
        payload = {"type": OrderSide(side).value, "price": price, "quantity": quantity}
        resp = await self._send("POST", self.create_path, failure, json=payload)
        if resp.is_client_error:
            message = service_message(resp, failure)
            log.warning("order_rejected", status=resp.status_code, error=message, **payload)
            raise OrderRejectedError(message, resp.status_code)
        if not resp.is_success:
            raise ServiceRejection(service_message(resp, failure), resp.status_code)
        if not resp.content.strip():
            return None
        return parse_order(_json_body(resp, "create order"))

    async def cancel_order(self, order_id: str) -> None:
        """DELETE one order by id."""
        failure = "Cancel failed"
        path = f"{self.create_path}/{quote(str(order_id), safe='')}"
        resp = await self._send("DELETE", path, failure)
        if resp.is_client_error:
            message = service_message(resp, failure)
            log.warning("cancel_rejected", order_id=order_id, status=resp.status_code, error=message)
            raise NotFoundOrConflictError(message, resp.status_code)
        if not resp.is_success:
            raise ServiceRejection(service_message(resp, failure), resp.status_code)
