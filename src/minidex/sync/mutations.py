"""Mutation controller - submit/cancel under a busy flag, then a forced refresh."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog

from minidex.errors import MiniDexError, ValidationError
from minidex.models import Order, OrderForm, OrderSide

if TYPE_CHECKING:
    from minidex.service.client import OrderServiceClient
    from minidex.sync.poller import Poller
    from minidex.sync.store import SnapshotStore

log = structlog.get_logger(__name__)

INVALID_ORDER_INPUT = "Enter a valid type / price / quantity"
BUSY_MESSAGE = "Another order operation is still in progress"
CLOSED_MESSAGE = "Exchange sync has been stopped"


@dataclass(frozen=True, slots=True)
class MutationResult:
    ok: bool
    error: str | None = None
    order: Order | None = None
    refreshed: bool = False
    rejected_busy: bool = False


def _finite(value: Any) -> float | None:
    """Form value (text or number) -> finite float, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def validate_order_input(side: Any, price: Any, quantity: Any) -> tuple[OrderSide, float, float]:
    """Pre-flight check. Raises ValidationError without touching the network."""
    try:
        order_side = OrderSide(side.lower() if isinstance(side, str) else side)
    except ValueError:
        raise ValidationError(INVALID_ORDER_INPUT) from None
    p = _finite(price)
    q = _finite(quantity)
    if p is None or p < 0 or q is None or q <= 0:
        raise ValidationError(INVALID_ORDER_INPUT)
    return order_side, p, q


class MutationController:
    """Runs one user mutation at a time.

    The busy flag lives in the store so the presentation can disable its
    controls. It does not hold off the poller; a scheduled poll may run while a
    mutation is in flight.
    """

    def __init__(self, client: OrderServiceClient, store: SnapshotStore, poller: Poller) -> None:
        self.client = client
        self.store = store
        self.poller = poller
        self.form = OrderForm()
        self._closed = False

    @property
    def busy(self) -> bool:
        return self.store.snapshot.busy

    def update_form(self, **changes: str) -> OrderForm:
        """Replace fields of the order-entry form (side, price, quantity)."""
        self.form = self.form.model_copy(update=changes)
        return self.form

    def close(self) -> None:
        """Stop writing to the store. Mutations already in flight finish silently."""
        self._closed = True

    async def submit_form(self) -> MutationResult:
        form = self.form
        return await self.submit(form.side, form.price, form.quantity)

    async def submit(self, side: Any, price: Any, quantity: Any) -> MutationResult:
        """Create an order. Never raises; the outcome is in the result and the error slot."""
        if self._closed:
            return self._rejected_closed("submit")
        try:
            order_side, p, q = validate_order_input(side, price, quantity)
        except ValidationError as e:
            log.info("order_input_invalid", side=side, price=price, quantity=quantity)
            self._surface(e.message)
            return MutationResult(ok=False, error=e.message)

        if not self._acquire("submit"):
            return MutationResult(ok=False, error=BUSY_MESSAGE, rejected_busy=True)
        try:
            self.store.clear_error()
            try:
                order = await self.client.create_order(order_side, p, q)
            except Exception as e:
                return self._failed("submit", e, "Submit failed")
            log.info(
                "order_submitted",
                side=order_side.value,
                price=p,
                quantity=q,
                order_id=order.id if order else None,
            )
            if self._closed:
                return MutationResult(ok=True, order=order)
            self.form = OrderForm()
            refreshed = await self.poller.refresh()
            return MutationResult(ok=True, order=order, refreshed=refreshed)
        finally:
            self._release()

    async def cancel(self, order_id: str) -> MutationResult:
        """Cancel an order by id, then refresh. Never raises."""
        if self._closed:
            return self._rejected_closed("cancel")
        if not str(order_id).strip():
            message = "Missing order id"
            self._surface(message)
            return MutationResult(ok=False, error=message)

        if not self._acquire("cancel"):
            return MutationResult(ok=False, error=BUSY_MESSAGE, rejected_busy=True)
        try:
            self.store.clear_error()
            try:
                await self.client.cancel_order(order_id)
            except Exception as e:
                return self._failed("cancel", e, "Cancel failed")
            log.info("order_canceled", order_id=order_id)
            if self._closed:
                return MutationResult(ok=True)
            refreshed = await self.poller.refresh()
            return MutationResult(ok=True, refreshed=refreshed)
        finally:
            self._release()

    def _acquire(self, action: str) -> bool:
        # Checked and set with no await in between.
        if self.store.snapshot.busy:
            log.info("mutation_rejected_busy", action=action)
            return False
        self.store.set_busy(True)
        return True

    def _release(self) -> None:
        if not self._closed:
            self.store.set_busy(False)

    def _rejected_closed(self, action: str) -> MutationResult:
        # No store write and no request once the controller is closed
        log.info("mutation_rejected_closed", action=action)
        return MutationResult(ok=False, error=CLOSED_MESSAGE)

    def _surface(self, message: str) -> None:
        if not self._closed:
            self.store.set_error(message)

    def _failed(self, action: str, error: Exception, fallback: str) -> MutationResult:
        if isinstance(error, MiniDexError):
            message = error.message
            log.warning(f"{action}_failed", error=message, kind=type(error).__name__)
        else:
            message = fallback
            log.error(f"{action}_failed_unexpected", error=repr(error))
        self._surface(message)
        return MutationResult(ok=False, error=message)
