"""Snapshot store - last reconciled orders/trades, error slot and busy flag."""

from __future__ import annotations

import time
from dataclasses import dataclass, replace as _evolve
from typing import Iterable

from minidex.models import Order, Trade


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Immutable view of the store. A new object is published on every write."""

    orders: tuple[Order, ...] = ()
    trades: tuple[Trade, ...] = ()
    last_error: str | None = None
    busy: bool = False
    version: int = 0
    updated_at: float | None = None  # epoch seconds of the last successful replace


class SnapshotStore:
    """Single owner of the published Snapshot. Writers replace it wholesale.

    Writers are expected to serialize themselves by awaiting their own request
    before writing; nothing here locks.
    """

    def __init__(self) -> None:
        self._snapshot = Snapshot()

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    def _publish(self, **changes: object) -> Snapshot:
        self._snapshot = _evolve(self._snapshot, version=self._snapshot.version + 1, **changes)
        return self._snapshot

    def replace(self, orders: Iterable[Order], trades: Iterable[Trade]) -> Snapshot:
        """Swap in a complete poll result and clear the error slot."""
        return self._publish(
            orders=tuple(orders),
            trades=tuple(trades),
            last_error=None,
            updated_at=time.time(),
        )

    def set_error(self, message: str) -> Snapshot:
        """Record a failure. Orders and trades stay as they were."""
        return self._publish(last_error=message)

    def clear_error(self) -> Snapshot:
        if self._snapshot.last_error is None:
            return self._snapshot
        return self._publish(last_error=None)

    def set_busy(self, busy: bool) -> Snapshot:
        if self._snapshot.busy == busy:
            return self._snapshot
        return self._publish(busy=busy)
