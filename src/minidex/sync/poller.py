"""Poller - periodic refresh of the snapshot store from the order service."""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import TYPE_CHECKING

import structlog

from minidex.errors import MiniDexError

if TYPE_CHECKING:
    from minidex.service.client import OrderServiceClient
    from minidex.sync.store import SnapshotStore

log = structlog.get_logger(__name__)

FALLBACK_ERROR = "Something went wrong"


class PollerState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"


class Poller:
    """Fetches orders and trades together and publishes them to the store.

    ``start()`` runs one fetch immediately and then one per ``interval_sec``;
    a tick is skipped while any fetch is still in flight. ``refresh()`` is the
    forced, out-of-band fetch used after mutations.

    Each fetch is numbered when it starts and its outcome is written only if no
    later-started fetch has been written yet, so a slow scheduled poll cannot
    overwrite a forced refresh that began after it.
    """

    def __init__(
        self,
        client: OrderServiceClient,
        store: SnapshotStore,
        interval_sec: float = 2.0,
    ) -> None:
        if interval_sec <= 0:
            raise ValueError("interval_sec must be positive")
        self.client = client
        self.store = store
        self.interval_sec = interval_sec
        self._timer: asyncio.Task[None] | None = None
        self._ticks: set[asyncio.Task[bool]] = set()
        self._in_flight = 0
        self._started = False
        self._stopped = False
        self._issued_seq = 0
        self._applied_seq = 0
        self.poll_count = 0
        self.failure_count = 0
        self.skipped_ticks = 0
        self.stale_results = 0

    @property
    def state(self) -> PollerState:
        return PollerState.FETCHING if self._in_flight else PollerState.IDLE

    @property
    def running(self) -> bool:
        return self._started and not self._stopped

    @property
    def stopped(self) -> bool:
        return self._stopped

    def start(self) -> None:
        """Fetch once now and arm the repeating timer. Needs a running event loop."""
        if self._stopped:
            raise RuntimeError("Poller was stopped; create a new one")
        if self._started:
            return
        self._started = True
        log.info("poller_started", interval_sec=self.interval_sec)
        self._tick()
        self._timer = asyncio.create_task(self._run_timer())

    def stop(self) -> None:
        """Disarm the timer. Safe to call more than once.

        In-flight requests are left to finish, but their results are dropped.
        """
        if self._stopped:
            return
        self._stopped = True
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        log.info("poller_stopped", polls=self.poll_count, failures=self.failure_count)

    async def wait_closed(self) -> None:
        """Wait for the timer and any in-flight fetch to finish after ``stop()``."""
        pending = [t for t in (self._timer, *self._ticks) if t is not None]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def refresh(self) -> bool:
        """Forced refresh, independent of the timer. Returns True if the fetch succeeded."""
        return await self._fetch("forced")

    async def _run_timer(self) -> None:
        while not self._stopped:
            await asyncio.sleep(self.interval_sec)
            if self._stopped:
                break
            self._tick()

    def _tick(self) -> None:
        if self.state is PollerState.FETCHING:
            self.skipped_ticks += 1
            log.debug("poll_skipped", reason="fetch_in_flight")
            return
        # Count the fetch before the task runs so a back-to-back tick sees it.
        self._in_flight += 1
        task = asyncio.create_task(self._fetch("timer", counted=True))
        self._ticks.add(task)
        task.add_done_callback(self._ticks.discard)

    async def _fetch(self, origin: str, counted: bool = False) -> bool:
        if not counted:
            self._in_flight += 1
        try:
            if self._stopped:
                return False
            self._issued_seq += 1
            seq = self._issued_seq
            orders, trades = await asyncio.gather(
                self.client.list_orders(),
                self.client.list_trades(),
                return_exceptions=True,
            )
        finally:
            self._in_flight -= 1

        error = next((r for r in (orders, trades) if isinstance(r, BaseException)), None)
        if error is not None and not isinstance(error, Exception):
            raise error
        if self._stopped:
            log.debug("poll_result_dropped", origin=origin, reason="stopped")
            return error is None
        if seq < self._applied_seq:
            self.stale_results += 1
            log.debug("poll_result_dropped", origin=origin, reason="stale", seq=seq, applied=self._applied_seq)
            return error is None
        self._applied_seq = seq

        if error is not None:
            self.failure_count += 1
            if isinstance(error, MiniDexError):
                message = error.message
                log.warning("poll_failed", origin=origin, error=message, kind=type(error).__name__)
            else:
                message = str(error) or FALLBACK_ERROR
                log.error("poll_failed_unexpected", origin=origin, error=repr(error))
            self.store.set_error(message)
            return False

        self.poll_count += 1
        snap = self.store.replace(orders, trades)
        log.debug("poll_ok", origin=origin, orders=len(snap.orders), trades=len(snap.trades), version=snap.version)
        return True
