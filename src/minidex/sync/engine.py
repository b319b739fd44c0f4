"""Sync engine - owns client, store, poller, mutation controller and projector."""

from __future__ import annotations

import time
from typing import Any

import httpx
import structlog

from minidex.book.projector import BookProjector, BookView
from minidex.config.settings import Settings
from minidex.models import OrderForm
from minidex.service.client import OrderServiceClient
from minidex.sync.mutations import MutationController, MutationResult
from minidex.sync.poller import Poller
from minidex.sync.store import Snapshot, SnapshotStore

log = structlog.get_logger(__name__)


class ExchangeSync:
    """Keeps a local view of the remote book fresh and routes user mutations.

    Presentation code reads ``view()`` / ``snapshot`` and calls ``submit`` /
    ``cancel``; it never touches the store directly.
    """

    def __init__(
        self,
        client: OrderServiceClient,
        *,
        poll_interval_sec: float = 2.0,
        store: SnapshotStore | None = None,
    ) -> None:
        self.client = client
        self.store = store or SnapshotStore()
        self.poller = Poller(client, self.store, interval_sec=poll_interval_sec)
        self.mutations = MutationController(client, self.store, self.poller)
        self._projector = BookProjector()
        self._start_ts: float | None = None
        self._closed = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> ExchangeSync:
        client = OrderServiceClient(
            settings.base_url,
            orders_path=settings.orders_path,
            trades_path=settings.trades_path,
            create_path=settings.create_path,
            timeout=settings.request_timeout_sec,
            transport=transport,
        )
        return cls(client, poll_interval_sec=settings.poll_interval_sec)

    async def __aenter__(self) -> ExchangeSync:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    async def start(self) -> None:
        """Begin polling (first fetch is immediate)."""
        self._start_ts = time.time()
        self.poller.start()
        log.info("sync_started", base_url=self.client.base_url)

    async def stop(self) -> None:
        """Tear down. Idempotent. In-flight work completes without touching the store."""
        if self._closed:
            return
        self._closed = True
        self.poller.stop()
        self.mutations.close()
        await self.poller.wait_closed()
        await self.client.aclose()
        log.info("sync_stopped")

    @property
    def snapshot(self) -> Snapshot:
        return self.store.snapshot

    def view(self) -> BookView:
        return self._projector.view(self.store.snapshot)

    async def refresh(self) -> bool:
        """Manual refresh (the dashboard's Refresh button)."""
        return await self.poller.refresh()

    async def submit(self, side: Any, price: Any, quantity: Any) -> MutationResult:
        return await self.mutations.submit(side, price, quantity)

    async def cancel(self, order_id: str) -> MutationResult:
        return await self.mutations.cancel(order_id)

    @property
    def form(self) -> OrderForm:
        return self.mutations.form

    def update_form(self, **changes: str) -> OrderForm:
        return self.mutations.update_form(**changes)

    async def submit_form(self) -> MutationResult:
        """Submit the order-entry form; on success the form comes back empty."""
        return await self.mutations.submit_form()

    def status(self) -> dict[str, Any]:
        """Return poll counters, store version, error and liveness."""
        snap = self.store.snapshot
        elapsed = (time.time() - self._start_ts) if self._start_ts else 0
        return {
            "poller_state": self.poller.state.value,
            "polls": self.poller.poll_count,
            "poll_failures": self.poller.failure_count,
            "skipped_ticks": self.poller.skipped_ticks,
            "stale_results": self.poller.stale_results,
            "version": snap.version,
            "last_error": snap.last_error,
            "busy": snap.busy,
            "live": self.view().live,
            "elapsed_sec": round(elapsed, 1),
        }
