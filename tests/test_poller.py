"""Poller: immediate fetch, error handling, teardown, stale-result guard."""

import asyncio

import httpx
import pytest

from minidex.service.client import OrderServiceClient
from minidex.sync.poller import Poller, PollerState
from minidex.sync.store import SnapshotStore

ORDERS_PATH = "/api/orders/db"
TRADES_PATH = "/api/orders/trades/db"


def _poller(fake, interval: float = 60.0) -> Poller:
    client = OrderServiceClient("http://exchange.test", transport=fake.transport())
    return Poller(client, SnapshotStore(), interval_sec=interval)


@pytest.mark.asyncio
async def test_start_fetches_immediately(fake_service, wait_until):
    poller = _poller(fake_service)
    poller.start()
    await wait_until(lambda: poller.store.snapshot.version == 1)
    snap = poller.store.snapshot
    assert [o.id for o in snap.orders] == ["1", "2", "3"]
    assert len(snap.trades) == 1
    assert poller.poll_count == 1
    poller.stop()
    await poller.wait_closed()
    await poller.client.aclose()


@pytest.mark.asyncio
async def test_timer_keeps_polling(fake_service, wait_until):
    poller = _poller(fake_service, interval=0.01)
    poller.start()
    await wait_until(lambda: poller.poll_count >= 3)
    poller.stop()
    await poller.wait_closed()
    await poller.client.aclose()


@pytest.mark.asyncio
async def test_failure_keeps_prior_data_and_polling_continues(fake_service):
    poller = _poller(fake_service)
    assert await poller.refresh() is True
    good = poller.store.snapshot

    fake_service.responses[("GET", TRADES_PATH)] = httpx.Response(500, json={"message": "trades table locked"})
    assert await poller.refresh() is False
    snap = poller.store.snapshot
    assert snap.last_error == "trades table locked"
    assert snap.orders == good.orders
    assert snap.trades == good.trades
    assert poller.failure_count == 1

    del fake_service.responses[("GET", TRADES_PATH)]
    assert await poller.refresh() is True
    assert poller.store.snapshot.last_error is None
    await poller.client.aclose()


@pytest.mark.asyncio
async def test_orders_and_trades_fetched_concurrently(fake_service, wait_until):
    gate = asyncio.Event()
    fake_service.gates[ORDERS_PATH] = gate
    poller = _poller(fake_service)
    task = asyncio.create_task(poller.refresh())
    # Trades request goes out while orders is still held
    await wait_until(lambda: ("GET", TRADES_PATH) in fake_service.calls)
    assert poller.state is PollerState.FETCHING
    assert poller.store.snapshot.version == 0
    gate.set()
    assert await task is True
    assert poller.state is PollerState.IDLE
    await poller.client.aclose()


@pytest.mark.asyncio
async def test_tick_skipped_while_fetching(fake_service, wait_until):
    gate = asyncio.Event()
    fake_service.gates[ORDERS_PATH] = gate
    poller = _poller(fake_service, interval=0.01)
    poller.start()
    await wait_until(lambda: poller.skipped_ticks >= 2)
    assert fake_service.count("GET", ORDERS_PATH) == 1
    gate.set()
    poller.stop()
    await poller.wait_closed()
    await poller.client.aclose()


@pytest.mark.asyncio
async def test_stop_is_idempotent_and_drops_in_flight_results(fake_service, wait_until):
    gate = asyncio.Event()
    fake_service.gates[ORDERS_PATH] = gate
    poller = _poller(fake_service)
    poller.start()
    await wait_until(lambda: ("GET", ORDERS_PATH) in fake_service.calls)
    poller.stop()
    poller.stop()
    gate.set()
    await poller.wait_closed()
    assert poller.store.snapshot.version == 0
    assert poller.stopped and not poller.running

    # Nothing started after stop() reaches the network or the store
    assert await poller.refresh() is False
    assert fake_service.count("GET", ORDERS_PATH) == 1
    assert poller.store.snapshot.version == 0
    await poller.client.aclose()


@pytest.mark.asyncio
async def test_stale_poll_cannot_overwrite_newer_refresh(fake_service, make_order, wait_until):
    gate = asyncio.Event()
    fake_service.gates[ORDERS_PATH] = gate
    poller = _poller(fake_service)
    slow = asyncio.create_task(poller.refresh())
    await wait_until(lambda: fake_service.count("GET", ORDERS_PATH) == 1)

    # A mutation lands, then a forced refresh starts and completes first
    fake_service.orders.append(make_order("4", "sell", 13, 1))
    del fake_service.gates[ORDERS_PATH]
    assert await poller.refresh() is True
    assert [o.id for o in poller.store.snapshot.orders][-1] == "4"

    gate.set()
    await slow
    assert [o.id for o in poller.store.snapshot.orders][-1] == "4"
    assert poller.stale_results == 1
    await poller.client.aclose()


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        Poller(None, SnapshotStore(), interval_sec=0)


@pytest.mark.asyncio
async def test_bad_created_at_does_not_block_the_book(fake_service, make_order):
    fake_service.orders.append(make_order("9", "buy", 11, 1, created="not-a-date"))
    poller = _poller(fake_service)
    assert await poller.refresh() is True
    snap = poller.store.snapshot
    assert snap.last_error is None
    assert "9" in {o.id for o in snap.orders}
    await poller.client.aclose()
