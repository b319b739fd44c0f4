"""ExchangeSync wiring, lifecycle and status."""

import pytest

from minidex.config import Settings
from minidex.sync import ExchangeSync


@pytest.mark.asyncio
async def test_engine_lifecycle(fake_service, wait_until):
    settings = Settings.from_dict({"service": {"base_url": "http://exchange.test"}, "polling": {"interval_sec": 60}})
    sync = ExchangeSync.from_settings(settings, transport=fake_service.transport())
    async with sync:
        await wait_until(lambda: sync.snapshot.version > 0)
        view = sync.view()
        assert [o.id for o in view.buys] == ["2", "1"]
        assert view.live
        result = await sync.submit("sell", "13", "2")
        assert result.ok
        assert [o.price for o in sync.view().sells] == [13.0]
        status = sync.status()
        assert status["polls"] >= 2
        assert status["last_error"] is None
        assert status["live"] is True
    # stop() is idempotent
    await sync.stop()
    assert sync.poller.stopped
