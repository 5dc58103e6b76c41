import asyncio

import pytest

from schoolledger.shared.cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def test_get_and_has_drop_expired_entries():
    clock = FakeClock()
    c = TTLCache(default_ttl=10, clock=clock)
    c.set("k", "v")
    assert c.get("k") == "v"
    assert c.has("k")

    clock.advance(10)
    assert c.get("k") is None
    assert c.size() == 0

    c.set("k2", "v2", ttl=1)
    clock.advance(2)
    assert not c.has("k2")
    assert c.keys() == []


def test_refresh_ttl_extends_life():
    clock = FakeClock()
    c = TTLCache(default_ttl=5, clock=clock)
    c.set("k", 1)
    clock.advance(4)
    assert c.refresh_ttl("k")
    clock.advance(4)
    assert c.get("k") == 1
    assert not c.refresh_ttl("missing")


def test_get_with_timestamp_and_remove():
    c = TTLCache()
    c.set("a", {"x": 1})
    cached = c.get_with_timestamp("a")
    assert cached is not None and cached.value == {"x": 1}
    c.remove("a")
    assert c.get_with_timestamp("a") is None


def test_cleanup_and_prefix_removal():
    clock = FakeClock()
    c = TTLCache(default_ttl=5, clock=clock)
    c.set("fee-history:1:x", 1)
    c.set("fee-history:2:y", 2)
    c.set("other", 3, ttl=1)
    clock.advance(2)
    assert c.cleanup() == 1
    assert c.remove_prefix("fee-history:") == 2
    assert c.size() == 0

    c.set("z", 1)
    c.clear()
    assert c.size() == 0


@pytest.mark.asyncio
async def test_background_cleanup_runs_until_disposed():
    clock = FakeClock()
    c = TTLCache(default_ttl=1, cleanup_interval=0.01, clock=clock)
    c.set("k", "v")
    clock.advance(5)

    c.start()
    assert c.running
    for _ in range(50):
        if c.size() == 0:
            break
        await asyncio.sleep(0.01)
    assert c.size() == 0

    c.dispose()
    assert not c.running
