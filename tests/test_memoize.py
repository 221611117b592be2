"""Tests for the session request cache."""

import asyncio
from dataclasses import dataclass

import pytest

from toncoin_wallet.shared.memoize import RequestCache, make_cache_key


@dataclass(frozen=True)
class Quote:
    destination: str
    value: int


@pytest.mark.unit
class TestMakeCacheKey:
    def test_kwargs_order_does_not_matter(self):
        assert make_cache_key("f", (1,), {"a": 1, "b": 2}) == make_cache_key(
            "f", (1,), {"b": 2, "a": 1}
        )

    def test_name_is_part_of_key(self):
        assert make_cache_key("f", (1,), {}) != make_cache_key("g", (1,), {})

    def test_dataclass_and_bytes_arguments(self):
        key = make_cache_key("f", (Quote("addr", 5), b"\x01\x02"), {})
        assert '"destination": "addr"' in key
        assert "0102" in key


@pytest.mark.unit
class TestRequestCache:
    async def test_concurrent_calls_share_one_request(self):
        cache = RequestCache()
        calls = 0
        release = asyncio.Event()

        async def fetch(address):
            nonlocal calls
            calls += 1
            await release.wait()
            return {"address": address}

        first = asyncio.ensure_future(cache.call("info", fetch, "A"))
        second = asyncio.ensure_future(cache.call("info", fetch, "A"))
        await asyncio.sleep(0)
        release.set()

        assert await first == await second == {"address": "A"}
        assert calls == 1

    async def test_different_arguments_are_separate(self):
        cache = RequestCache()
        calls = []

        async def fetch(address):
            calls.append(address)
            return address

        await cache.call("info", fetch, "A")
        await cache.call("info", fetch, "B")
        await cache.call("info", fetch, "A")

        assert calls == ["A", "B"]
        assert len(cache) == 2

    async def test_failure_is_evicted(self):
        cache = RequestCache()
        attempts = 0

        async def flaky():
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise RuntimeError("upstream down")
            return "ok"

        with pytest.raises(RuntimeError):
            await cache.call("flaky", flaky)
        assert len(cache) == 0

        assert await cache.call("flaky", flaky) == "ok"
        assert attempts == 2

    async def test_clear_forces_new_request(self):
        cache = RequestCache()
        calls = 0

        async def fetch():
            nonlocal calls
            calls += 1
            return calls

        assert await cache.call("fetch", fetch) == 1
        assert await cache.call("fetch", fetch) == 1

        cache.clear()
        assert await cache.call("fetch", fetch) == 2
