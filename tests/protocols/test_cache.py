"""Tests for the shared upstream tool-list cache."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

from mcpgw.protocols.cache import ToolListCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


TOOLS = [{"name": "search", "description": "", "inputSchema": {"type": "object"}}]


class TestGetPut:
    async def test_miss_then_hit(self) -> None:
        cache = ToolListCache(ttl_seconds=60)
        assert await cache.get("https://a/mcp") is None
        await cache.put("https://a/mcp", TOOLS)
        assert await cache.get("https://a/mcp") == TOOLS
        assert cache.stats() == {"hits": 1, "misses": 1, "entries": 1}

    async def test_returns_copies(self) -> None:
        cache = ToolListCache()
        await cache.put("k", TOOLS)
        got = await cache.get("k")
        assert got is not None
        got.append({"name": "extra"})
        assert await cache.get("k") == TOOLS

    async def test_stale_entry_evicted_on_read(self) -> None:
        clock = FakeClock()
        cache = ToolListCache(ttl_seconds=300, clock=clock)
        await cache.put("k", TOOLS)
        clock.now += 301
        assert await cache.get("k") is None
        assert cache.stats()["entries"] == 0

    async def test_entry_fresh_at_ttl_boundary(self) -> None:
        clock = FakeClock()
        cache = ToolListCache(ttl_seconds=300, clock=clock)
        await cache.put("k", TOOLS)
        clock.now += 300
        assert await cache.get("k") == TOOLS

    async def test_clear(self) -> None:
        cache = ToolListCache()
        await cache.put("k", TOOLS)
        await cache.clear()
        assert await cache.get("k") is None


class TestEviction:
    async def test_insert_drops_stale_entries(self) -> None:
        clock = FakeClock()
        cache = ToolListCache(ttl_seconds=10, clock=clock)
        await cache.put("old", TOOLS)
        clock.now += 11
        await cache.put("new", TOOLS)
        assert cache.stats()["entries"] == 1

    async def test_capacity_drops_oldest(self) -> None:
        clock = FakeClock()
        cache = ToolListCache(ttl_seconds=300, max_entries=2, clock=clock)
        for key in ("a", "b", "c"):
            await cache.put(key, TOOLS)
            clock.now += 1
        assert await cache.get("a") is None
        assert await cache.get("b") == TOOLS
        assert await cache.get("c") == TOOLS


class TestGetOrFetch:
    async def test_fetches_once_while_fresh(self) -> None:
        cache = ToolListCache()
        fetch = AsyncMock(return_value=TOOLS)
        assert await cache.get_or_fetch("k", fetch) == TOOLS
        assert await cache.get_or_fetch("k", fetch) == TOOLS
        fetch.assert_awaited_once()

    async def test_concurrent_misses_share_one_fetch(self) -> None:
        cache = ToolListCache()
        calls = 0

        async def fetch() -> list[dict[str, object]]:
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return list(TOOLS)

        results = await asyncio.gather(*(cache.get_or_fetch("k", fetch) for _ in range(5)))
        assert calls == 1
        assert all(r == TOOLS for r in results)

    async def test_refetches_after_expiry(self) -> None:
        clock = FakeClock()
        cache = ToolListCache(ttl_seconds=5, clock=clock)
        fetch = AsyncMock(return_value=TOOLS)
        await cache.get_or_fetch("k", fetch)
        clock.now += 6
        await cache.get_or_fetch("k", fetch)
        assert fetch.await_count == 2

    async def test_slow_fetch_does_not_block_other_endpoints(self) -> None:
        cache = ToolListCache()
        release = asyncio.Event()
        await cache.put("https://b/mcp", TOOLS)

        async def slow_fetch() -> list[dict[str, object]]:
            await release.wait()
            return list(TOOLS)

        slow = asyncio.create_task(cache.get_or_fetch("https://a/mcp", slow_fetch))
        await asyncio.sleep(0)

        assert await asyncio.wait_for(cache.get("https://b/mcp"), timeout=1) == TOOLS
        fast = AsyncMock(return_value=TOOLS)
        assert await asyncio.wait_for(cache.get_or_fetch("https://c/mcp", fast), timeout=1) == TOOLS
        assert not slow.done()

        release.set()
        assert await slow == TOOLS
