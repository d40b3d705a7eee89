"""Shared tool-list cache for upstream MCP endpoints.

One instance is shared by every request in the process. Entries are keyed
by upstream endpoint URL and expire after a fixed TTL. Stale entries are
evicted lazily on read; an eviction pass runs on each insert and, if the
map is still over capacity, drops the oldest entries.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any

ToolList = list[dict[str, Any]]


class ToolListCache:
    """Async-safe TTL cache of ``tools/list`` results."""

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_entries: int = 100,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._store: dict[str, tuple[float, ToolList]] = {}  # key → (timestamp, tools)
        self._lock = asyncio.Lock()
        self._fetch_locks: dict[str, asyncio.Lock] = {}
        self._hits = 0
        self._misses = 0

    async def get(self, key: str) -> ToolList | None:
        """Return the cached tools for *key*, or ``None`` if missing or stale."""
        async with self._lock:
            return self._get_locked(key)

    async def put(self, key: str, tools: ToolList) -> None:
        """Store *tools* under *key* with the current timestamp."""
        async with self._lock:
            self._put_locked(key, tools)

    async def get_or_fetch(self, key: str, fetch: Callable[[], Awaitable[ToolList]]) -> ToolList:
        """Return cached tools, calling *fetch* on a miss.

        Concurrent misses for the same endpoint wait on a per-endpoint lock
        and share a single upstream call. The cache-wide lock is only held
        for the read-check-write, never across *fetch*.
        """
        cached = await self.get(key)
        if cached is not None:
            return cached
        async with self._fetch_lock(key):
            async with self._lock:
                cached = self._peek_locked(key)
            if cached is not None:
                return cached
            tools = await fetch()
            await self.put(key, tools)
            return list(tools)

    async def clear(self) -> None:
        async with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> dict[str, int]:
        return {"hits": self._hits, "misses": self._misses, "entries": len(self._store)}

    def _fetch_lock(self, key: str) -> asyncio.Lock:
        lock = self._fetch_locks.get(key)
        if lock is None:
            lock = self._fetch_locks[key] = asyncio.Lock()
        return lock

    def _peek_locked(self, key: str) -> ToolList | None:
        entry = self._store.get(key)
        if entry is None or self._clock() - entry[0] > self._ttl:
            return None
        return list(entry[1])

    def _get_locked(self, key: str) -> ToolList | None:
        entry = self._store.get(key)
        if entry is None:
            self._misses += 1
            return None
        ts, tools = entry
        if self._clock() - ts > self._ttl:
            del self._store[key]
            self._misses += 1
            return None
        self._hits += 1
        return list(tools)

    def _put_locked(self, key: str, tools: ToolList) -> None:
        now = self._clock()
        self._store[key] = (now, list(tools))
        self._evict(now)

    def _evict(self, now: float) -> None:
        stale = [k for k, (ts, _) in self._store.items() if now - ts > self._ttl]
        for k in stale:
            del self._store[k]
        while len(self._store) > self._max_entries:
            oldest_key = min(self._store, key=lambda k: self._store[k][0])
            del self._store[oldest_key]
