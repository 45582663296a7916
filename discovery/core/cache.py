"""In-memory query cache with staleness windows and request coalescing."""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Union

from discovery.core.config import settings
from discovery.core.logging import get_logger

log = get_logger("core.cache")

Fetcher = Callable[[], Awaitable[Any]]
TTL = Union[float, Callable[[Any], float]]


@dataclass
class CacheEntry:
    value: Any
    created_at: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return now - self.created_at < self.ttl


class QueryCache:
    """Memoizes async fetches keyed by a canonical, hashable query key.

    A fresh entry is returned immediately. A stale or missing entry triggers
    one fetch; concurrent readers of the same key await that single pending
    task. When the fetch fails and a stale entry exists, the stale value is
    served instead of the error.

    Keys are tuples whose first element is the query kind ("search",
    "detail", ...), which lets a whole kind be invalidated at once.
    """

    def __init__(
        self,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_entries = max_entries if max_entries is not None else settings.CACHE_MAX_ENTRIES
        self._clock = clock
        self._entries: "OrderedDict[Hashable, CacheEntry]" = OrderedDict()
        self._inflight: Dict[Hashable, asyncio.Task] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def peek(self, key: Hashable) -> Optional[CacheEntry]:
        """Return the entry for ``key`` without touching recency or freshness."""
        return self._entries.get(key)

    async def get_or_fetch(self, key: Hashable, fetcher: Fetcher, ttl: TTL) -> Any:
        entry = self._entries.get(key)
        if entry is not None and entry.is_fresh(self._clock()):
            self._entries.move_to_end(key)
            return entry.value

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(key, fetcher, ttl))
            self._inflight[key] = task
            task.add_done_callback(lambda t, k=key: self._release(k, t))
        else:
            log.debug(f"Coalescing onto in-flight fetch for {key!r}")

        try:
            # shield: one cancelled reader must not cancel the shared fetch
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            stale = self._entries.get(key)
            if stale is None:
                raise
            log.warning(f"Serving stale entry for {key!r} after fetch failure: {exc}")
            return stale.value

    def invalidate(self, key: Hashable) -> bool:
        return self._entries.pop(key, None) is not None

    def invalidate_prefix(self, kind: str) -> int:
        """Drop every entry whose key starts with ``kind``."""
        doomed = [k for k in self._entries if isinstance(k, tuple) and k and k[0] == kind]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def clear(self) -> None:
        self._entries.clear()

    async def _fetch(self, key: Hashable, fetcher: Fetcher, ttl: TTL) -> Any:
        value = await fetcher()
        seconds = ttl(value) if callable(ttl) else ttl
        self._store(key, value, float(seconds))
        return value

    def _store(self, key: Hashable, value: Any, ttl: float) -> None:
        self._entries[key] = CacheEntry(value=value, created_at=self._clock(), ttl=ttl)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            log.debug(f"Evicted least recently used entry {evicted!r}")

    def _release(self, key: Hashable, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        # mark the exception retrieved; every reader already handled it
        if not task.cancelled():
            task.exception()
