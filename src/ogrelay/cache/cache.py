"""In-memory response cache with a fixed time-to-live.

Keys are the normalized path-plus-query of a request (for example
``/game/index.php?page=fetchTechs&ajax=1&cp=33620001``); two requests share
an entry only when those strings are identical. Each entry remembers when it
was stored, and an entry is *fresh* while ``now - stored_at < ttl``.

There is no eviction beyond overwrite-on-refresh: stale entries are judged
lazily at lookup time and replaced by the next successful fetch. Memory is
bounded by the number of distinct keys, which the endpoint catalog keeps
small.

None of the methods suspend, so on an asyncio event loop every operation is
atomic with respect to other tasks. Concurrent misses on the same key each
fetch, and the last :meth:`ResponseCache.store` wins.

See Also:
    :class:`~ogrelay.client.engine.ExecutionEngine` -- the only caller,
    which decides what is cacheable.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

CACHE_TTL_SECONDS = 60.0
"""Freshness window for every cache entry."""

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """A stored response and the clock reading taken when it was stored."""

    key: str
    stored_at: float
    response: T


class ResponseCache(Generic[T]):
    """Maps request keys to their most recent successful response.

    Args:
        ttl_seconds: Freshness window.
        clock: Zero-argument callable returning the current time in
            seconds. Defaults to :func:`time.monotonic`, so wall-clock jumps
            never resurrect or expire entries.

    Example::

        cache = ResponseCache()
        cache.store("/game/index.php?page=ingame&component=overview", response)
        hit = cache.lookup("/game/index.php?page=ingame&component=overview")
    """

    def __init__(
        self,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def now(self) -> float:
        """Current reading of the cache's clock."""
        return self._clock()

    def lookup(self, key: str, now: Optional[float] = None) -> Optional[T]:
        """Return the cached response for *key* if it is still fresh.

        Args:
            key: The normalized path-plus-query.
            now: Clock reading to judge freshness against; defaults to
                :meth:`now`.

        Returns:
            The stored response, or ``None`` on a miss or a stale entry.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if now is None:
            now = self._clock()
        if now - entry.stored_at < self._ttl:
            return entry.response
        return None

    def store(self, key: str, response: T, now: Optional[float] = None) -> None:
        """Store *response* under *key*, overwriting any previous entry."""
        if now is None:
            now = self._clock()
        self._entries[key] = CacheEntry(key=key, stored_at=now, response=response)

    def stats(self) -> dict[str, Any]:
        """Return ``size``, ``fresh`` (entries still within the TTL) and ``ttl_seconds``."""
        now = self._clock()
        fresh = sum(1 for e in self._entries.values() if now - e.stored_at < self._ttl)
        return {"size": len(self._entries), "fresh": fresh, "ttl_seconds": self._ttl}
