"""Response caching for ogrelay.

This package provides :class:`ResponseCache`, an in-memory store of the most
recent successful read response per request key, with a fixed 60 second TTL.
The cache is owned by :class:`~ogrelay.client.engine.ExecutionEngine` and is
never persisted.
"""

from ogrelay.cache.cache import CACHE_TTL_SECONDS, CacheEntry, ResponseCache

__all__ = ["CACHE_TTL_SECONDS", "CacheEntry", "ResponseCache"]
