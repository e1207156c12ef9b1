"""Tests for the in-memory ResponseCache."""

from __future__ import annotations

import pytest

from ogrelay.cache import CACHE_TTL_SECONDS, ResponseCache


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> ResponseCache[str]:
    return ResponseCache(clock=clock)


KEY = "/game/index.php?page=fetchTechs&ajax=1&cp=33620001"


# ------------------------------------------------------------------ #
# Freshness
# ------------------------------------------------------------------ #


class TestFreshness:
    def test_default_ttl_is_sixty_seconds(self) -> None:
        assert CACHE_TTL_SECONDS == 60.0
        assert ResponseCache().ttl_seconds == 60.0

    def test_miss_on_empty_cache(self, cache: ResponseCache[str]) -> None:
        assert cache.lookup(KEY) is None

    def test_hit_within_ttl(self, cache: ResponseCache[str], clock: FakeClock) -> None:
        cache.store(KEY, "techs")
        clock.advance(59.9)
        assert cache.lookup(KEY) == "techs"

    def test_stale_at_exactly_ttl(self, cache: ResponseCache[str], clock: FakeClock) -> None:
        """An entry stored at T is fresh strictly before T + 60."""
        cache.store(KEY, "techs")
        clock.advance(60.0)
        assert cache.lookup(KEY) is None

    def test_explicit_now_overrides_clock(self, cache: ResponseCache[str]) -> None:
        cache.store(KEY, "techs", now=0.0)
        assert cache.lookup(KEY, now=30.0) == "techs"
        assert cache.lookup(KEY, now=61.0) is None

    def test_stale_entry_is_kept_until_overwritten(
        self, cache: ResponseCache[str], clock: FakeClock
    ) -> None:
        cache.store(KEY, "old")
        clock.advance(120)
        assert cache.lookup(KEY) is None
        assert cache.stats()["size"] == 1
        assert cache.stats()["fresh"] == 0


# ------------------------------------------------------------------ #
# Keys and overwrite
# ------------------------------------------------------------------ #


class TestKeys:
    def test_keys_must_match_exactly(self, cache: ResponseCache[str]) -> None:
        cache.store(KEY, "techs")
        assert cache.lookup("/game/index.php?page=fetchTechs&ajax=1&cp=33620002") is None
        assert cache.lookup("/game/index.php?page=fetchTechs&cp=33620001&ajax=1") is None

    def test_store_overwrites_and_restarts_ttl(
        self, cache: ResponseCache[str], clock: FakeClock
    ) -> None:
        cache.store(KEY, "first")
        clock.advance(50)
        cache.store(KEY, "second")
        clock.advance(50)
        assert cache.lookup(KEY) == "second"


class TestStats:
    def test_stats_counts_fresh_entries(
        self, cache: ResponseCache[str], clock: FakeClock
    ) -> None:
        cache.store("/old", "old")
        clock.advance(61)
        cache.store("/new", "new")
        assert cache.stats() == {"size": 2, "fresh": 1, "ttl_seconds": 60.0}
