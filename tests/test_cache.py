"""Tests for the search result cache."""

import pytest

from knowledge_hub.search.cache import SearchCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return SearchCache(ttl_seconds=600, max_entries=2, clock=clock)


class TestMakeKey:
    """Test cache key construction."""

    def test_topic_order_and_duplicates_ignored(self):
        first = SearchCache.make_key("How do I create an S3 bucket?", ["reference_documentation", "general"], 5)
        second = SearchCache.make_key("  how do i create an s3 bucket?", ["general", "reference_documentation", "general"], 5)

        assert first == second

    def test_limit_is_part_of_key(self):
        assert SearchCache.make_key("q", ["general"], 5) != SearchCache.make_key("q", ["general"], 8)


class TestSearchCache:
    """Test SearchCache."""

    def test_get_within_ttl(self, cache, clock):
        key = SearchCache.make_key("q", ["general"], 5)
        cache.set(key, "value")

        clock.advance(599)

        assert cache.get(key) == "value"
        assert cache.hits == 1

    def test_expired_entry_is_a_miss(self, cache, clock):
        key = SearchCache.make_key("q", ["general"], 5)
        cache.set(key, "value")

        clock.advance(600)

        assert cache.get(key) is None
        assert cache.misses == 1

    def test_peek_returns_expired_entry(self, cache, clock):
        key = SearchCache.make_key("q", ["general"], 5)
        cache.set(key, "value")
        clock.advance(3600)

        assert cache.peek(key) == "value"
        assert cache.hits == 0
        assert cache.misses == 0

    def test_full_cache_skips_write(self, cache):
        cache.set(("a", (), 1), 1)
        cache.set(("b", (), 1), 2)

        stored = cache.set(("c", (), 1), 3)

        assert stored is False
        assert len(cache) == 2
        assert cache.get(("c", (), 1)) is None

    def test_full_cache_purges_expired_first(self, cache, clock):
        cache.set(("a", (), 1), 1)
        clock.advance(700)
        cache.set(("b", (), 1), 2)

        assert cache.set(("c", (), 1), 3) is True
        assert cache.peek(("a", (), 1)) is None
        assert cache.get(("c", (), 1)) == 3

    def test_overwriting_existing_key_when_full(self, cache):
        cache.set(("a", (), 1), 1)
        cache.set(("b", (), 1), 2)

        assert cache.set(("a", (), 1), 10) is True
        assert cache.get(("a", (), 1)) == 10

    def test_invalidate(self, cache):
        cache.set(("a", (), 1), 1)

        assert cache.invalidate(("a", (), 1)) is True
        assert cache.invalidate(("a", (), 1)) is False
        assert cache.peek(("a", (), 1)) is None

    def test_clear_resets_stats(self, cache):
        cache.set(("a", (), 1), 1)
        cache.get(("a", (), 1))
        cache.get(("missing", (), 1))

        cache.clear()

        assert cache.stats() == {
            "size": 0,
            "max_entries": 2,
            "ttl_seconds": 600,
            "hits": 0,
            "misses": 0,
            "hit_rate": 0.0,
        }

    def test_stats_hit_rate(self, cache):
        cache.set(("a", (), 1), 1)
        cache.get(("a", (), 1))
        cache.get(("a", (), 1))
        cache.get(("missing", (), 1))

        stats = cache.stats()

        assert stats["size"] == 1
        assert stats["hits"] == 2
        assert stats["misses"] == 1
        assert stats["hit_rate"] == pytest.approx(2 / 3)
