"""
Tests for the TTL cache decorator.

Time is controlled with a fake clock so expiry can be crossed without sleeping.
"""

import pytest

from stowage.backends.memory_backend import MemoryStorage
from stowage.config import StorageOptions
from stowage.error_handling import NotFoundError, StorageConfigurationError
from stowage.ttl_cache import CacheEntry, TTLCache


@pytest.fixture
def cache(counting_store, clock):
    """TTL cache with a 2 second lifetime over an instrumented store."""
    return TTLCache(counting_store, ttl_seconds=2, clock=clock)


class TestCacheEntry:
    """Test CacheEntry validity."""

    def test_valid_only_strictly_before_expiry(self):
        entry = CacheEntry(data=b"v", expiry=100.0)

        assert entry.is_valid(99.9)
        assert not entry.is_valid(100.0)
        assert not entry.is_valid(100.1)


class TestTTLCacheRead:
    """Test read-through behaviour."""

    def test_write_then_read_hits_cache(self, cache, counting_store):
        """Test that a read right after a write doesn't touch the store."""
        cache.write("k", b"v")

        assert cache.read("k") == b"v"
        assert counting_store.reads == 0

    def test_miss_reads_through_and_caches(self, cache, counting_store):
        """Test that the first read fetches and later reads are served from memory."""
        counting_store.inner.write("k", b"v")

        assert cache.read("k") == b"v"
        assert cache.read("k") == b"v"
        assert counting_store.reads == 1

    def test_expired_entry_refetched_once(self, cache, counting_store, clock):
        """Test TTL=2: after 3 seconds the next read goes to the store exactly once."""
        cache.write("k", b"v")
        assert cache.read("k") == b"v"
        assert counting_store.reads == 0

        clock.advance(3)

        assert cache.read("k") == b"v"
        assert counting_store.reads == 1

        # The refetched value is cached again
        assert cache.read("k") == b"v"
        assert counting_store.reads == 1

    def test_entry_expires_exactly_at_ttl(self, cache, counting_store, clock):
        """Test that an entry is not served once now == expiry."""
        cache.write("k", b"v")
        clock.advance(2)

        cache.read("k")
        assert counting_store.reads == 1

    def test_entry_valid_just_before_ttl(self, cache, counting_store, clock):
        cache.write("k", b"v")
        clock.advance(1.999)

        cache.read("k")
        assert counting_store.reads == 0

    def test_expired_entry_not_returned_when_store_changed(
        self, cache, counting_store, clock
    ):
        """Test that an expired entry is never served, even partially."""
        cache.write("k", b"old")
        counting_store.inner.write("k", b"new")

        assert cache.read("k") == b"old"  # still within TTL
        clock.advance(5)
        assert cache.read("k") == b"new"

    def test_not_found_propagates_and_is_not_cached(self, cache, counting_store):
        with pytest.raises(NotFoundError):
            cache.read("missing")

        counting_store.inner.write("missing", b"now here")

        assert cache.read("missing") == b"now here"
        assert counting_store.reads == 2

    def test_store_error_leaves_expired_entry_untouched(
        self, cache, counting_store, clock
    ):
        """Test that a failing read-through keeps raising rather than serving stale data."""
        cache.write("k", b"v")
        counting_store.inner.remove("k")
        clock.advance(3)

        with pytest.raises(NotFoundError):
            cache.read("k")
        with pytest.raises(NotFoundError):
            cache.read("k")

    def test_zero_ttl_always_reads_through(self, counting_store, clock):
        cache = TTLCache(counting_store, ttl_seconds=0, clock=clock)
        cache.write("k", b"v")

        cache.read("k")
        cache.read("k")
        assert counting_store.reads == 2


class TestTTLCacheWrite:
    """Test write-through behaviour."""

    def test_write_updates_store_first(self, cache, counting_store):
        cache.write("k", b"v")
        assert counting_store.inner.read("k") == b"v"

    def test_failed_write_propagates_and_does_not_cache(self, cache, counting_store):
        """Test that a payload the store rejected is never served."""
        counting_store.fail_writes = True

        with pytest.raises(OSError, match="disk full"):
            cache.write("k", b"rejected")

        with pytest.raises(NotFoundError):
            cache.read("k")

    def test_failed_write_keeps_previous_entry(self, cache, counting_store):
        cache.write("k", b"good")
        counting_store.fail_writes = True

        with pytest.raises(OSError):
            cache.write("k", b"bad")

        assert cache.read("k") == b"good"

    def test_write_overwrites_entry(self, cache, counting_store):
        cache.write("k", b"one")
        cache.write("k", b"two")

        assert cache.read("k") == b"two"
        assert counting_store.reads == 0

    def test_write_resets_expiry(self, cache, counting_store, clock):
        cache.write("k", b"one")
        clock.advance(1.5)
        cache.write("k", b"two")
        clock.advance(1.5)

        assert cache.read("k") == b"two"
        assert counting_store.reads == 0

    def test_options_forwarded_but_do_not_change_cache_ttl(
        self, cache, counting_store, clock
    ):
        """Test that options.ttl reaches the store and the cache keeps its own TTL."""
        options = StorageOptions(ttl=3600)
        cache.write("k", b"v", options)

        assert counting_store.write_options == [options]

        clock.advance(3)
        cache.read("k")
        assert counting_store.reads == 1


class TestTTLCacheRemove:
    """Test remove passthrough."""

    def test_remove_drops_entry(self, cache, counting_store):
        cache.write("k", b"v")
        cache.remove("k")

        with pytest.raises(NotFoundError):
            cache.read("k")
        assert counting_store.removes == 1

    def test_failed_remove_keeps_entry(self, cache, counting_store):
        cache.write("k", b"v")
        counting_store.fail_removes = True

        with pytest.raises(OSError):
            cache.remove("k")

        assert cache.read("k") == b"v"

    def test_remove_unsupported_by_store(self, read_writer_store):
        """Test that a store without remove is reported as a TypeError."""
        cache = TTLCache(read_writer_store, ttl_seconds=10)
        cache.write("k", b"v")

        with pytest.raises(TypeError, match="does not support remove"):
            cache.remove("k")

        assert cache.read("k") == b"v"

    def test_read_only_writer_store_miss(self, read_writer_store):
        """Test that a minimal ReadWriter store reports misses as NotFoundError."""
        cache = TTLCache(read_writer_store, ttl_seconds=10)

        with pytest.raises(NotFoundError):
            cache.read("missing")


class TestTTLCacheComposition:
    """Test wrapping and nesting."""

    def test_nested_caches(self, counting_store, clock):
        """Test that a cache can wrap another cache."""
        inner = TTLCache(counting_store, ttl_seconds=10, clock=clock)
        outer = TTLCache(inner, ttl_seconds=2, clock=clock)

        outer.write("k", b"v")
        clock.advance(3)

        # Outer expired, inner still fresh: no store read
        assert outer.read("k") == b"v"
        assert counting_store.reads == 0

        clock.advance(10)
        assert outer.read("k") == b"v"
        assert counting_store.reads == 1

    def test_over_memory_backend(self, clock):
        store = MemoryStorage()
        cache = TTLCache(store, ttl_seconds=2, clock=clock)

        cache.write("k", b"v")
        assert store.read("k") == b"v"
        assert cache.read("k") == b"v"

    def test_caches_are_independent(self, counting_store, clock):
        a = TTLCache(counting_store, ttl_seconds=10, clock=clock)
        b = TTLCache(counting_store, ttl_seconds=10, clock=clock)

        a.write("k", b"v")
        assert b.read("k") == b"v"
        assert counting_store.reads == 1


class TestTTLCacheConfiguration:
    """Test construction and statistics."""

    def test_negative_ttl_rejected(self, counting_store):
        with pytest.raises(StorageConfigurationError):
            TTLCache(counting_store, ttl_seconds=-1)

    def test_negative_ttl_is_value_error(self, counting_store):
        with pytest.raises(ValueError):
            TTLCache(counting_store, ttl_seconds=-5)

    def test_stats(self, cache, counting_store, clock):
        counting_store.inner.write("a", b"1")

        cache.read("a")  # miss
        cache.read("a")  # hit
        cache.write("b", b"2")
        cache.read("b")  # hit

        stats = cache.get_stats()
        assert stats == {"entries": 2, "hits": 2, "misses": 1, "ttl_seconds": 2}

    def test_expired_entries_not_swept(self, cache, clock):
        """Test that expired entries stay in the table until replaced."""
        cache.write("a", b"1")
        clock.advance(100)

        assert cache.get_stats()["entries"] == 1
