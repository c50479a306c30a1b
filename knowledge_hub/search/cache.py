"""TTL cache for search results."""

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

CacheKey = tuple[str, tuple[str, ...], int]


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class SearchCache:
    """Bounded mapping with per-entry expiry.

    Expired entries are no longer served by get() but stay available to
    peek() until purge_expired() or an explicit invalidation removes them.
    A full cache first purges expired entries and otherwise skips the
    write. Identical keys written concurrently keep the last write.
    """

    def __init__(
        self,
        ttl_seconds: float = 600.0,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self.hits = 0
        self.misses = 0

    @staticmethod
    def make_key(normalized_text: str, topics: Iterable[str], limit: int) -> CacheKey:
        return (normalized_text.strip().lower(), tuple(sorted(set(topics))), limit)

    def get(self, key: CacheKey) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        if entry.expires_at <= self._clock():
            self.misses += 1
            return None
        self.hits += 1
        return entry.value

    def peek(self, key: CacheKey) -> Any | None:
        """Return an entry even if it has expired, without touching statistics."""
        entry = self._entries.get(key)
        return entry.value if entry else None

    def set(self, key: CacheKey, value: Any) -> bool:
        """Store a value.

        Returns:
            False when the cache is full and the write was skipped
        """
        if key not in self._entries and len(self._entries) >= self.max_entries:
            self.purge_expired()
            if len(self._entries) >= self.max_entries:
                logger.warning(f"Search cache full ({self.max_entries} entries), skipping write")
                return False
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + self.ttl_seconds)
        return True

    def invalidate(self, key: CacheKey) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Purged {len(expired)} expired search cache entries")
        return len(expired)

    def stats(self) -> dict[str, Any]:
        lookups = self.hits + self.misses
        return {
            "size": len(self._entries),
            "max_entries": self.max_entries,
            "ttl_seconds": self.ttl_seconds,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hits / lookups if lookups else 0.0,
        }

    def __len__(self) -> int:
        return len(self._entries)
