"""Process-wide memo of fuzzy indices with time-based expiry.

Entries are keyed by (record count, serialized configuration), not by
record content: two different collections of the same size searched with
the same configuration share an index. Callers accept that aliasing in
exchange for skipping index rebuilds on repeated queries; searches map
hits back to the caller's own records by position.

Expired entries are swept lazily before every lookup; there is no timer.
"""

import logging
import threading
import time
from collections.abc import Callable
from typing import Generic, TypeVar

from cachetools import TTLCache

from scoresearch.core.config import SearchConfiguration

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_MAX_ENTRIES = 128

IndexT = TypeVar("IndexT")

CacheKey = tuple[int, str]


class MatchCache(Generic[IndexT]):
    """TTL cache for built indices.

    Usage::

        cache = MatchCache(ttl_seconds=300)
        index = cache.get_or_build(len(records), config, lambda: build(records))
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        self._clock = clock
        self._max_entries = max_entries
        self._lock = threading.Lock()
        self._entries: TTLCache = self._new_entries(ttl_seconds)

    def _new_entries(self, ttl_seconds: float) -> TTLCache:
        return TTLCache(maxsize=self._max_entries, ttl=ttl_seconds, timer=self._clock)

    @property
    def ttl_seconds(self) -> float:
        return self._entries.ttl

    @ttl_seconds.setter
    def ttl_seconds(self, value: float) -> None:
        # TTLCache fixes its ttl at construction; changing it starts empty.
        with self._lock:
            self._entries = self._new_entries(value)

    def __len__(self) -> int:
        return len(self._entries)

    @staticmethod
    def make_key(count: int, config: SearchConfiguration) -> CacheKey:
        return (count, config.cache_token())

    def get(self, count: int, config: SearchConfiguration) -> IndexT | None:
        """Return the live index for this key, or None."""
        key = self.make_key(count, config)
        with self._lock:
            self._sweep()
            return self._entries.get(key)

    def put(self, count: int, config: SearchConfiguration, index: IndexT) -> None:
        key = self.make_key(count, config)
        with self._lock:
            self._entries[key] = index

    def get_or_build(
        self,
        count: int,
        config: SearchConfiguration,
        build: Callable[[], IndexT],
    ) -> IndexT:
        """Return a cached index, building and storing one on a miss.

        The build runs outside the lock; concurrent misses on the same key
        may each build, and the last one stored wins.
        """
        cached = self.get(count, config)
        if cached is not None:
            logger.debug("Match cache hit: %d records", count)
            return cached
        logger.debug("Match cache miss: building index over %d records", count)
        index = build()
        self.put(count, config, index)
        return index

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _sweep(self) -> None:
        expired = self._entries.expire()
        if expired:
            logger.debug("Match cache: evicted %d expired entries", len(expired))


_default_cache: MatchCache = MatchCache()


def get_default_cache() -> MatchCache:
    """Return the process-wide cache used when callers don't pass their own."""
    return _default_cache


def clear_search_cache() -> None:
    """Drop every entry from the process-wide cache."""
    _default_cache.clear()
