"""Search response cache.

Entries are keyed by a digest of the raw query text plus the canonical JSON
of the whole query, so the same text with different filters, sort, page or
user never collides.
"""

import hashlib
import json
import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from woofsearch.search.models import SearchQuery, SearchResponse

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "search:"


def derive_cache_key(query: SearchQuery) -> str:
    """Build the cache key for a query.

    Args:
        query: The search query

    Returns:
        Prefixed hex digest
    """
    serialized = json.dumps(
        query.model_dump(mode="json"),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    digest = hashlib.sha256(f"{query.query}{serialized}".encode("utf-8")).hexdigest()
    return f"{CACHE_KEY_PREFIX}{digest}"


class SearchCache(Protocol):
    """Cache capability used by the search engine."""

    def key_for(self, query: SearchQuery) -> str:
        ...

    async def get(self, key: str) -> SearchResponse | None:
        ...

    async def set(self, key: str, value: SearchResponse) -> None:
        ...


@dataclass
class CacheStats:
    """Counters for cache effectiveness."""

    hits: int = 0
    misses: int = 0
    sets: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0


class InMemorySearchCache:
    """Process-local cache with a TTL and a bounded number of entries.

    Entries are only ever fully overwritten; when the cache is full the
    oldest entry is evicted.
    """

    DEFAULT_TTL_SECONDS = 600
    DEFAULT_MAX_ENTRIES = 1000

    def __init__(
        self,
        ttl_seconds: float | None = None,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the cache.

        Args:
            ttl_seconds: Entry lifetime (default: 10 minutes)
            max_entries: Maximum number of cached responses (default: 1000)
            clock: Monotonic time source in seconds
        """
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else self.DEFAULT_TTL_SECONDS
        self.max_entries = max_entries or self.DEFAULT_MAX_ENTRIES
        self.stats = CacheStats()
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, SearchResponse]] = OrderedDict()

    def key_for(self, query: SearchQuery) -> str:
        return derive_cache_key(query)

    async def get(self, key: str) -> SearchResponse | None:
        entry = self._entries.get(key)
        if entry is None:
            self.stats.misses += 1
            return None

        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            self.stats.misses += 1
            return None

        self.stats.hits += 1
        return value

    async def set(self, key: str, value: SearchResponse) -> None:
        if key in self._entries:
            del self._entries[key]
        self._entries[key] = (self._clock() + self.ttl_seconds, value)
        self.stats.sets += 1

        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self.stats.evictions += 1
            logger.debug(f"Evicted cache entry {evicted}")

    def clear(self) -> None:
        """Drop all entries."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
