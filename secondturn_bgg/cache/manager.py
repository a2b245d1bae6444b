"""
In-memory caches for BGG search results and game metadata.

Two independent stores, both bounded in size and swept periodically:
- search results, keyed by normalized query + filters, with an adaptive TTL
- game metadata, keyed by BGG id (24h as game details, 7 days as search metadata)
"""

import json
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from ..config import (
    CLEANUP_INTERVAL,
    GAME_DETAILS_TTL,
    MAX_CACHE_SIZE,
    METADATA_TTL,
    SEARCH_TTL,
)
from ..models import CacheStats, GameMetadata, SearchFilters, SearchResult

logger = logging.getLogger(__name__)

# plain dicts key variants such as the lightweight search
Filters = Union[SearchFilters, Dict[str, Any]]


@dataclass(frozen=True)
class SearchCacheEntry:
    query: str
    results: Tuple[SearchResult, ...]
    timestamp: float
    ttl: float
    filters: Dict[str, Any] = field(default_factory=dict)

    def is_expired(self, now: float) -> bool:
        return now - self.timestamp > self.ttl


@dataclass(frozen=True)
class MetadataCacheEntry:
    data: GameMetadata
    timestamp: float


def calculate_search_ttl(search_time: float, result_count: int, base_ttl: float = SEARCH_TTL) -> float:
    """
    TTL for a search result set.

    Fast searches are cached longer, slow ones shorter; large result sets
    longer, small ones shorter. Capped at twice the base.

    Args:
        search_time: Seconds the search took
        result_count: Number of results cached
        base_ttl: Base lifetime in seconds

    Returns:
        TTL in seconds
    """
    ttl = base_ttl

    if search_time < 1:
        ttl *= 1.5
    elif search_time > 5:
        ttl *= 0.5

    if result_count > 20:
        ttl *= 1.2
    elif result_count < 5:
        ttl *= 0.8

    return min(ttl, base_ttl * 2)


def build_search_cache_key(query: str, filters: Optional[Filters] = None) -> str:
    key = f"search:{query.lower().strip()}"
    filters_dict = _filters_dict(filters)
    if not filters_dict:
        return key
    return f"{key}:{json.dumps(filters_dict, sort_keys=True)}"


def _filters_dict(filters: Optional[Filters]) -> Dict[str, Any]:
    if filters is None:
        return {}
    if isinstance(filters, dict):
        return {key: value for key, value in filters.items() if value is not None}
    return filters.model_dump(mode="json", by_alias=True, exclude_none=True)


class CacheManager:
    """
    Search and metadata caches with hit-rate accounting.

    Maps are guarded by a lock because batch fetches and the sweeper run on
    other threads.
    """

    def __init__(self, max_size: int = MAX_CACHE_SIZE,
                 clock: Callable[[], float] = time.time,
                 auto_cleanup: bool = False,
                 cleanup_interval: float = CLEANUP_INTERVAL):
        """
        Initialize the cache manager.

        Args:
            max_size: Maximum entries per store
            clock: Wall clock used for entry timestamps
            auto_cleanup: Start the background sweeper immediately
            cleanup_interval: Seconds between sweeps
        """
        self.max_size = max_size
        self.cleanup_interval = cleanup_interval
        self._clock = clock
        self._lock = threading.RLock()
        self._search_cache: Dict[str, SearchCacheEntry] = {}
        self._metadata_cache: Dict[str, MetadataCacheEntry] = {}
        self._cache_hits = 0
        self._total_queries = 0
        self._stop_cleanup = threading.Event()
        self._cleanup_thread: Optional[threading.Thread] = None

        if auto_cleanup:
            self.start_cleanup()

    # Search cache

    def get_cached_search(self, query: str, filters: Optional[Filters] = None) -> Optional[List[SearchResult]]:
        """
        Fresh cached results for a query, or None.

        Expired entries count as a miss but stay in place as a stale fallback
        until they are overwritten or swept.
        """
        key = build_search_cache_key(query, filters)
        with self._lock:
            self._total_queries += 1
            entry = self._search_cache.get(key)
            if entry is None or entry.is_expired(self._clock()):
                return None
            self._cache_hits += 1
            return list(entry.results)

    def get_stale_search(self, query: str, filters: Optional[Filters] = None) -> Optional[List[SearchResult]]:
        """Cached results for a query regardless of age; not counted in stats."""
        key = build_search_cache_key(query, filters)
        with self._lock:
            entry = self._search_cache.get(key)
        return list(entry.results) if entry else None

    def set_cached_search(self, query: str, results: List[SearchResult], search_time: float,
                          filters: Optional[Filters] = None) -> None:
        ttl = calculate_search_ttl(search_time, len(results))
        entry = SearchCacheEntry(
            query=query,
            results=tuple(results),
            timestamp=self._clock(),
            ttl=ttl,
            filters=_filters_dict(filters),
        )
        with self._lock:
            self._search_cache[build_search_cache_key(query, filters)] = entry
            self._evict_oldest(self._search_cache)
        logger.debug(f"Cached {len(results)} results for '{query}' (ttl {ttl:.0f}s)")

    def clear_search_cache_for_query(self, query: str, filters: Optional[Filters] = None) -> None:
        with self._lock:
            self._search_cache.pop(build_search_cache_key(query, filters), None)

    # Metadata cache

    def get_cached_metadata(self, game_ids: List[str]) -> Tuple[List[GameMetadata], List[str]]:
        """
        Partition ids into cached metadata and ids that still need fetching.

        Returns:
            (hits, missing ids), both in request order
        """
        hits: List[GameMetadata] = []
        misses: List[str] = []
        with self._lock:
            now = self._clock()
            for game_id in game_ids:
                self._total_queries += 1
                entry = self._metadata_cache.get(game_id)
                if entry is not None and now - entry.timestamp < METADATA_TTL:
                    self._cache_hits += 1
                    hits.append(entry.data)
                else:
                    if entry is not None:
                        del self._metadata_cache[game_id]
                    misses.append(game_id)
        return hits, misses

    def cache_metadata_batch(self, metadata: List[GameMetadata]) -> None:
        with self._lock:
            now = self._clock()
            for item in metadata:
                if item.id:
                    self._metadata_cache[item.id] = MetadataCacheEntry(data=item, timestamp=now)
            self._evict_oldest(self._metadata_cache)

    def get_cached_game_data(self, game_id: str) -> Optional[GameMetadata]:
        """Cached metadata for one game if younger than the game details TTL."""
        with self._lock:
            self._total_queries += 1
            entry = self._metadata_cache.get(game_id)
            if entry is None:
                return None
            if self._clock() - entry.timestamp > GAME_DETAILS_TTL:
                del self._metadata_cache[game_id]
                return None
            self._cache_hits += 1
            return entry.data

    def cache_game_data(self, game_data: GameMetadata) -> None:
        self.cache_metadata_batch([game_data])

    # Maintenance

    def _evict_oldest(self, store: Dict[str, Any]) -> None:
        # caller holds the lock
        overflow = len(store) - self.max_size
        if overflow <= 0:
            return
        oldest = sorted(store.items(), key=lambda kv: kv[1].timestamp)[:overflow]
        for key, _ in oldest:
            del store[key]
        logger.debug(f"Evicted {overflow} oldest cache entries")

    def cleanup_expired(self) -> int:
        """
        Drop expired entries from both stores.

        Returns:
            Number of entries removed
        """
        removed = 0
        with self._lock:
            now = self._clock()
            for key in [k for k, e in self._search_cache.items() if e.is_expired(now)]:
                del self._search_cache[key]
                removed += 1
            for key in [k for k, e in self._metadata_cache.items() if now - e.timestamp > METADATA_TTL]:
                del self._metadata_cache[key]
                removed += 1
        if removed:
            logger.info(f"Cache cleanup removed {removed} expired entries")
        return removed

    def start_cleanup(self) -> None:
        """Run ``cleanup_expired`` every ``cleanup_interval`` seconds on a daemon thread."""
        if self._cleanup_thread is not None and self._cleanup_thread.is_alive():
            return
        self._stop_cleanup.clear()
        self._cleanup_thread = threading.Thread(
            target=self._cleanup_loop, name="bgg-cache-cleanup", daemon=True
        )
        self._cleanup_thread.start()

    def stop_cleanup(self) -> None:
        self._stop_cleanup.set()
        if self._cleanup_thread is not None:
            self._cleanup_thread.join(timeout=1)
            self._cleanup_thread = None

    def _cleanup_loop(self) -> None:
        while not self._stop_cleanup.wait(self.cleanup_interval):
            self.cleanup_expired()

    # Stats

    def get_cache_stats(self) -> CacheStats:
        with self._lock:
            hit_rate = self._cache_hits / self._total_queries if self._total_queries else 0.0
            return CacheStats(
                size=len(self._search_cache) + len(self._metadata_cache),
                hit_rate=round(hit_rate, 4),
                total_queries=self._total_queries,
                cache_hits=self._cache_hits,
            )

    def clear_all_caches(self) -> None:
        with self._lock:
            self._search_cache.clear()
            self._metadata_cache.clear()
            self._cache_hits = 0
            self._total_queries = 0

    def get_memory_cache_size(self) -> int:
        with self._lock:
            return len(self._search_cache) + len(self._metadata_cache)

    def is_memory_cache_empty(self) -> bool:
        return self.get_memory_cache_size() == 0

    def get_memory_cache_keys(self) -> List[str]:
        with self._lock:
            return list(self._search_cache) + list(self._metadata_cache)
