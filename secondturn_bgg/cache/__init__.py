"""
Cache module for BGG search results and game metadata.
"""

from .manager import (
    CacheManager,
    MetadataCacheEntry,
    SearchCacheEntry,
    build_search_cache_key,
    calculate_search_ttl,
)

__all__ = [
    "CacheManager",
    "SearchCacheEntry",
    "MetadataCacheEntry",
    "build_search_cache_key",
    "calculate_search_ttl",
]
