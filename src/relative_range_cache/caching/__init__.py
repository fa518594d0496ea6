"""
Caching Layer.

Provides the relative range cache and its building blocks:
    - RelativeRangeCache: set/get orchestration for relative range queries
    - CacheManager: Key/entry store with opt-in LRU and TTL eviction
    - fingerprint: Order-independent cache identity of query sets
"""

from relative_range_cache.caching.cache_manager import (
    CacheConfig,
    CacheEntry,
    CacheManager,
    CacheManagerProtocol,
    CacheStats,
)
from relative_range_cache.caching.fingerprint import (
    parse_queries_cache_id,
    parse_query_cache_id,
    parse_request_cache_id,
)
from relative_range_cache.caching.relative_range_cache import (
    RangeCacheStats,
    RelativeRangeCache,
)

__all__ = [
    "CacheConfig",
    "CacheEntry",
    "CacheManager",
    "CacheManagerProtocol",
    "CacheStats",
    "RangeCacheStats",
    "RelativeRangeCache",
    "parse_queries_cache_id",
    "parse_query_cache_id",
    "parse_request_cache_id",
]
