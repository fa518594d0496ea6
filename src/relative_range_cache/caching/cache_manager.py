"""
Cache Manager - Key/Entry Store with Opt-in Eviction.

Holds the entries of a relative range cache. By default nothing is ever
evicted: an entry lives as long as the cache instance. Eviction can be
switched on per instance:
    - ``max_entries``: LRU eviction once the entry count is exceeded
    - ``default_ttl_seconds``: entries expire after a fixed age

Design Notes:
    - Writes replace entries wholesale; entries are never merged
    - No internal locking; a cache belongs to one data source instance and
      callers serialize concurrent access themselves
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)


class CacheManagerProtocol(Protocol):
    """Protocol for cache manager implementations."""

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        ...

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        """Set value in cache with optional TTL."""
        ...

    def invalidate(self, key: str) -> bool:
        """Invalidate a cache entry."""
        ...

    def clear(self) -> None:
        """Clear all cache entries."""
        ...


@dataclass
class CacheEntry:
    """A single cache entry with metadata."""

    value: Any
    created_at: float = field(default_factory=time.time)
    expires_at: Optional[float] = None

    @property
    def is_expired(self) -> bool:
        """Check if entry has expired."""
        if self.expires_at is None:
            return False
        return time.time() > self.expires_at


@dataclass
class CacheConfig:
    """Configuration for cache manager."""

    # Maximum number of entries before LRU eviction (None = unbounded)
    max_entries: Optional[int] = None

    # Default TTL in seconds (None = never expires)
    default_ttl_seconds: Optional[float] = None

    # Log cache hits/misses
    log_access: bool = False


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0
    current_entries: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


class CacheManager:
    """
    Key/entry store with optional LRU and TTL eviction.

    With the default config the store grows without bound, one entry per
    distinct key.
    """

    def __init__(self, config: Optional[CacheConfig] = None) -> None:
        """
        Initialize cache manager.

        Args:
            config: Cache configuration
        """
        self.config = config or CacheConfig()
        self._cache: OrderedDict[str, CacheEntry] = OrderedDict()
        self._stats = CacheStats()

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: object) -> bool:
        entry = self._cache.get(key)  # type: ignore[arg-type]
        return entry is not None and not entry.is_expired

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found/expired
        """
        entry = self._cache.get(key)

        if entry is None:
            self._stats.misses += 1
            if self.config.log_access:
                logger.debug(f"Cache MISS: {key}")
            return None

        if entry.is_expired:
            self._cache.pop(key, None)
            self._stats.expirations += 1
            self._stats.misses += 1
            if self.config.log_access:
                logger.debug(f"Cache EXPIRED: {key}")
            return None

        # Move to end for LRU
        self._cache.move_to_end(key)

        self._stats.hits += 1
        if self.config.log_access:
            logger.debug(f"Cache HIT: {key}")

        return entry.value

    def set(
        self,
        key: str,
        value: Any,
        ttl_seconds: Optional[float] = None,
    ) -> None:
        """
        Store a value, replacing any existing entry for the key.

        Args:
            key: Cache key
            value: Value to cache
            ttl_seconds: TTL in seconds (uses default if None)
        """
        ttl = ttl_seconds if ttl_seconds is not None else self.config.default_ttl_seconds
        expires_at = time.time() + ttl if ttl is not None and ttl > 0 else None

        self._cache.pop(key, None)
        self._evict_if_needed()
        self._cache[key] = CacheEntry(value=value, expires_at=expires_at)

        if self.config.log_access:
            logger.debug(f"Cache SET: {key} (TTL={ttl}s)")

    def invalidate(self, key: str) -> bool:
        """
        Invalidate a cache entry.

        Args:
            key: Cache key to invalidate

        Returns:
            True if entry was removed, False if not found
        """
        if self._cache.pop(key, None) is not None:
            logger.debug(f"Cache INVALIDATED: {key}")
            return True
        return False

    def invalidate_pattern(self, pattern: str) -> int:
        """
        Invalidate all entries whose key starts with ``pattern``.

        Returns:
            Number of entries invalidated
        """
        keys_to_remove = [k for k in self._cache if k.startswith(pattern)]
        for key in keys_to_remove:
            del self._cache[key]

        if keys_to_remove:
            logger.debug(f"Cache INVALIDATED {len(keys_to_remove)} entries matching '{pattern}'")

        return len(keys_to_remove)

    def clear(self) -> None:
        """Clear all cache entries."""
        self._cache.clear()
        logger.info("Cache CLEARED")

    def get_stats(self) -> CacheStats:
        """Get a snapshot of cache statistics."""
        return CacheStats(
            hits=self._stats.hits,
            misses=self._stats.misses,
            evictions=self._stats.evictions,
            expirations=self._stats.expirations,
            current_entries=len(self._cache),
        )

    def _evict_if_needed(self) -> None:
        """Make room for one more entry under the LRU bound."""
        max_entries = self.config.max_entries
        if max_entries is None:
            return

        while len(self._cache) >= max_entries and self._cache:
            key, _ = self._cache.popitem(last=False)
            self._stats.evictions += 1
            logger.debug(f"Cache EVICTED (LRU): {key}")
