"""
Relative Range Cache - Serve Recurring "Last N" Queries Incrementally.

A dashboard refreshing "last 6 hours" every minute re-requests almost the
same data each time. The cache keeps the previous response and, on the next
refresh, hands back:
    - the cached frames trimmed to the part still inside the new window
      ("start" for ascending series, "end" for descending ones)
    - a paginating request covering only the gap up to ``now``

Design Notes:
    - Only ranges whose start is relative to ``now`` and that reach back
      further than the refresh window are cached
    - Entries are keyed by raw range start plus an order-independent query
      fingerprint, and are replaced wholesale on every write
    - A response with any frame that matches no target, or a time-series
      frame without a time column, is not cached at all; the drop is logged
      for operators and reported as a CacheWriteResult
    - Every doubtful case degrades to ``None``: the caller does a full fetch
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from relative_range_cache.caching.cache_manager import CacheConfig, CacheManager
from relative_range_cache.caching.fingerprint import parse_request_cache_id
from relative_range_cache.config.models import CacheSettings, RangeCacheConfig
from relative_range_cache.domain.entities import (
    DataQueryRequest,
    DataQueryResponse,
    LoadingState,
    Query,
    TimeRange,
)
from relative_range_cache.domain.value_objects import (
    AbsoluteTimeRange,
    CachedQuery,
    CachedQueryInfo,
    CachedResponse,
    CacheWriteResult,
    DataFrameCacheInfo,
    RelativeRangeCacheInfo,
)
from relative_range_cache.errors import MalformedFrameError
from relative_range_cache.frames.trimming import (
    find_time_field,
    trim_time_series_data_frames,
    trim_time_series_data_frames_ending,
)
from relative_range_cache.observability.observability_manager import (
    ObservabilityManager,
)
from relative_range_cache.time_range.utils import (
    get_paginating_request_range,
    is_cacheable_time_range,
    is_time_range_covering_start,
)

logger = logging.getLogger(__name__)


class UnmatchedFrameError(Exception):
    """A response frame has no corresponding request target."""


@dataclass
class RangeCacheStats:
    """Counters of cache activity."""

    hits: int = 0
    misses: int = 0
    stale: int = 0
    not_cacheable: int = 0
    writes_stored: int = 0
    writes_dropped: int = 0
    current_entries: int = 0
    evictions: int = 0
    expirations: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses + self.stale
        return self.hits / total if total > 0 else 0.0


class RelativeRangeCache:
    """
    Cache for relative range queries.

    Usage:
        cache = RelativeRangeCache()

        info = cache.get(request)
        if info is None:
            response = runner.query(request)
        else:
            fresh = runner.query(info.paginating_request)
            response = merge(info.cached_response.start, fresh, info.cached_response.end)

        cache.set(request, response)
    """

    def __init__(
        self,
        cache_manager: Optional[CacheManager] = None,
        settings: Optional[CacheSettings] = None,
        observability: Optional[ObservabilityManager] = None,
    ) -> None:
        """
        Initialize the cache.

        Args:
            cache_manager: Entry store (unbounded, never-expiring if None)
            settings: Refresh window and time column settings
            observability: Optional sink for structured cache events
        """
        self.settings = settings if settings is not None else CacheSettings()
        if cache_manager is None:
            cache_manager = CacheManager(CacheConfig(log_access=self.settings.log_access))
        self.cache = cache_manager
        self.observability = observability
        self._stats = RangeCacheStats()

    @classmethod
    def from_config(
        cls,
        config: RangeCacheConfig,
        observability: Optional[ObservabilityManager] = None,
    ) -> RelativeRangeCache:
        """Build a cache from a validated configuration."""
        cache_manager = CacheManager(
            CacheConfig(
                max_entries=config.eviction.max_entries,
                default_ttl_seconds=config.eviction.ttl_seconds,
                log_access=config.cache.log_access,
            )
        )
        return cls(
            cache_manager=cache_manager,
            settings=config.cache,
            observability=observability,
        )

    def __len__(self) -> int:
        return len(self.cache)

    def __contains__(self, request: object) -> bool:
        if not isinstance(request, DataQueryRequest):
            return False
        return parse_request_cache_id(request) in self.cache

    def set(self, request: DataQueryRequest, response: DataQueryResponse) -> CacheWriteResult:
        """
        Cache the response of a request.

        Args:
            request: The request used to get the response
            response: The response to cache

        Returns:
            Whether the response was stored, skipped or dropped
        """
        if not self.settings.enabled or not self._is_cacheable(request.range):
            return CacheWriteResult.SKIPPED_NOT_CACHEABLE

        request_cache_id = parse_request_cache_id(request)
        query_id_map: Dict[str, Query] = {q.ref_id: q for q in request.targets}

        try:
            queries = [
                CachedQueryInfo(
                    query=CachedQuery.from_query(self._match_target(frame.ref_id, query_id_map)),
                    data_frame=frame.model_copy(deep=True),
                )
                for frame in response.data
            ]
        except UnmatchedFrameError as e:
            return self._drop_write(request, e, CacheWriteResult.DROPPED_UNMATCHED_FRAME)

        try:
            self._check_time_columns(queries)
        except MalformedFrameError as e:
            return self._drop_write(request, e, CacheWriteResult.DROPPED_MALFORMED_FRAME)

        self.cache.set(
            request_cache_id,
            DataFrameCacheInfo(queries=queries, range=request.range),
        )
        self._stats.writes_stored += 1
        self._emit(
            "cache_write",
            {"request_id": request.request_id, "frames": len(queries)},
            level="debug",
        )
        return CacheWriteResult.STORED

    def get(self, request: DataQueryRequest) -> Optional[RelativeRangeCacheInfo]:
        """
        Get the cached response for a request.

        Args:
            request: The request to get the cached response for

        Returns:
            Cached frames and the paginating request if usable, None otherwise
        """
        if not self.settings.enabled or not self._is_cacheable(request.range):
            self._stats.not_cacheable += 1
            return None

        cached_data_info = self.lookup_cached_data(request)
        if cached_data_info is None:
            self._stats.misses += 1
            self._emit("cache_miss", {"request_id": request.request_id}, level="debug")
            return None

        if not is_time_range_covering_start(cached_data_info.range, request.range):
            self._stats.stale += 1
            self._emit("cache_stale", {"request_id": request.request_id}, level="debug")
            return None

        self._stats.hits += 1
        cache_info = self.parse_cache_info(cached_data_info, request)
        self._emit(
            "cache_hit",
            {
                "request_id": request.request_id,
                "paginating_from": cache_info.paginating_request.range.from_.isoformat(),
                "paginating_targets": len(cache_info.paginating_request.targets),
            },
        )
        return cache_info

    def lookup_cached_data(self, request: DataQueryRequest) -> Optional[DataFrameCacheInfo]:
        """Lookup the stored entry for a request, if any."""
        request_cache_id = parse_request_cache_id(request)
        return self.cache.get(request_cache_id)

    def parse_cache_info(
        self,
        cached_data_info: DataFrameCacheInfo,
        request: DataQueryRequest,
    ) -> RelativeRangeCacheInfo:
        """Trim a stored entry for a request and build its paginating request."""
        request_range = request.range

        paginating_request_range = get_paginating_request_range(
            request_range,
            cached_data_info.range,
            self.settings.refresh_window,
        )
        paginating_request = self.get_paginating_request(request, paginating_request_range)

        cache_range = AbsoluteTimeRange.between(
            request_range.from_, paginating_request_range.from_
        )
        time_field_name = self.settings.time_field_name
        start_frames = trim_time_series_data_frames(
            cached_data_info.queries, cache_range, time_field_name
        )
        end_frames = trim_time_series_data_frames_ending(
            cached_data_info.queries, cache_range, time_field_name
        )

        return RelativeRangeCacheInfo(
            cached_response=CachedResponse(
                start=DataQueryResponse(
                    data=start_frames,
                    key=request.request_id,
                    state=LoadingState.STREAMING,
                ),
                end=DataQueryResponse(
                    data=end_frames,
                    key=request.request_id,
                    state=LoadingState.STREAMING,
                ),
            ),
            paginating_request=paginating_request,
        )

    @staticmethod
    def get_paginating_request(request: DataQueryRequest, time_range: TimeRange) -> DataQueryRequest:
        """Copy of the request narrowed to the range and its time-series targets."""
        targets: List[Query] = [
            target for target in request.targets if target.query_type.is_time_series
        ]
        return request.model_copy(update={"range": time_range, "targets": targets})

    def clear(self) -> None:
        """Drop all entries."""
        self.cache.clear()

    def get_stats(self) -> RangeCacheStats:
        """Get a snapshot of cache statistics."""
        store_stats = self.cache.get_stats()
        return RangeCacheStats(
            hits=self._stats.hits,
            misses=self._stats.misses,
            stale=self._stats.stale,
            not_cacheable=self._stats.not_cacheable,
            writes_stored=self._stats.writes_stored,
            writes_dropped=self._stats.writes_dropped,
            current_entries=store_stats.current_entries,
            evictions=store_stats.evictions,
            expirations=store_stats.expirations,
        )

    def _is_cacheable(self, time_range: TimeRange) -> bool:
        return is_cacheable_time_range(time_range, self.settings.refresh_window)

    @staticmethod
    def _match_target(ref_id: Optional[str], query_id_map: Dict[str, Query]) -> Query:
        if ref_id is None:
            raise UnmatchedFrameError("response data frame without a refId")
        query = query_id_map.get(ref_id)
        if query is None:
            raise UnmatchedFrameError(
                f"response data frame {ref_id!r} without a corresponding request target"
            )
        return query

    def _check_time_columns(self, queries: List[CachedQueryInfo]) -> None:
        """Raise MalformedFrameError for a time-series frame without a time column."""
        for cached_query_info in queries:
            data_frame = cached_query_info.data_frame
            if cached_query_info.query.query_type.is_time_series and data_frame.fields:
                find_time_field(data_frame, self.settings.time_field_name)

    def _drop_write(
        self,
        request: DataQueryRequest,
        error: Exception,
        result: CacheWriteResult,
    ) -> CacheWriteResult:
        self._stats.writes_dropped += 1
        logger.error(f"Response not cached for request {request.request_id}: {error}")
        self._emit(
            "cache_write_dropped",
            {"request_id": request.request_id, "reason": str(error), "result": result.value},
            level="error",
        )
        return result

    def _emit(self, event_type: str, data: Dict[str, object], level: str = "info") -> None:
        if self.observability is None:
            return
        self.observability.record_count(event_type)
        self.observability.log_event(event_type, data, level=level)
