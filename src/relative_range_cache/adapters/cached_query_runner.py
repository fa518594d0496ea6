"""
Cached Query Runner - Caching Wrapper for Query Runners.

Wraps any backend query runner so that recurring relative range requests
only fetch the newly elapsed window.

Design Notes:
    - Decorator/Wrapper pattern
    - On a hit: cached start + fresh rows + cached end, merged by schema key
    - Error responses are returned as-is and never cached
    - The merged response is written back, replacing the previous entry
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

from relative_range_cache.caching.relative_range_cache import RelativeRangeCache
from relative_range_cache.domain.entities import (
    DataFrame,
    DataQueryRequest,
    DataQueryResponse,
    LoadingState,
)
from relative_range_cache.frames.append import append_matching_frames
from relative_range_cache.observability.observability_manager import (
    ObservabilityManager,
)

logger = logging.getLogger(__name__)


class QueryRunnerProtocol(Protocol):
    """Protocol for the backend that actually executes requests."""

    def query(self, request: DataQueryRequest) -> DataQueryResponse:
        """Run every target of the request over its range."""
        ...


class CachedQueryRunner:
    """
    Caching wrapper for QueryRunner implementations.

    Usage:
        runner = CachedQueryRunner(backend)

        # First refresh: full fetch, response cached
        response = runner.query(request)

        # Next refresh of the same panel: only the last minutes are fetched
        response = runner.query(next_request)
    """

    def __init__(
        self,
        runner: QueryRunnerProtocol,
        cache: Optional[RelativeRangeCache] = None,
        observability: Optional[ObservabilityManager] = None,
    ) -> None:
        """
        Initialize cached runner.

        Args:
            runner: Underlying query runner to wrap
            cache: Relative range cache (creates one if None)
            observability: Optional sink for correlation ids and counters
        """
        self.runner = runner
        if cache is None:
            cache = RelativeRangeCache(observability=observability)
        self.cache = cache
        self.observability = observability

        self._full_fetches = 0
        self._paginated_fetches = 0

    def query(self, request: DataQueryRequest) -> DataQueryResponse:
        """
        Run a request, serving whatever the cache still covers.

        Args:
            request: Panel refresh request

        Returns:
            Complete response for the request's whole range
        """
        if self.observability:
            self.observability.set_correlation_id(request.request_id)

        cache_info = self.cache.get(request)

        if cache_info is None:
            self._full_fetches += 1
            logger.debug(f"Full fetch for request {request.request_id}")
            response = self.runner.query(request)
            if response.error is None:
                self.cache.set(request, response)
            return response

        self._paginated_fetches += 1
        paginating_request = cache_info.paginating_request
        logger.debug(
            f"Paginated fetch for request {request.request_id} from "
            f"{paginating_request.range.from_.isoformat()} "
            f"({len(paginating_request.targets)} targets)"
        )

        fresh_frames: List[DataFrame] = []
        if paginating_request.targets:
            fresh = self.runner.query(paginating_request)
            if fresh.error is not None:
                logger.warning(
                    f"Paginating request {request.request_id} failed: {fresh.error}"
                )
                return fresh
            fresh_frames = fresh.data

        merged = append_matching_frames(
            append_matching_frames(cache_info.cached_response.start.data, fresh_frames),
            cache_info.cached_response.end.data,
        )
        response = DataQueryResponse(
            data=merged,
            key=request.request_id,
            state=LoadingState.DONE,
        )
        self.cache.set(request, response)
        return response

    def get_cache_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dict with cache counters and fetch counts
        """
        stats = self.cache.get_stats()
        return {
            "cache": {
                "hits": stats.hits,
                "misses": stats.misses,
                "stale": stats.stale,
                "not_cacheable": stats.not_cacheable,
                "hit_rate": stats.hit_rate,
                "writes_stored": stats.writes_stored,
                "writes_dropped": stats.writes_dropped,
                "entries": stats.current_entries,
                "evictions": stats.evictions,
            },
            "fetches": {
                "full": self._full_fetches,
                "paginated": self._paginated_fetches,
            },
        }
