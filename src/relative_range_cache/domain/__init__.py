"""
Domain Layer - Queries, Time Ranges, Frames and Cache Records.

Entities:
    - Query: One data request within a panel
    - TimeRange: Absolute instants plus their raw (possibly relative) form
    - DataFrame / FrameField: Columnar time-series data
    - DataQueryRequest / DataQueryResponse: Envelopes around a panel refresh

Value Objects:
    - CachedQueryInfo: A frame paired with the query that produced it
    - DataFrameCacheInfo: A stored cache entry
    - RelativeRangeCacheInfo: What a cache hit hands back
    - CacheWriteResult: Outcome of a cache write

Design Principles:
    - Immutable (frozen Pydantic models)
    - No infrastructure dependencies
"""

from relative_range_cache.domain.entities import (
    TIME_SERIES_QUERY_TYPES,
    DataFrame,
    DataQueryRequest,
    DataQueryResponse,
    DataSourceRef,
    FieldType,
    FrameField,
    LoadingState,
    Query,
    QueryType,
    RawTimeRange,
    TimeOrdering,
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
    to_epoch_ms,
)

__all__ = [
    "TIME_SERIES_QUERY_TYPES",
    "AbsoluteTimeRange",
    "CachedQuery",
    "CachedQueryInfo",
    "CachedResponse",
    "CacheWriteResult",
    "DataFrame",
    "DataFrameCacheInfo",
    "DataQueryRequest",
    "DataQueryResponse",
    "DataSourceRef",
    "FieldType",
    "FrameField",
    "LoadingState",
    "Query",
    "QueryType",
    "RawTimeRange",
    "RelativeRangeCacheInfo",
    "TimeOrdering",
    "TimeRange",
    "to_epoch_ms",
]
