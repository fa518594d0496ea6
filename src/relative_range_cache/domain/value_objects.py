"""
Value Objects for Domain Layer.

Immutable records the cache stores and hands back to callers.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from relative_range_cache.domain.entities import (
    DataFrame,
    DataQueryRequest,
    DataQueryResponse,
    Query,
    QueryType,
    TimeOrdering,
    TimeRange,
)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Cache key: JSON array of the raw "from" descriptor and the query fingerprint
RequestCacheId = str

# Canonical identity of a query set
QueryCacheId = str


def to_epoch_ms(value: datetime) -> int:
    """Convert an instant to integer milliseconds since the Unix epoch."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - EPOCH) // timedelta(milliseconds=1)


class CachedQuery(BaseModel):
    """The part of a query the frame trimmer needs."""

    ref_id: str
    query_type: QueryType
    time_ordering: Optional[TimeOrdering] = None
    last_observation: Optional[bool] = None

    model_config = {"frozen": True}

    @classmethod
    def from_query(cls, query: Query) -> CachedQuery:
        return cls(
            ref_id=query.ref_id,
            query_type=query.query_type,
            time_ordering=query.time_ordering,
            last_observation=query.last_observation,
        )

    @property
    def is_descending(self) -> bool:
        return self.time_ordering == TimeOrdering.DESCENDING


class CachedQueryInfo(BaseModel):
    """A response frame paired with the query that produced it."""

    query: CachedQuery
    data_frame: DataFrame

    model_config = {"frozen": True}


class DataFrameCacheInfo(BaseModel):
    """A stored cache entry: the paired frames and the range they cover."""

    queries: List[CachedQueryInfo] = Field(default_factory=list)
    range: TimeRange

    model_config = {"frozen": True}


class AbsoluteTimeRange(BaseModel):
    """Trim window in epoch milliseconds; ``from_ms`` exclusive, ``to_ms`` inclusive."""

    from_ms: int
    to_ms: int

    model_config = {"frozen": True}

    @classmethod
    def between(cls, start: datetime, end: datetime) -> AbsoluteTimeRange:
        return cls(from_ms=to_epoch_ms(start), to_ms=to_epoch_ms(end))


class CachedResponse(BaseModel):
    """Cached frames served before and after the paginating fetch."""

    start: DataQueryResponse
    end: DataQueryResponse

    model_config = {"frozen": True}


class RelativeRangeCacheInfo(BaseModel):
    """Result of a cache hit."""

    cached_response: CachedResponse
    paginating_request: DataQueryRequest

    model_config = {"frozen": True}


class CacheWriteResult(str, Enum):
    """Outcome of ``RelativeRangeCache.set``."""

    STORED = "stored"
    SKIPPED_NOT_CACHEABLE = "skipped_not_cacheable"
    DROPPED_UNMATCHED_FRAME = "dropped_unmatched_frame"
    DROPPED_MALFORMED_FRAME = "dropped_malformed_frame"

    @property
    def stored(self) -> bool:
        return self is CacheWriteResult.STORED
