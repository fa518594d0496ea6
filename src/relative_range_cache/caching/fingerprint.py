"""
Fingerprint Deriver - Stable Cache Identity for Query Sets.

Each query is encoded as a JSON array over a fixed, explicit list of
identity fields; absent optional fields are encoded as ``null`` so presence
and absence stay distinguishable. Per-query encodings are sorted before
being combined, making the fingerprint independent of target order.

Fields outside the identity list (``ref_id``, ``label``) never affect the
fingerprint.
"""

from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import Any, List, Sequence, Union

from relative_range_cache.domain.entities import DataQueryRequest, Query
from relative_range_cache.domain.value_objects import QueryCacheId, RequestCacheId

_SEPARATORS = (",", ":")


def _encode(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    return value


def query_identity(query: Query) -> List[Any]:
    """Ordered identity tuple of a query (``None`` for absent fields)."""
    datasource = query.datasource
    return [
        query.query_type,
        query.region,
        query.response_format,
        query.asset_id,
        query.asset_ids,
        query.property_id,
        query.property_alias,
        query.quality,
        query.resolution,
        query.last_observation,
        query.flatten_l4e,
        query.max_page_aggregations,
        datasource.type if datasource is not None else None,
        datasource.uid if datasource is not None else None,
        query.time_ordering,
        query.load_all_children,
        query.hierarchy_id,
        query.model_id,
        query.filter,
    ]


def parse_query_cache_id(query: Query) -> QueryCacheId:
    """Encode one query's identity as a compact JSON array."""
    return json.dumps(_encode(query_identity(query)), separators=_SEPARATORS)


def parse_queries_cache_id(queries: Sequence[Query]) -> QueryCacheId:
    """Order-independent fingerprint of a query set."""
    cache_ids = sorted(parse_query_cache_id(query) for query in queries)
    return json.dumps(cache_ids, separators=_SEPARATORS)


def parse_request_cache_id(request: DataQueryRequest) -> RequestCacheId:
    """Cache key of a request: its raw range start plus the query fingerprint."""
    raw_from: Union[str, datetime] = request.range.raw.from_
    return json.dumps(
        [_encode(raw_from), parse_queries_cache_id(request.targets)],
        separators=_SEPARATORS,
    )
