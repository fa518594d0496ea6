"""
Adapters Layer - Infrastructure Around the Cache.

Adapters:
    - CachedQueryRunner: Wraps a backend runner with the relative range cache
    - MockQueryRunner: Deterministic fake backend for development and tests
"""

from relative_range_cache.adapters.cached_query_runner import (
    CachedQueryRunner,
    QueryRunnerProtocol,
)
from relative_range_cache.adapters.mock_runner import MockQueryRunner

__all__ = [
    "CachedQueryRunner",
    "MockQueryRunner",
    "QueryRunnerProtocol",
]
