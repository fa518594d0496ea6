"""
Relative Range Cache - Incremental Caching for "Last N" Time-Series Queries.

Dashboards that auto-refresh a relative window ("last 6 hours") re-request
almost the same data on every refresh. This package keeps the previous
response, trims it to what is still valid, and computes the small
paginating request that brings it up to ``now``.

Main Components:
    - domain: Queries, time ranges, frames and cache records
    - time_range: Relative date math, cacheability, overlap, pagination
    - frames: Frame trimming and schema-key merging
    - caching: Fingerprints, entry store and the RelativeRangeCache
    - adapters: Caching wrapper around a backend query runner
    - config: Pydantic models and YAML loader
    - observability: structlog events and counters

Example:
    >>> from relative_range_cache import CachedQueryRunner, MockQueryRunner
    >>> runner = CachedQueryRunner(MockQueryRunner())
    >>> response = runner.query(request)
"""

import logging

from relative_range_cache.adapters.cached_query_runner import CachedQueryRunner
from relative_range_cache.adapters.mock_runner import MockQueryRunner
from relative_range_cache.caching.relative_range_cache import RelativeRangeCache
from relative_range_cache.domain.value_objects import CacheWriteResult

__version__ = "0.1.0"

__all__ = [
    "CacheWriteResult",
    "CachedQueryRunner",
    "MockQueryRunner",
    "RelativeRangeCache",
    "configure_logging",
]


def configure_logging(
    level: int = logging.INFO,
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
) -> None:
    """
    Configure logging for the relative range cache.

    Call this at application startup to see log messages.
    By default, only WARNING and above are visible.

    Args:
        level: Logging level (default: INFO)
        format: Log message format

    Example:
        >>> import relative_range_cache
        >>> relative_range_cache.configure_logging(logging.DEBUG)
    """
    logging.basicConfig(
        level=level,
        format=format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("relative_range_cache").setLevel(level)
