"""
Time Range Layer.

Provides:
    - date_math: Resolve ``now``-relative expressions
    - utils: Cacheability, overlap and paginating range arithmetic
"""

from relative_range_cache.time_range.date_math import (
    is_relative_expression,
    parse_relative,
)
from relative_range_cache.time_range.utils import (
    DEFAULT_REFRESH_WINDOW,
    DEFAULT_TIME_SERIES_REFRESH_MINUTES,
    get_paginating_request_range,
    is_cacheable_time_range,
    is_relative_from_now,
    is_time_range_covering_start,
    min_datetime,
)

__all__ = [
    "DEFAULT_REFRESH_WINDOW",
    "DEFAULT_TIME_SERIES_REFRESH_MINUTES",
    "get_paginating_request_range",
    "is_cacheable_time_range",
    "is_relative_expression",
    "is_relative_from_now",
    "is_time_range_covering_start",
    "min_datetime",
    "parse_relative",
]
