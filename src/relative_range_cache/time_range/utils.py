"""
Time Range Utilities - Cacheability, Overlap and Pagination.

Pure functions over ``TimeRange`` used by the relative range cache:
    - is_cacheable_time_range: Is the range worth caching at all?
    - is_time_range_covering_start: Does a cached range cover a new request?
    - get_paginating_request_range: Window still to fetch to reach ``now``

Design Notes:
    - The trailing refresh window is always re-fetched, cached or not
    - Every ambiguous case answers "not cacheable" so callers do a full fetch
"""

from __future__ import annotations

from datetime import datetime, timedelta

from relative_range_cache.domain.entities import RawTimeRange, TimeRange
from relative_range_cache.time_range.date_math import is_relative_expression

# The time range to always request regardless of cache
DEFAULT_TIME_SERIES_REFRESH_MINUTES = 15
DEFAULT_REFRESH_WINDOW = timedelta(minutes=DEFAULT_TIME_SERIES_REFRESH_MINUTES)


def is_relative_from_now(raw: RawTimeRange) -> bool:
    """True if the range start is expressed relative to ``now``."""
    return is_relative_expression(raw.from_)


def min_datetime(first: datetime, *others: datetime) -> datetime:
    """Return the earliest of the given instants."""
    return min((first, *others))


def is_cacheable_time_range(
    time_range: TimeRange,
    refresh_window: timedelta = DEFAULT_REFRESH_WINDOW,
) -> bool:
    """
    Check if a time range is cacheable.

    A range is cacheable if its start is relative to ``now`` and reaches
    further back than the refresh window, which is always fetched fresh.

    Args:
        time_range: Range to check
        refresh_window: Trailing window that is never served from cache

    Returns:
        True if the range is cacheable
    """
    if not is_relative_from_now(time_range.raw):
        return False

    refresh_ago = time_range.to - refresh_window
    return time_range.from_ < refresh_ago


def is_time_range_covering_start(cache_range: TimeRange, request_range: TimeRange) -> bool:
    """
    Check whether a cached range still covers the start of a request.

    Positive (same start):
        cache:   <from>...
        request: <from>...

    Positive (cache wraps the request start):
        cache:   <from>......<to>
        request: ......<from>....

    Negative (cache ends at or before the request start):
        cache:   <from>.<to>.......
        request: ...........<from>.
    """
    request_from = request_range.from_

    if request_from == cache_range.from_:
        return True

    return cache_range.from_ < request_from < cache_range.to


def get_paginating_request_range(
    request_range: TimeRange,
    cache_range: TimeRange,
    refresh_window: timedelta = DEFAULT_REFRESH_WINDOW,
) -> TimeRange:
    """
    Get the range still to fetch to bring cached data up to ``now``.

    Starts at the cache end, or at the refresh window before the request end
    if that is earlier. The raw descriptor of the request is kept.

    Args:
        request_range: The current request time range
        cache_range: The cached time range

    Returns:
        The paginating request range
    """
    refresh_ago = request_range.to - refresh_window
    start = min_datetime(cache_range.to, refresh_ago)

    return TimeRange(
        from_=start,
        to=request_range.to,
        raw=request_range.raw,
    )
