"""
Integration Tests - Cached Query Runner Tests.

These tests run the caching wrapper against the MockQueryRunner to verify
that incremental responses match a full fetch of the same range.

Test Files:
    - test_cached_query_runner.py: Refresh cycles through the cache
"""
