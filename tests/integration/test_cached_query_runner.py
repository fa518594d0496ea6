"""
Integration Tests for CachedQueryRunner.

Runs repeated panel refreshes through the cache against the mock backend
and checks that incremental responses equal a full fetch of the same range.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, List
from unittest.mock import Mock

import pytest

from relative_range_cache import CachedQueryRunner, MockQueryRunner, RelativeRangeCache
from relative_range_cache.domain.entities import (
    DataFrame,
    DataQueryRequest,
    DataQueryResponse,
    LoadingState,
    Query,
    TimeRange,
)
from relative_range_cache.observability.observability_manager import (
    ObservabilityManager,
    get_correlation_id,
    set_correlation_id,
)


def at(hour: int, minute: int) -> datetime:
    return datetime(2024, 5, 28, hour, minute, tzinfo=timezone.utc)


def by_ref_id(frames: List[DataFrame]) -> Dict[str, DataFrame]:
    return {frame.ref_id: frame for frame in frames}


@pytest.fixture
def targets(
    history_query: Query,
    descending_query: Query,
    latest_value_query: Query,
    list_assets_query: Query,
) -> List[Query]:
    return [history_query, descending_query, latest_value_query, list_assets_query]


@pytest.fixture
def backend() -> MockQueryRunner:
    return MockQueryRunner(step=timedelta(minutes=1))


class TestRefreshCycle:
    """Repeated refreshes of one "last hour" panel."""

    def test_first_refresh_is_full_fetch(self, backend, make_request, targets) -> None:
        """
        SCENARIO: Panel requested for the first time
        EXPECTED: Backend called with the full request, response cached
        """
        # Arrange
        runner = CachedQueryRunner(backend)
        request = make_request(targets)

        # Act
        response = runner.query(request)

        # Assert
        assert backend.requests == [request]
        assert len(response.data) == 4
        assert by_ref_id(response.data)["A"].length == 60
        assert request in runner.cache

    def test_second_refresh_fetches_only_recent_window(
        self, backend, make_request, targets
    ) -> None:
        """
        SCENARIO: Same panel refreshed five minutes later
        EXPECTED: Backend asked only for (00:50, 01:05] and only for
                  time-series targets
        """
        # Arrange
        runner = CachedQueryRunner(backend)
        runner.query(make_request(targets))

        # Act
        runner.query(make_request(targets, now=at(1, 5), request_id="request-2"))

        # Assert
        paginating = backend.requests[1]
        assert paginating.range.from_ == at(0, 50)
        assert paginating.range.to == at(1, 5)
        assert sorted(target.ref_id for target in paginating.targets) == ["A", "B", "C"]

    @pytest.mark.parametrize("minutes_later", [1, 5, 14, 30, 59])
    def test_incremental_response_matches_full_fetch(
        self, backend, make_request, targets, minutes_later: int
    ) -> None:
        """
        SCENARIO: Refresh some minutes after the first fetch
        EXPECTED: Every frame equals the one a full fetch would return
        """
        # Arrange
        runner = CachedQueryRunner(backend)
        runner.query(make_request(targets))
        request = make_request(
            targets, now=at(1, 0) + timedelta(minutes=minutes_later), request_id="request-2"
        )

        # Act
        response = runner.query(request)

        # Assert
        expected = MockQueryRunner().query(request)
        assert response.state == LoadingState.DONE
        assert by_ref_id(response.data) == by_ref_id(expected.data)

    def test_many_refreshes_stay_consistent(self, backend, make_request, targets) -> None:
        runner = CachedQueryRunner(backend)
        response = None

        for minute in range(0, 60, 7):
            request = make_request(targets, now=at(1, minute), request_id=f"r{minute}")
            response = runner.query(request)

        expected = MockQueryRunner().query(request)
        assert by_ref_id(response.data) == by_ref_id(expected.data)
        assert runner.get_cache_stats()["fetches"] == {"full": 1, "paginated": 8}

    def test_descending_rows_stay_descending(
        self, backend, make_request, descending_query
    ) -> None:
        runner = CachedQueryRunner(backend)
        runner.query(make_request([descending_query]))

        response = runner.query(make_request([descending_query], now=at(1, 5)))

        times = response.data[0].fields[0].values
        assert times == sorted(times, reverse=True)
        assert times[0] == 1716858300000  # 01:05
        assert len(times) == 60

    def test_list_only_panel_not_refetched(
        self, backend, make_request, list_assets_query
    ) -> None:
        """
        SCENARIO: Panel with only a list query refreshed
        EXPECTED: Served entirely from cache, no backend call
        """
        runner = CachedQueryRunner(backend)
        first = runner.query(make_request([list_assets_query]))

        second = runner.query(make_request([list_assets_query], now=at(1, 5)))

        assert len(backend.requests) == 1
        assert second.data == first.data

    def test_stale_cache_triggers_full_fetch(self, backend, make_request, targets) -> None:
        runner = CachedQueryRunner(backend)
        runner.query(make_request(targets))
        request = make_request(targets, now=at(2, 30))

        runner.query(request)

        assert backend.requests[-1] == request
        assert runner.get_cache_stats()["cache"]["stale"] == 1

    def test_absolute_range_bypasses_cache(self, backend, targets) -> None:
        runner = CachedQueryRunner(backend)
        request = DataQueryRequest(
            request_id="absolute",
            targets=targets,
            range=TimeRange.absolute(at(0, 0), at(1, 0)),
        )

        runner.query(request)
        runner.query(request)

        assert backend.requests == [request, request]
        assert len(runner.cache) == 0


class TestBackendErrors:
    """Error responses are passed through and never cached."""

    def test_failed_full_fetch_not_cached(self, make_request, targets) -> None:
        # Arrange
        backend = Mock()
        backend.query.return_value = DataQueryResponse(
            state=LoadingState.ERROR, error="throttled"
        )
        runner = CachedQueryRunner(backend)
        request = make_request(targets)

        # Act
        response = runner.query(request)

        # Assert
        assert response.error == "throttled"
        assert request not in runner.cache

    def test_failed_paginating_fetch_keeps_previous_entry(
        self, make_request, history_query
    ) -> None:
        """
        SCENARIO: Paginating request fails after a successful first fetch
        EXPECTED: Error returned, cached entry unchanged
        """
        # Arrange
        mock_backend = MockQueryRunner()
        backend = Mock(wraps=mock_backend)
        runner = CachedQueryRunner(backend)
        first = make_request([history_query])
        runner.query(first)
        stored_before = runner.cache.lookup_cached_data(first)

        backend.query.return_value = DataQueryResponse(
            state=LoadingState.ERROR, error="timeout"
        )

        # Act
        response = runner.query(make_request([history_query], now=at(1, 5)))

        # Assert
        assert response.error == "timeout"
        assert runner.cache.lookup_cached_data(first) == stored_before


class TestObservability:
    def test_request_id_used_as_correlation_id(self, backend, make_request, targets) -> None:
        observability = ObservabilityManager(use_json=False)
        runner = CachedQueryRunner(backend, observability=observability)

        runner.query(make_request(targets, request_id="panel-7"))
        runner.query(make_request(targets, now=at(1, 5), request_id="panel-8"))

        assert get_correlation_id() == "panel-8"
        assert observability.get_count("cache_miss") == 1
        assert observability.get_count("cache_hit") == 1
        hit = observability.get_events("cache_hit")[0]
        assert hit["correlation_id"] == "panel-8"
        set_correlation_id(None)

    def test_shared_cache_instance(self, backend, make_request, targets) -> None:
        cache = RelativeRangeCache()
        first = CachedQueryRunner(backend, cache=cache)
        first.query(make_request(targets))

        other = CachedQueryRunner(backend, cache=cache)
        other.query(make_request(targets, now=at(1, 5)))

        assert first.cache is cache
        assert other.cache is cache
        assert other.get_cache_stats()["fetches"]["paginated"] == 1
        assert other.get_cache_stats()["cache"]["hits"] == 1
