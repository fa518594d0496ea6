"""
Pytest Configuration and Shared Fixtures.

This module contains fixtures available to all tests.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from relative_range_cache.domain.entities import (
    DataFrame,
    DataQueryRequest,
    DataSourceRef,
    FieldType,
    FrameField,
    Query,
    QueryType,
    TimeOrdering,
    TimeRange,
)


@pytest.fixture
def sample_config_path() -> Path:
    """Path to sample configuration file."""
    return Path(__file__).parent / "fixtures" / "sample_config.yaml"


@pytest.fixture
def reference_now() -> datetime:
    """Standard 'now' for testing."""
    return datetime(2024, 5, 28, 1, 0, tzinfo=timezone.utc)


@pytest.fixture
def datasource() -> DataSourceRef:
    return DataSourceRef(type="grafana-iot-sitewise-datasource", uid="mock-datasource-uid")


@pytest.fixture
def history_query(datasource: DataSourceRef) -> Query:
    """Ascending property history query."""
    return Query(
        ref_id="A",
        query_type=QueryType.PROPERTY_VALUE_HISTORY,
        region="us-west-2",
        asset_id="asset-1",
        property_id="RotationsPerSecond",
        datasource=datasource,
        time_ordering=TimeOrdering.ASCENDING,
    )


@pytest.fixture
def descending_query(datasource: DataSourceRef) -> Query:
    """Descending property history query."""
    return Query(
        ref_id="B",
        query_type=QueryType.PROPERTY_VALUE_HISTORY,
        region="us-west-2",
        asset_id="asset-2",
        property_id="Temperature",
        datasource=datasource,
        time_ordering=TimeOrdering.DESCENDING,
    )


@pytest.fixture
def latest_value_query(datasource: DataSourceRef) -> Query:
    """Latest value query, never served from cache."""
    return Query(
        ref_id="C",
        query_type=QueryType.PROPERTY_VALUE,
        region="us-west-2",
        asset_id="asset-1",
        property_id="Status",
        datasource=datasource,
    )


@pytest.fixture
def list_assets_query(datasource: DataSourceRef) -> Query:
    """Non-time-series list query."""
    return Query(
        ref_id="D",
        query_type=QueryType.LIST_ASSETS,
        region="us-west-2",
        model_id="model-1",
        filter="ALL",
        datasource=datasource,
    )


@pytest.fixture
def make_request(reference_now: datetime) -> Callable[..., DataQueryRequest]:
    """Factory for relative range requests."""

    def _make(
        targets: List[Query],
        raw_from: str = "now-1h",
        now: Optional[datetime] = None,
        request_id: str = "request-1",
    ) -> DataQueryRequest:
        return DataQueryRequest(
            request_id=request_id,
            targets=targets,
            range=TimeRange.relative(raw_from, "now", now=now or reference_now),
            interval="5s",
            interval_ms=5000,
        )

    return _make


@pytest.fixture
def make_frame() -> Callable[..., DataFrame]:
    """Factory for a two-column time-series frame."""

    def _make(
        times: List[int],
        values: Optional[List[float]] = None,
        ref_id: str = "A",
        name: str = "Demo Turbine Asset 1",
    ) -> DataFrame:
        return DataFrame(
            name=name,
            ref_id=ref_id,
            fields=[
                FrameField(name="time", type=FieldType.TIME, values=list(times)),
                FrameField(
                    name="RotationsPerSecond",
                    type=FieldType.NUMBER,
                    config={"unit": "RPS"},
                    values=list(values if values is not None else range(1, len(times) + 1)),
                ),
            ],
        )

    return _make

