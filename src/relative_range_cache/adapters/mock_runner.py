"""
Mock Query Runner.

A fake backend for development and testing. Generates deterministic frames
so that the same instant always yields the same value, whichever window it
is fetched in.
"""

from __future__ import annotations

from datetime import timedelta
from typing import List

from relative_range_cache.domain.entities import (
    DataFrame,
    DataQueryRequest,
    DataQueryResponse,
    FieldType,
    FrameField,
    Query,
    QueryType,
    TimeOrdering,
)
from relative_range_cache.domain.value_objects import to_epoch_ms


class MockQueryRunner:
    """Fake backend returning one sample per step for time-series queries."""

    MOCK_ASSETS = [
        ("asset-1", "Demo Turbine Asset 1"),
        ("asset-2", "Demo Turbine Asset 2"),
        ("asset-3", "Demo Wind Farm"),
    ]

    def __init__(self, step: timedelta = timedelta(minutes=1)) -> None:
        """
        Initialize mock runner.

        Args:
            step: Spacing between generated samples
        """
        self._step_ms = int(step.total_seconds() * 1000)
        self.requests: List[DataQueryRequest] = []

    def query(self, request: DataQueryRequest) -> DataQueryResponse:
        """Generate one frame per target over the request range."""
        self.requests.append(request)

        from_ms = to_epoch_ms(request.range.from_)
        to_ms = to_epoch_ms(request.range.to)

        frames = [self._frame_for(target, from_ms, to_ms) for target in request.targets]
        return DataQueryResponse(data=frames, key=request.request_id)

    def _frame_for(self, target: Query, from_ms: int, to_ms: int) -> DataFrame:
        if not target.query_type.is_time_series:
            return self._asset_list_frame(target)

        # Samples on step boundaries within (from, to]
        first = (from_ms // self._step_ms + 1) * self._step_ms
        times = list(range(first, to_ms + 1, self._step_ms))

        if target.query_type == QueryType.PROPERTY_VALUE:
            times = times[-1:]

        if target.time_ordering == TimeOrdering.DESCENDING:
            times.reverse()

        return DataFrame(
            name=target.label or target.asset_id or target.ref_id,
            ref_id=target.ref_id,
            fields=[
                FrameField(name="time", type=FieldType.TIME, values=times),
                FrameField(
                    name=target.property_id or "value",
                    type=FieldType.NUMBER,
                    values=[self.value_at(t) for t in times],
                ),
            ],
        )

    def _asset_list_frame(self, target: Query) -> DataFrame:
        return DataFrame(
            name=target.query_type.value,
            ref_id=target.ref_id,
            fields=[
                FrameField(
                    name="id",
                    type=FieldType.STRING,
                    values=[asset_id for asset_id, _ in self.MOCK_ASSETS],
                ),
                FrameField(
                    name="name",
                    type=FieldType.STRING,
                    values=[name for _, name in self.MOCK_ASSETS],
                ),
            ],
        )

    def value_at(self, time_ms: int) -> float:
        """Deterministic sample value for an instant."""
        return float((time_ms // self._step_ms) % 1000)
