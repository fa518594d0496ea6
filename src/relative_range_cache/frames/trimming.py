"""
Frame Trimmer - Slice Cached Frames to the Still-Valid Window.

Cached frames are trimmed to ``(from, to]`` before being served again:
    - Latest-value queries are never reused (zero rows)
    - Ascending time series are sliced directly
    - Descending time series go to the "end" set, trimmed on reversed time
    - List/describe queries pass through untouched

Design Notes:
    - Every column is sliced with the same index pair to keep rows aligned
    - ``last_observation`` keeps one sample before the window for interpolation
    - Output frames never share mutable state with the cached input
"""

from __future__ import annotations

import copy
import logging
from typing import Any, List, Sequence, Tuple

from relative_range_cache.domain.entities import (
    DataFrame,
    FieldType,
    FrameField,
    QueryType,
)
from relative_range_cache.domain.value_objects import AbsoluteTimeRange, CachedQueryInfo
from relative_range_cache.errors import MalformedFrameError

logger = logging.getLogger(__name__)

TIME_FIELD_NAME = "time"


def empty_data_frame(data_frame: DataFrame) -> DataFrame:
    """Return a copy of the frame with no fields and therefore no rows."""
    return DataFrame(
        name=data_frame.name,
        ref_id=data_frame.ref_id,
        fields=[],
        meta=copy.deepcopy(data_frame.meta),
    )


def find_time_field(data_frame: DataFrame, time_field_name: str = TIME_FIELD_NAME) -> FrameField:
    """
    Locate the time column of a frame.

    Falls back to the first column typed as time when no column carries the
    expected name.

    Raises:
        MalformedFrameError: If the frame has no time column
    """
    time_field = data_frame.get_field(time_field_name)
    if time_field is not None:
        return time_field

    for frame_field in data_frame.fields:
        if frame_field.type == FieldType.TIME:
            return frame_field

    raise MalformedFrameError(
        f"Frame {data_frame.name!r} (refId={data_frame.ref_id}) has no time column",
        frame_name=data_frame.name,
    )


def find_trim_indices(
    time_values: Sequence[int],
    time_range: AbsoluteTimeRange,
    last_observation: bool = False,
) -> Tuple[int, int]:
    """
    Find the slice bounds of ascending time values within a window.

    Args:
        time_values: Ascending epoch-millisecond timestamps
        time_range: Window; ``from_ms`` exclusive, ``to_ms`` inclusive
        last_observation: Keep one sample before the window

    Returns:
        ``(from_index, to_index)`` suitable for slicing
    """
    length = len(time_values)

    from_index = next(
        (i for i, t in enumerate(time_values) if t > time_range.from_ms), None
    )
    if from_index is None:
        # No time value within range; include no data in the slice
        from_index = length
    elif last_observation:
        from_index = max(from_index - 1, 0)

    to_index = next(
        (i for i, t in enumerate(time_values) if t > time_range.to_ms), length
    )

    return from_index, to_index


def _slice_field(frame_field: FrameField, values: List[Any]) -> FrameField:
    return FrameField(
        name=frame_field.name,
        type=frame_field.type,
        config=copy.deepcopy(frame_field.config),
        labels=dict(frame_field.labels) if frame_field.labels is not None else None,
        values=values,
    )


def _with_fields(data_frame: DataFrame, fields: List[FrameField]) -> DataFrame:
    return DataFrame(
        name=data_frame.name,
        ref_id=data_frame.ref_id,
        fields=fields,
        meta=copy.deepcopy(data_frame.meta),
    )


def trim_time_series_data_frame(
    data_frame: DataFrame,
    time_range: AbsoluteTimeRange,
    last_observation: bool = False,
    time_field_name: str = TIME_FIELD_NAME,
) -> DataFrame:
    """
    Trim an ascending time-series frame to a window.

    Args:
        data_frame: Frame with ascending time column
        time_range: Window; ``from_ms`` exclusive, ``to_ms`` inclusive
        last_observation: Keep one sample before the window
        time_field_name: Name of the time column

    Returns:
        New frame holding only the rows inside the window
    """
    if not data_frame.fields:
        return empty_data_frame(data_frame)

    time_field = find_time_field(data_frame, time_field_name)
    from_index, to_index = find_trim_indices(
        time_field.values, time_range, last_observation
    )

    # TODO: account for "expand time range" style queries that return samples outside the window
    trimmed_fields = [
        _slice_field(frame_field, list(frame_field.values[from_index:to_index]))
        for frame_field in data_frame.fields
    ]
    return _with_fields(data_frame, trimmed_fields)


def trim_time_series_data_frame_reversed_time(
    data_frame: DataFrame,
    time_range: AbsoluteTimeRange,
    last_observation: bool = False,
    time_field_name: str = TIME_FIELD_NAME,
) -> DataFrame:
    """
    Trim a descending time-series frame to a window.

    Columns are reversed into ascending order, sliced with the same index
    search as ``trim_time_series_data_frame``, and reversed back so the
    result keeps the input's descending order.
    """
    if not data_frame.fields:
        return empty_data_frame(data_frame)

    time_field = find_time_field(data_frame, time_field_name)
    ascending_times = list(reversed(time_field.values))
    from_index, to_index = find_trim_indices(
        ascending_times, time_range, last_observation
    )

    trimmed_fields = []
    for frame_field in data_frame.fields:
        ascending_values = list(reversed(frame_field.values))
        sliced = ascending_values[from_index:to_index]
        sliced.reverse()
        trimmed_fields.append(_slice_field(frame_field, sliced))

    return _with_fields(data_frame, trimmed_fields)


def trim_time_series_data_frames(
    cached_query_infos: Sequence[CachedQueryInfo],
    cache_range: AbsoluteTimeRange,
    time_field_name: str = TIME_FIELD_NAME,
) -> List[DataFrame]:
    """
    Trim cached frames into the "start" set served before fresh data.

    Returns one frame per cached query, in stored order.
    """
    trimmed: List[DataFrame] = []

    for cached_query_info in cached_query_infos:
        query = cached_query_info.query
        data_frame = cached_query_info.data_frame

        if not query.query_type.is_time_series:
            # No trimming needed
            trimmed.append(data_frame.model_copy(deep=True))
        elif query.query_type == QueryType.PROPERTY_VALUE:
            # Always refresh the latest value
            trimmed.append(empty_data_frame(data_frame))
        elif query.is_descending:
            # Descending frames are served at the end to respect the ordering,
            # see trim_time_series_data_frames_ending()
            trimmed.append(empty_data_frame(data_frame))
        else:
            trimmed.append(
                trim_time_series_data_frame(
                    data_frame,
                    cache_range,
                    last_observation=bool(query.last_observation),
                    time_field_name=time_field_name,
                )
            )

    return trimmed


def trim_time_series_data_frames_ending(
    cached_query_infos: Sequence[CachedQueryInfo],
    cache_range: AbsoluteTimeRange,
    time_field_name: str = TIME_FIELD_NAME,
) -> List[DataFrame]:
    """
    Trim cached descending frames into the "end" set served after fresh data.

    Returns one frame per descending time-series query, in stored order.
    """
    trimmed: List[DataFrame] = []

    for cached_query_info in cached_query_infos:
        query = cached_query_info.query
        if not (query.query_type.is_time_series and query.is_descending):
            continue

        if query.query_type == QueryType.PROPERTY_VALUE:
            trimmed.append(empty_data_frame(cached_query_info.data_frame))
            continue

        trimmed.append(
            trim_time_series_data_frame_reversed_time(
                cached_query_info.data_frame,
                cache_range,
                last_observation=bool(query.last_observation),
                time_field_name=time_field_name,
            )
        )

    logger.debug(f"Trimmed {len(trimmed)} descending frames for the end of the response")
    return trimmed
