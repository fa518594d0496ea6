"""
Frame Utilities.

Provides:
    - trimming: Slice cached frames to the still-valid window
    - append: Merge fresh frames onto cached ones by schema key
"""

from relative_range_cache.frames.append import (
    append_matching_frames,
    get_schema_key,
)
from relative_range_cache.frames.trimming import (
    TIME_FIELD_NAME,
    empty_data_frame,
    trim_time_series_data_frame,
    trim_time_series_data_frame_reversed_time,
    trim_time_series_data_frames,
    trim_time_series_data_frames_ending,
)

__all__ = [
    "TIME_FIELD_NAME",
    "append_matching_frames",
    "empty_data_frame",
    "get_schema_key",
    "trim_time_series_data_frame",
    "trim_time_series_data_frame_reversed_time",
    "trim_time_series_data_frames",
    "trim_time_series_data_frames_ending",
]
