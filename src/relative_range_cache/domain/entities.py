"""
Core Domain Entities.

Queries, time ranges, data frames and the request/response envelopes that
flow between a dashboard panel, the cache and the backend query runner.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator


class QueryType(str, Enum):
    """Kind of data a query asks the backend for."""

    # Time-series kinds
    PROPERTY_VALUE = "PropertyValue"
    PROPERTY_VALUE_HISTORY = "PropertyValueHistory"
    PROPERTY_AGGREGATE = "PropertyAggregate"
    PROPERTY_INTERPOLATED = "PropertyInterpolated"

    # List / describe kinds
    LIST_ASSET_MODELS = "ListAssetModels"
    LIST_ASSETS = "ListAssets"
    LIST_ASSOCIATED_ASSETS = "ListAssociatedAssets"
    LIST_ASSET_PROPERTIES = "ListAssetProperties"
    LIST_TIME_SERIES = "ListTimeSeries"
    DESCRIBE_ASSET = "DescribeAsset"

    @property
    def is_time_series(self) -> bool:
        return self in TIME_SERIES_QUERY_TYPES


# Kinds whose frames carry a time column and can be trimmed / paginated
TIME_SERIES_QUERY_TYPES = frozenset(
    {
        QueryType.PROPERTY_AGGREGATE,
        QueryType.PROPERTY_INTERPOLATED,
        QueryType.PROPERTY_VALUE,
        QueryType.PROPERTY_VALUE_HISTORY,
    }
)


class TimeOrdering(str, Enum):
    """Order of rows in a time-series frame."""

    ASCENDING = "ASCENDING"
    DESCENDING = "DESCENDING"


class FieldType(str, Enum):
    """Type of a frame column."""

    TIME = "time"
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    OTHER = "other"


class DataSourceRef(BaseModel):
    """Reference to the data source instance a query targets."""

    type: Optional[str] = None
    uid: Optional[str] = None

    model_config = {"frozen": True}


class Query(BaseModel):
    """A single data request within a panel."""

    ref_id: str = Field(..., description="Identifier tying frames to the query")
    query_type: QueryType = Field(..., description="Kind of data requested")
    region: Optional[str] = None
    response_format: Optional[str] = None
    asset_id: Optional[str] = None
    asset_ids: Optional[List[str]] = None
    property_id: Optional[str] = None
    property_alias: Optional[str] = None
    quality: Optional[str] = None
    resolution: Optional[str] = None
    last_observation: Optional[bool] = Field(
        default=None, description="Keep one sample before the window"
    )
    flatten_l4e: Optional[bool] = None
    max_page_aggregations: Optional[int] = None
    datasource: Optional[DataSourceRef] = None
    time_ordering: Optional[TimeOrdering] = None
    load_all_children: Optional[bool] = None
    hierarchy_id: Optional[str] = None
    model_id: Optional[str] = None
    filter: Optional[str] = None
    label: Optional[str] = Field(default=None, description="Display label only")

    model_config = {"frozen": True}


def _as_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class RawTimeRange(BaseModel):
    """Time range as the user expressed it, e.g. ``now-6h`` to ``now``."""

    from_: Union[str, datetime] = Field(..., alias="from")
    to: Union[str, datetime]

    model_config = {"frozen": True, "populate_by_name": True}


class TimeRange(BaseModel):
    """Resolved absolute time range together with its raw expression."""

    from_: datetime = Field(..., alias="from")
    to: datetime
    raw: RawTimeRange

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("from_", "to")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        return _as_aware(value)

    @classmethod
    def relative(
        cls,
        raw_from: str,
        raw_to: str = "now",
        now: Optional[datetime] = None,
    ) -> TimeRange:
        """
        Build a range from relative expressions resolved against ``now``.

        Example:
            >>> TimeRange.relative("now-1h", now=datetime(2024, 5, 28, 21, 0))
        """
        from relative_range_cache.time_range.date_math import parse_relative

        reference = _as_aware(now) if now is not None else datetime.now(timezone.utc)
        return cls(
            from_=parse_relative(raw_from, reference),
            to=parse_relative(raw_to, reference),
            raw=RawTimeRange(from_=raw_from, to=raw_to),
        )

    @classmethod
    def absolute(cls, start: datetime, end: datetime) -> TimeRange:
        """Build a fixed range whose raw form is the instants themselves."""
        return cls(
            from_=start,
            to=end,
            raw=RawTimeRange(from_=_as_aware(start), to=_as_aware(end)),
        )


class FrameField(BaseModel):
    """One typed column of a data frame."""

    name: str
    type: FieldType = FieldType.OTHER
    config: Dict[str, Any] = Field(default_factory=dict)
    labels: Optional[Dict[str, str]] = None
    values: List[Any] = Field(default_factory=list)

    model_config = {"frozen": True}


class DataFrame(BaseModel):
    """Named, ordered collection of equal-length columns."""

    name: Optional[str] = None
    ref_id: Optional[str] = None
    fields: List[FrameField] = Field(default_factory=list)
    meta: Optional[Dict[str, Any]] = None

    model_config = {"frozen": True}

    @property
    def length(self) -> int:
        """Number of rows (length of the first column)."""
        if not self.fields:
            return 0
        return len(self.fields[0].values)

    def get_field(self, name: str) -> Optional[FrameField]:
        for frame_field in self.fields:
            if frame_field.name == name:
                return frame_field
        return None


class LoadingState(str, Enum):
    """State of a (possibly partial) query response."""

    DONE = "Done"
    STREAMING = "Streaming"
    ERROR = "Error"


class DataQueryRequest(BaseModel):
    """A panel refresh: the targets to run over a time range."""

    request_id: str = Field(..., description="Unique request identifier")
    targets: List[Query] = Field(default_factory=list)
    range: TimeRange
    interval: Optional[str] = None
    interval_ms: Optional[int] = None
    max_data_points: Optional[int] = None

    model_config = {"frozen": True}


class DataQueryResponse(BaseModel):
    """Frames produced for a request."""

    data: List[DataFrame] = Field(default_factory=list)
    key: Optional[str] = None
    state: LoadingState = LoadingState.DONE
    error: Optional[str] = None

    model_config = {"frozen": True}
