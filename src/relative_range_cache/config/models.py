"""
Configuration Models - Pydantic Models for Type-Safe Config.

All configuration is validated at load time using Pydantic.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

from pydantic import BaseModel, Field


class CacheSettings(BaseModel):
    """Behavior of the relative range cache."""

    enabled: bool = True
    refresh_window_minutes: int = Field(default=15, ge=1)
    time_field_name: str = Field(default="time", min_length=1)
    log_access: bool = False

    @property
    def refresh_window(self) -> timedelta:
        return timedelta(minutes=self.refresh_window_minutes)


class EvictionConfig(BaseModel):
    """Opt-in eviction; both limits unset means entries are never evicted."""

    max_entries: Optional[int] = Field(default=None, ge=1)
    ttl_seconds: Optional[float] = Field(default=None, gt=0)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO")
    use_json: bool = True
    service_name: str = Field(default="relative_range_cache")
    history_size: int = Field(default=1000, ge=1)


class RangeCacheConfig(BaseModel):
    """Root configuration object."""

    version: str = "1.0"
    cache: CacheSettings = Field(default_factory=CacheSettings)
    eviction: EvictionConfig = Field(default_factory=EvictionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"populate_by_name": True}
