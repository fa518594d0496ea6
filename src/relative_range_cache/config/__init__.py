"""
Configuration Layer.

Provides:
    - RangeCacheConfig: Root Pydantic model
    - ConfigLoader / load_config: YAML loading with inline profile overlays
"""

from relative_range_cache.config.loader import ConfigLoader, load_config
from relative_range_cache.config.models import (
    CacheSettings,
    EvictionConfig,
    LoggingConfig,
    RangeCacheConfig,
)

__all__ = [
    "CacheSettings",
    "ConfigLoader",
    "EvictionConfig",
    "LoggingConfig",
    "RangeCacheConfig",
    "load_config",
]
