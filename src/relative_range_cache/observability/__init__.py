"""
Observability Layer.

Structured logging via structlog plus in-memory counters for cache activity.
"""

from relative_range_cache.observability.observability_manager import (
    ObservabilityManager,
    get_correlation_id,
    set_correlation_id,
)

__all__ = [
    "ObservabilityManager",
    "get_correlation_id",
    "set_correlation_id",
]
