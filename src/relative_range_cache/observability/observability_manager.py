"""
Observability Manager - Structured Cache Events and Counters.

Provides:
    - Structured JSON logging via structlog
    - Correlation ID propagation (the request id of the panel refresh)
    - In-memory event and counter recording for cache hits, misses,
      stale entries and dropped writes

Design Notes:
    - Diagnostics for operators only; nothing here changes cache results
    - Correlation ID stored in a context variable
    - Event and metric history is capped at ``history_size`` entries per
      list; counter totals are kept separately and never dropped
"""

from __future__ import annotations

import logging
from collections import deque
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Deque, Dict, List, Optional

import structlog

from relative_range_cache.config.models import LoggingConfig

# Context variable for correlation ID
_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> Optional[str]:
    """Get the correlation ID of the current context."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: Optional[str]) -> None:
    """Set the correlation ID of the current context."""
    _correlation_id.set(correlation_id)


class ObservabilityManager:
    """
    Structured logging and counters for cache activity.

    Events are logged through structlog and also kept in memory so hosts and
    tests can inspect what the cache did.
    """

    def __init__(
        self,
        service_name: str = "relative_range_cache",
        use_json: bool = True,
        log_level: int = logging.INFO,
        history_size: int = 1000,
    ) -> None:
        """
        Initialize observability manager.

        Args:
            service_name: Service name for log entries
            use_json: Render JSON (otherwise console output)
            log_level: Logging level
            history_size: Most recent events and metric entries kept in memory
        """
        self.service_name = service_name
        self.use_json = use_json
        self.log_level = log_level
        self.history_size = history_size
        self._metrics: Dict[str, Deque[Dict[str, Any]]] = {}
        self._counters: Dict[str, float] = {}
        self._events: Deque[Dict[str, Any]] = deque(maxlen=history_size)

        self._configure_structlog()
        self._logger = structlog.get_logger(service_name)

    @classmethod
    def from_config(cls, config: LoggingConfig) -> ObservabilityManager:
        """Create a manager from the logging section of the config."""
        level = getattr(logging, config.level.upper(), logging.INFO)
        return cls(
            service_name=config.service_name,
            use_json=config.use_json,
            log_level=level,
            history_size=config.history_size,
        )

    def _configure_structlog(self) -> None:
        """Configure structlog for structured logging."""
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
        ]

        if self.use_json:
            processors.append(structlog.processors.JSONRenderer())
        else:
            processors.append(structlog.dev.ConsoleRenderer())

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(self.log_level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(),
            cache_logger_on_first_use=False,
        )

    def set_correlation_id(self, correlation_id: Optional[str]) -> None:
        """
        Set correlation ID for current context.

        Args:
            correlation_id: Request id of the panel refresh
        """
        set_correlation_id(correlation_id)
        structlog.contextvars.clear_contextvars()
        if correlation_id is not None:
            structlog.contextvars.bind_contextvars(correlation_id=correlation_id)

    def log_event(
        self,
        event_type: str,
        data: Optional[Dict[str, Any]] = None,
        level: str = "info",
    ) -> None:
        """
        Log a structured event.

        Args:
            event_type: Type of event (e.g. "cache_hit", "cache_write_dropped")
            data: Additional event data
            level: Log level (debug, info, warning, error)
        """
        event_data = {
            "timestamp": datetime.now().isoformat(),
            "correlation_id": get_correlation_id(),
            **(data or {}),
        }

        self._events.append({"event_type": event_type, **event_data})

        log_method = getattr(self._logger, level.lower(), self._logger.info)
        log_method(event_type, **event_data)

    def record_metric(
        self,
        name: str,
        value: float,
        tags: Optional[Dict[str, str]] = None,
        metric_type: str = "gauge",
    ) -> None:
        """
        Record a metric value.

        Args:
            name: Metric name
            value: Metric value
            tags: Additional tags/labels
            metric_type: Type (gauge, counter)
        """
        metric_entry = {
            "timestamp": datetime.now().isoformat(),
            "value": value,
            "tags": tags or {},
            "type": metric_type,
            "correlation_id": get_correlation_id(),
        }
        history = self._metrics.setdefault(name, deque(maxlen=self.history_size))
        history.append(metric_entry)
        if metric_type == "counter":
            self._counters[name] = self._counters.get(name, 0.0) + value

    def record_count(
        self,
        name: str,
        value: int = 1,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        """Record a counter increment."""
        self.record_metric(name, float(value), tags, metric_type="counter")

    def get_count(self, name: str) -> float:
        """Total of all increments recorded under a counter name."""
        return self._counters.get(name, 0.0)

    def get_metrics(self) -> Dict[str, List[Dict[str, Any]]]:
        """Get the retained history of every metric."""
        return {name: list(entries) for name, entries in self._metrics.items()}

    def get_events(self, event_type: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get recorded events, optionally only those of one type."""
        if event_type is None:
            return list(self._events)
        return [e for e in self._events if e["event_type"] == event_type]

    def clear(self) -> None:
        """Clear all recorded metrics and events."""
        self._metrics.clear()
        self._events.clear()
        self._counters.clear()
