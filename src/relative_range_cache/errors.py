"""
Exception hierarchy for the relative range cache.

Cache misses, non-cacheable ranges and dropped writes are not errors; they
surface as ``None`` or a ``CacheWriteResult``. Exceptions are reserved for
defects and bad input.
"""

from __future__ import annotations

from typing import Optional


class RangeCacheError(Exception):
    """Base class for all relative range cache errors."""


class MalformedFrameError(RangeCacheError):
    """Raised when a time-series frame lacks its time column."""

    def __init__(self, message: str, frame_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.frame_name = frame_name
        self.message = message


class DateMathError(RangeCacheError, ValueError):
    """Raised when a relative time expression cannot be parsed."""

    def __init__(self, message: str, expression: Optional[str] = None) -> None:
        super().__init__(message)
        self.expression = expression
        self.message = message


class ConfigError(RangeCacheError):
    """Raised when a configuration file or profile cannot be loaded."""
