"""
Relative Date Math - Resolve ``now``-based Expressions.

Supports ``now`` followed by any chain of signed offsets, e.g. ``now-6h``,
``now-1d+30m``. Calendar units (months, years) and rounding (``/d``) are
not supported.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from relative_range_cache.errors import DateMathError

NOW = "now"

_TERM = re.compile(r"([+-])(\d+)([smhdw])")

# Any ``now``-anchored expression a host may send, including calendar
# units and rounding that ``parse_offset`` itself does not resolve.
_RELATIVE_EXPRESSION = re.compile(r"now(?:[+-]\d+[smhdwMy])*(?:/[smhdwMy])?")

_UNITS = {
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
}


def is_relative_expression(value: object) -> bool:
    """True if ``value`` is ``now`` followed only by offset terms and an optional rounding unit."""
    return isinstance(value, str) and _RELATIVE_EXPRESSION.fullmatch(value.strip()) is not None


def parse_offset(expression: str) -> timedelta:
    """
    Parse the offset part of a relative expression.

    Args:
        expression: Expression such as ``now-15m``

    Returns:
        Signed offset from ``now``

    Raises:
        DateMathError: If the expression is not ``now`` plus valid terms
    """
    text = expression.strip()
    if not text.startswith(NOW):
        raise DateMathError(f"Not a relative expression: {expression!r}", expression)

    rest = text[len(NOW):]
    offset = timedelta(0)
    position = 0
    while position < len(rest):
        match = _TERM.match(rest, position)
        if match is None:
            raise DateMathError(
                f"Invalid term at position {position + len(NOW)} in {expression!r}",
                expression,
            )
        sign, amount, unit = match.groups()
        delta = _UNITS[unit] * int(amount)
        offset = offset + delta if sign == "+" else offset - delta
        position = match.end()

    return offset


def parse_relative(expression: str, now: Optional[datetime] = None) -> datetime:
    """
    Resolve a relative expression to an absolute, timezone-aware instant.

    Args:
        expression: Expression such as ``now`` or ``now-1h``
        now: Reference instant (defaults to the current UTC time)

    Returns:
        The resolved instant
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now + parse_offset(expression)
