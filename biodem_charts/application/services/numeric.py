"""Numeric parsing, extents and the log-safe accessor."""

import math
from typing import Any, Iterable

from biodem_charts.domain.types import Accessor, Extent, Missing, Number, Parsed

LOG_FLOOR = 1.0

_MISSING_TOKENS = {"", "na", "nan", "null", "none"}


def parse_number(raw: Any) -> Parsed:
    """Coerce a raw cell into ``Number`` or ``Missing``.

    Empty strings, ``NA`` and non-finite values are missing, never zero.
    """
    if raw is None or isinstance(raw, (Number, Missing)):
        return raw if raw is not None else Missing(raw)
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip()
        if text.lower() in _MISSING_TOKENS:
            return Missing(raw)
        try:
            value = float(text)
        except ValueError:
            return Missing(raw)
    if not math.isfinite(value):
        return Missing(raw)
    return Number(value)


def numeric_values(data: Iterable[Any], accessor: Accessor) -> list[float]:
    """Accessor values with missing entries skipped."""
    values: list[float] = []
    for item in data:
        parsed = parse_number(accessor(item))
        if isinstance(parsed, Number):
            values.append(parsed.value)
    return values


def get_extent(
    data: Iterable[Any],
    accessor: Accessor,
    minimum: float | None = None,
    maximum: float | None = None,
) -> Extent:
    """Min and max of the accessor over data; explicit bounds win."""
    values = numeric_values(data, accessor)
    lo = min(values) if values else 0.0
    hi = max(values) if values else 1.0
    if minimum is not None:
        lo = float(minimum)
    if maximum is not None:
        hi = float(maximum)
    return (lo, hi)


def log_safe(accessor: Accessor, floor: float = LOG_FLOOR) -> Accessor:
    """Wrap an accessor so non-positive values land on the log floor.

    Zero-count bars are flattened to the floor rather than dropped.
    Positive values pass through unchanged and missing values stay missing.
    """

    def clamped(item: Any) -> float:
        parsed = parse_number(accessor(item))
        if isinstance(parsed, Missing):
            return math.nan
        return parsed.value if parsed.value > 0 else floor

    return clamped


def log_safe_extent(extent: Extent, floor: float = LOG_FLOOR) -> Extent:
    """Clamp an extent upward so it is a valid, non-degenerate log domain."""
    lo = extent[0] if extent[0] > 0 else floor
    hi = max(lo, extent[1])
    if hi <= lo:
        hi = lo * 10
    return (lo, hi)


def as_numeric(accessor: Accessor) -> Accessor:
    """Wrap an accessor so it yields a float, NaN where missing."""

    def read(item: Any) -> float:
        parsed = parse_number(accessor(item))
        if isinstance(parsed, Missing):
            return math.nan
        return parsed.value

    return read
