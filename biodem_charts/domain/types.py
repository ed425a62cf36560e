"""Domain types and aliases."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Mapping, TypedDict, Union

# A record is one (entity, year) row; accessors read a value out of it.
Row = Mapping[str, Any]
Accessor = Callable[[Any], Any]
Extent = tuple[float, float]

JsonValue = str | int | float | bool | None | dict | list


@dataclass(frozen=True)
class Number:
    """A parsed numeric value."""

    value: float


@dataclass(frozen=True)
class Missing:
    """An absent or unparseable value. Distinct from zero."""

    raw: object = None


Parsed = Union[Number, Missing]


def as_float(parsed: Parsed) -> float:
    """Collapse a parse result into a float, NaN for Missing."""
    if isinstance(parsed, Number):
        return parsed.value
    return math.nan


class FacetCountDict(TypedDict):
    """One GBIF facet bucket."""

    name: str
    count: int


class YearCountDict(TypedDict):
    """Occurrence count for one year."""

    year: int
    records: int
