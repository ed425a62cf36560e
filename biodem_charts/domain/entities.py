"""Domain entities."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any

from biodem_charts.domain.enums import ChartKind, Statistic
from biodem_charts.domain.errors import InvalidSelectionError


@dataclass(frozen=True)
class AggregatedGroup:
    """Statistics computed for one grouping key."""

    key: str
    values: dict[str, float]
    count: int
    valid: bool = True
    reason: str | None = None

    def __getitem__(self, name: str) -> float:
        return self.values[name]


@dataclass(frozen=True)
class StatisticSpec:
    """Statistic over one source column.

    With ``skip_missing`` the statistic ignores missing values instead of
    invalidating the whole group.
    """

    column: str
    statistic: Statistic
    skip_missing: bool = False


@dataclass(frozen=True)
class BrushSelection:
    """Inclusive (start, end) pair in the year domain."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidSelectionError(
                f"Brush selection start {self.start} is after end {self.end}"
            )

    @classmethod
    def full(cls, bounds: tuple[float, float]) -> BrushSelection:
        """Selection covering the whole domain."""
        return cls(int(bounds[0]), int(bounds[1]))

    def within(self, bounds: tuple[float, float]) -> bool:
        """Whether the selection lies inside the declared year bounds."""
        return bounds[0] <= self.start and self.end <= bounds[1]

    def clamp(self, bounds: tuple[float, float]) -> BrushSelection:
        """Clamp both ends into the declared year bounds."""
        lo, hi = int(bounds[0]), int(bounds[1])
        start = min(max(self.start, lo), hi)
        end = min(max(self.end, lo), hi)
        return BrushSelection(start, end)

    def contains(self, year: float) -> bool:
        return self.start <= year <= self.end

    def as_tuple(self) -> tuple[int, int]:
        return (self.start, self.end)


@dataclass(frozen=True)
class Margins:
    """Plot margins in pixels."""

    top: float = 40
    right: float = 80
    bottom: float = 60
    left: float = 80


@dataclass
class Mount:
    """Host surface owning exactly one retained graphic.

    Every render replaces ``root`` wholesale; ``owner`` records which
    renderer drew it and ``interaction`` holds that render's controller.
    """

    name: str
    measured_width: float = 960.0
    root: ET.Element | None = None
    owner: ChartKind | None = None
    interaction: Any = field(default=None, repr=False)
    renders: int = 0

    def replace(self, root: ET.Element, owner: ChartKind, interaction: Any = None) -> None:
        """Discard the previous graphic and install a new one."""
        self.clear()
        self.root = root
        self.owner = owner
        self.interaction = interaction
        self.renders += 1

    def clear(self) -> None:
        """Drop the retained graphic and its controller."""
        if self.interaction is not None and hasattr(self.interaction, "detach"):
            self.interaction.detach()
        self.root = None
        self.owner = None
        self.interaction = None

    @property
    def is_empty(self) -> bool:
        return self.root is None
