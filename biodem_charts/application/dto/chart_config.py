"""Chart configuration DTOs, constructed fresh for every render call."""

from __future__ import annotations

from dataclasses import dataclass, field
from operator import attrgetter, itemgetter
from typing import Any, Callable, Mapping, Sequence

from biodem_charts.application.services.color import DEFAULT_BAR_COLOR, ColorMode
from biodem_charts.domain.entities import BrushSelection, Margins, Mount
from biodem_charts.domain.types import Accessor


@dataclass(frozen=True)
class ChartConfig:
    """Accessors, domains and display flags shared by every chart shape."""

    data: Sequence[Any] = ()
    x: Accessor = itemgetter("x")
    y: Accessor = itemgetter("y")
    x_min: float | None = None
    x_max: float | None = None
    y_min: float | None = None
    y_max: float | None = None
    x_log: bool = False
    y_log: bool = False
    # None means use the mount's measured width
    width: float | None = None
    height: float = 400
    margins: Margins = field(default_factory=Margins)
    x_tick_gap: float = 80
    y_tick_count: int = 10
    x_label: str = "Year"
    y_label: str = "Value"
    title: str = "Title"
    fetching: bool = False

    def total_width(self, mount: Mount) -> float:
        return float(self.width) if self.width else float(mount.measured_width)

    def plot_size(self, total_width: float) -> tuple[float, float]:
        """Inner plot width and height after margins."""
        m = self.margins
        return (total_width - m.left - m.right, self.height - m.top - m.bottom)


@dataclass(frozen=True)
class DualChartConfig(ChartConfig):
    """Bars on a log axis with a line on an independent linear axis."""

    y_log: bool = True
    y2: Accessor = itemgetter("y")
    y2_min: float | None = None
    y2_max: float | None = None
    y2_label: str = "Value #2"
    color: Callable[[Any], str] = lambda d: DEFAULT_BAR_COLOR


@dataclass(frozen=True)
class ScatterConfig(ChartConfig):
    """Bubble chart of aggregated groups."""

    key: Accessor = attrgetter("key")
    r: Accessor | None = None
    r_range: tuple[float, float] = (2.0, 20.0)
    color_mode: ColorMode | None = None
    color_value: Accessor | None = None
    selected_key: str | None = None
    on_click: Callable[[str], None] | None = None
    tooltip: Callable[[Any, Mapping[str, Any]], str] | None = None
    metadata: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    x_label: str = "X"
    y_label: str = "Y"
    title: str = ""


@dataclass(frozen=True)
class BrushConfig(ChartConfig):
    """Small per-year strip with a draggable selection."""

    height: float = 100
    margins: Margins = field(default_factory=lambda: Margins(top=10, right=80, bottom=30, left=80))
    selection: BrushSelection | None = None
    on_brush: Callable[[BrushSelection], None] | None = None
    throttle_seconds: float = 0.1
    x_label: str = ""
    y_label: str = ""
    title: str = ""
