"""Pointer interaction for rendered charts: brush dragging and point clicks."""

from __future__ import annotations

import html
import math
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, Callable, Mapping

import structlog

from biodem_charts.application.services.scales import YearScale
from biodem_charts.application.services.svg_tree import fmt
from biodem_charts.application.services.throttle import Throttle
from biodem_charts.domain.entities import BrushSelection
from biodem_charts.domain.ports import ClockPort, SchedulerPort

logger = structlog.get_logger()

HANDLE_WIDTH = 6


class BrushController:
    """Drag handling for one rendered brush.

    Pixel positions are in plot coordinates. The rectangle follows the
    pointer on every move; the year range is reported through a throttle.
    """

    def __init__(
        self,
        selection_rect: ET.Element,
        handles: tuple[ET.Element, ET.Element],
        scale: YearScale,
        selection: BrushSelection,
        on_brush: Callable[[BrushSelection], None] | None,
        throttle_seconds: float,
        clock: ClockPort,
        scheduler: SchedulerPort,
    ) -> None:
        self.rect = selection_rect
        self.handles = handles
        self.scale = scale
        self.bounds = (int(scale.domain[0]), int(scale.domain[1]))
        self.extent = (scale(selection.start), scale(selection.end))
        self._throttle = Throttle(self._deliver, throttle_seconds, clock, scheduler) if on_brush else None
        self._on_brush = on_brush
        self._delivered = selection
        self._anchor: float | None = None
        self._grab: float | None = None
        self._draw()

    @property
    def width(self) -> float:
        return max(self.scale.range)

    @property
    def dragging(self) -> bool:
        return self._anchor is not None or self._grab is not None

    def _clamp(self, pixel: float) -> float:
        return min(max(pixel, 0.0), self.width)

    def _edge(self, pixel: float) -> float | None:
        """Opposite edge when the pixel is on a resize handle."""
        x0, x1 = self.extent
        if abs(pixel - x1) <= HANDLE_WIDTH / 2:
            return x0
        if abs(pixel - x0) <= HANDLE_WIDTH / 2:
            return x1
        return None

    def press(self, pixel: float) -> None:
        """Start a gesture: resize from a handle, move the selection if
        grabbed, else draw a new one.
        """
        pixel = self._clamp(pixel)
        x0, x1 = self.extent
        fixed = self._edge(pixel)
        if fixed is not None:
            self._anchor = fixed
        elif x0 < pixel < x1:
            self._grab = pixel
        else:
            self._anchor = pixel
            self.extent = (pixel, pixel)
            self._draw()

    def move(self, pixel: float) -> None:
        """Pointer moved while pressed."""
        pixel = self._clamp(pixel)
        if self._grab is not None:
            x0, x1 = self.extent
            shift = pixel - self._grab
            shift = min(max(shift, -x0), self.width - x1)
            self.extent = (x0 + shift, x1 + shift)
            self._grab = pixel
        elif self._anchor is not None:
            self.extent = (min(self._anchor, pixel), max(self._anchor, pixel))
        else:
            return
        self._draw()
        self._report()

    def release(self) -> None:
        """End the gesture and deliver the final range right away."""
        if not self.dragging:
            return
        self._anchor = None
        self._grab = None
        if self._throttle is None:
            return
        final = self.selection()
        if final == self._delivered:
            self._throttle.cancel()
        else:
            self._throttle(final)
            self._throttle.flush()

    def selection(self) -> BrushSelection:
        """Current extent as whole years inside the bounds."""
        x0, x1 = self.extent
        start = self.scale.invert_year(x0, "floor")
        end = self.scale.invert_year(x1, "ceil")
        lo, hi = self.bounds
        start = min(max(start, lo), hi)
        end = min(max(end, start), hi)
        return BrushSelection(start, end)

    def _report(self) -> None:
        if self._throttle is not None:
            self._throttle(self.selection())

    def _deliver(self, selection: BrushSelection) -> None:
        logger.debug("brush_selection_delivered", start=selection.start, end=selection.end)
        self._delivered = selection
        self._on_brush(selection)

    def _draw(self) -> None:
        x0, x1 = self.extent
        self.rect.set("x", fmt(x0))
        self.rect.set("width", fmt(x1 - x0))
        west, east = self.handles
        west.set("x", fmt(x0 - HANDLE_WIDTH / 2))
        east.set("x", fmt(x1 - HANDLE_WIDTH / 2))

    def detach(self) -> None:
        """Called when the mount is redrawn; pending deliveries are dropped."""
        if self._throttle is not None:
            self._throttle.cancel()


@dataclass(frozen=True)
class PlottedPoint:
    """A point as drawn, in plot coordinates."""

    key: str
    cx: float
    cy: float
    r: float
    datum: Any


def default_tooltip(datum: Any, metadata: Mapping[str, Any]) -> str:
    """Marked-up tooltip for an aggregated group and its joined metadata."""
    name = metadata.get("name", datum.key)
    lines = [f"<strong>{html.escape(str(name))}</strong>"]
    if metadata.get("region"):
        lines.append(f"Region: {html.escape(str(metadata['region']))}")
    for label, value in datum.values.items():
        text = f"{value:,.0f}" if float(value).is_integer() else f"{value:.3g}"
        lines.append(f"{html.escape(label)}: {text}")
    return "<br/>".join(lines)


class ScatterController:
    """Click and hover dispatch for a rendered bubble chart."""

    def __init__(
        self,
        points: list[PlottedPoint],
        on_click: Callable[[str], None] | None,
        tooltip: Callable[[Any, Mapping[str, Any]], str] | None,
        metadata: Mapping[str, Mapping[str, Any]],
    ) -> None:
        self.points = points
        self._by_key = {p.key: p for p in points}
        self._on_click = on_click
        self._tooltip = tooltip or default_tooltip
        self._metadata = metadata

    def hit(self, x: float, y: float) -> str | None:
        """Key of the topmost point under the pointer."""
        for point in reversed(self.points):
            if math.hypot(x - point.cx, y - point.cy) <= point.r:
                return point.key
        return None

    def click(self, key: str) -> bool:
        """Report a click on the point with this key."""
        if key not in self._by_key or self._on_click is None:
            return False
        logger.debug("point_clicked", key=key)
        self._on_click(key)
        return True

    def click_at(self, x: float, y: float) -> bool:
        key = self.hit(x, y)
        return key is not None and self.click(key)

    def hover(self, key: str) -> str | None:
        """Tooltip markup for a point, not part of the graphic."""
        point = self._by_key.get(key)
        if point is None:
            return None
        return self._tooltip(point.datum, self._metadata.get(key, {}))

    def detach(self) -> None:
        self._on_click = None
