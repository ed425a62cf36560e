"""Year-range brush over a small per-year strip."""

import math
import time

import structlog

from biodem_charts.application.dto.chart_config import BrushConfig
from biodem_charts.application.services.interaction import HANDLE_WIDTH, BrushController
from biodem_charts.application.services.numeric import as_numeric, get_extent, log_safe, log_safe_extent
from biodem_charts.application.services.scales import YearScale, build_scale
from biodem_charts.application.services.svg_tree import axis, element, fmt, new_svg, translate
from biodem_charts.domain.entities import BrushSelection, Mount
from biodem_charts.domain.enums import ChartKind
from biodem_charts.domain.ports import ClockPort, SchedulerPort
from biodem_charts.infrastructure.observability.metrics import charts_rendered, render_duration_seconds

logger = structlog.get_logger()

AREA_COLOR = "steelblue"
SELECTION_FILL = "#777"


def _area_path(points: list[tuple[float, float]], baseline: float) -> str:
    """Closed area path, broken into segments at missing values."""
    segments: list[list[tuple[float, float]]] = [[]]
    for x, y in points:
        if math.isnan(x) or math.isnan(y):
            if segments[-1]:
                segments.append([])
            continue
        segments[-1].append((x, y))

    parts = []
    for segment in segments:
        if not segment:
            continue
        line = "L".join(f"{fmt(x)},{fmt(y)}" for x, y in segment)
        parts.append(f"M{fmt(segment[0][0])},{fmt(baseline)}L{line}L{fmt(segment[-1][0])},{fmt(baseline)}Z")
    return "".join(parts)


def render_brush(
    mount: Mount,
    config: BrushConfig,
    clock: ClockPort,
    scheduler: SchedulerPort,
) -> BrushController:
    """Clear the mount, draw the strip and install a draggable selection.

    The strip shows precomputed per-year values; this renderer never
    aggregates. A selection outside the year bounds is clamped into them.
    """
    started = time.perf_counter()
    data = sorted(config.data, key=lambda d: config.x(d))
    m = config.margins
    total_width = config.total_width(mount)
    width, height = config.plot_size(total_width)
    svg, g = new_svg(total_width, config.height, m.left, m.top)

    bounds = get_extent(data, config.x, config.x_min, config.x_max)
    y_accessor = log_safe(config.y) if config.y_log else as_numeric(config.y)
    y_min = config.y_min if config.y_min is not None or config.y_log else 0.0
    y_extent = get_extent(data, y_accessor, y_min, config.y_max)
    if config.y_log:
        y_extent = log_safe_extent(y_extent)

    x = YearScale(bounds, (0, width))
    y = build_scale(y_extent, (height, 0), log=config.y_log)

    selection = config.selection or BrushSelection.full(bounds)
    if not selection.within(bounds):
        clamped = selection.clamp(bounds)
        logger.warning(
            "brush_selection_clamped",
            requested=selection.as_tuple(),
            clamped=clamped.as_tuple(),
            bounds=bounds,
        )
        selection = clamped

    points = [(x(as_numeric(config.x)(d)), y(y_accessor(d))) for d in data]
    element(g, "path", {"class": "area", "fill": AREA_COLOR, "d": _area_path(points, height)})
    axis(
        g,
        "bottom",
        [(x(year), str(year)) for year in x.year_ticks(total_width, config.x_tick_gap)],
        (0, width),
        "x axis",
        translate(0, height),
    )

    layer = element(g, "g", {"class": "brush", "fill": "none", "pointer-events": "all"})
    element(layer, "rect", {"class": "overlay", "x": 0, "y": 0, "width": width, "height": height, "cursor": "crosshair"})
    rect = element(
        layer,
        "rect",
        {"class": "selection", "y": 0, "height": height, "fill": SELECTION_FILL, "fill-opacity": 0.3, "cursor": "move"},
    )
    handles = tuple(
        element(layer, "rect", {"class": f"handle handle--{side}", "y": 0, "width": HANDLE_WIDTH, "height": height, "cursor": "ew-resize"})
        for side in ("w", "e")
    )

    controller = BrushController(
        rect,
        handles,
        x,
        selection,
        config.on_brush,
        config.throttle_seconds,
        clock,
        scheduler,
    )
    mount.replace(svg, ChartKind.BRUSH, controller)
    charts_rendered.labels(chart=ChartKind.BRUSH.value).inc()
    render_duration_seconds.labels(chart=ChartKind.BRUSH.value).observe(time.perf_counter() - started)
    logger.debug("render_completed", chart=ChartKind.BRUSH.value, mount=mount.name, selection=selection.as_tuple())
    return controller
