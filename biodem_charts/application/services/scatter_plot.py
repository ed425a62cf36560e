"""Bubble chart of aggregated groups."""

import math
import time
from typing import Any, Callable

import structlog

from biodem_charts.application.dto.chart_config import ScatterConfig
from biodem_charts.application.services.color import DEFAULT_BAR_COLOR, FETCHING_COLOR, color_scale
from biodem_charts.application.services.interaction import PlottedPoint, ScatterController
from biodem_charts.application.services.numeric import as_numeric, get_extent, log_safe, log_safe_extent
from biodem_charts.application.services.scales import build_scale
from biodem_charts.application.services.svg_tree import (
    axis,
    element,
    format_log_tick,
    format_tick,
    label,
    new_svg,
    translate,
)
from biodem_charts.domain.entities import Mount
from biodem_charts.domain.enums import ChartKind
from biodem_charts.infrastructure.observability.metrics import charts_rendered, render_duration_seconds

logger = structlog.get_logger()

SELECTED_STROKE = "#000"
SELECTED_STROKE_WIDTH = 2
POINT_STROKE = "#fff"
POINT_STROKE_WIDTH = 0.5


def _radius(config: ScatterConfig, data: list) -> Callable[[Any], float]:
    """Square-root radius scale over the magnitude accessor."""
    r_min, r_max = config.r_range
    if config.r is None:
        return lambda d: r_min
    magnitude = as_numeric(config.r)
    top = max((v for v in map(magnitude, data) if not math.isnan(v)), default=0.0)

    def radius(datum) -> float:
        value = magnitude(datum)
        if top <= 0 or math.isnan(value) or value <= 0:
            return r_min
        return r_min + (r_max - r_min) * math.sqrt(value / top)

    return radius


def render_scatter_plot(mount: Mount, config: ScatterConfig) -> ScatterController:
    """Clear the mount and draw one circle per aggregated group.

    Points are drawn in key order with the selected key drawn last and
    stroked. Either axis may be logarithmic; its accessor is then clamped
    to the log floor.
    """
    started = time.perf_counter()
    data = sorted(config.data, key=lambda d: str(config.key(d)))
    m = config.margins
    total_width = config.total_width(mount)
    width, height = config.plot_size(total_width)
    svg, g = new_svg(total_width, config.height, m.left, m.top)

    x_accessor = log_safe(config.x) if config.x_log else as_numeric(config.x)
    y_accessor = log_safe(config.y) if config.y_log else as_numeric(config.y)
    x_extent = get_extent(data, x_accessor, config.x_min, config.x_max)
    y_extent = get_extent(data, y_accessor, config.y_min, config.y_max)
    if config.x_log:
        x_extent = log_safe_extent(x_extent)
    if config.y_log:
        y_extent = log_safe_extent(y_extent)

    x = build_scale(x_extent, (0, width), log=config.x_log)
    y = build_scale(y_extent, (height, 0), log=config.y_log)
    radius = _radius(config, data)
    if config.color_mode is not None and config.color_value is not None:
        fill = color_scale(config.color_mode, config.color_value)
    else:
        fill = lambda d: DEFAULT_BAR_COLOR  # noqa: E731

    x_format = format_log_tick if config.x_log else format_tick
    y_format = format_log_tick if config.y_log else format_tick
    axis(
        g,
        "bottom",
        [(x(t), x_format(t)) for t in x.ticks(max(2, width / config.x_tick_gap))],
        (0, width),
        "x axis",
        translate(0, height),
    )
    axis(g, "left", [(y(t), y_format(t)) for t in y.ticks(config.y_tick_count)], (height, 0), "y axis")
    label(g, config.x_label, {"transform": translate(width / 2, height + m.bottom), "dy": "-0.5em"}, "x label")
    label(
        g,
        config.y_label,
        {"transform": "rotate(-90)", "y": -m.left, "x": -(height / 2), "dy": "1em"},
        "y label",
    )
    if config.title:
        label(g, config.title, {"transform": translate(width / 2, 0), "dy": "-1em"}, "title")

    ordered = [d for d in data if str(config.key(d)) != config.selected_key]
    ordered += [d for d in data if str(config.key(d)) == config.selected_key]

    layer = element(g, "g", {"class": "points"})
    points: list[PlottedPoint] = []
    for datum in ordered:
        key = str(config.key(datum))
        cx, cy = x(x_accessor(datum)), y(y_accessor(datum))
        if math.isnan(cx) or math.isnan(cy):
            continue
        r = radius(datum)
        selected = key == config.selected_key
        element(
            layer,
            "circle",
            {
                "class": "point selected" if selected else "point",
                "data-key": key,
                "cx": cx,
                "cy": cy,
                "r": r,
                "fill": FETCHING_COLOR if config.fetching else fill(datum),
                "fill-opacity": 0.8,
                "stroke": SELECTED_STROKE if selected else POINT_STROKE,
                "stroke-width": SELECTED_STROKE_WIDTH if selected else POINT_STROKE_WIDTH,
            },
        )
        points.append(PlottedPoint(key, cx, cy, r, datum))

    controller = ScatterController(points, config.on_click, config.tooltip, config.metadata)
    mount.replace(svg, ChartKind.SCATTER, controller)
    charts_rendered.labels(chart=ChartKind.SCATTER.value).inc()
    render_duration_seconds.labels(chart=ChartKind.SCATTER.value).observe(time.perf_counter() - started)
    logger.debug("render_completed", chart=ChartKind.SCATTER.value, mount=mount.name, points=len(points))
    return controller
