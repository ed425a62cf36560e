"""Dual-axis chart: log-scaled bars with an overlaid linear line."""

import math
import time
import xml.etree.ElementTree as ET

import structlog

from biodem_charts.application.dto.chart_config import DualChartConfig
from biodem_charts.application.services.color import FETCHING_COLOR
from biodem_charts.application.services.numeric import as_numeric, get_extent, log_safe, log_safe_extent
from biodem_charts.application.services.scales import LinearScale, YearScale, build_scale, year_band_scale
from biodem_charts.application.services.svg_tree import (
    axis,
    element,
    format_log_tick,
    format_tick,
    label,
    line_path,
    new_svg,
    translate,
)
from biodem_charts.domain.entities import Mount
from biodem_charts.domain.enums import ChartKind
from biodem_charts.infrastructure.observability.metrics import charts_rendered, render_duration_seconds

logger = structlog.get_logger()

LINE_COLOR = "red"
DOT_RADIUS = 2


def render_dual_chart(mount: Mount, config: DualChartConfig) -> ET.Element:
    """Clear the mount and draw bars plus the secondary line.

    Bars use a band scale over every year in the x extent and, when
    ``y_log`` is set, a log y-scale fed through the log-safe accessor, so
    zero counts sit on the log floor. The line and its markers use an
    independent linear y-scale at the band centers.
    """
    started = time.perf_counter()
    data = list(config.data)
    m = config.margins
    total_width = config.total_width(mount)
    width, height = config.plot_size(total_width)
    svg, g = new_svg(total_width, config.height, m.left, m.top)

    y_accessor = log_safe(config.y) if config.y_log else as_numeric(config.y)
    y2_accessor = as_numeric(config.y2)
    x_extent = get_extent(data, config.x, config.x_min, config.x_max)
    y_extent = get_extent(data, y_accessor, config.y_min, config.y_max)
    if config.y_log:
        y_extent = log_safe_extent(y_extent)
    y2_extent = get_extent(data, config.y2, config.y2_min, config.y2_max)

    x = year_band_scale(x_extent, (0, width))
    years = YearScale(x_extent, (0, width))
    y = build_scale(y_extent, (height, 0), log=config.y_log)
    y2 = LinearScale(y2_extent, (height, 0))

    y_format = format_log_tick if config.y_log else format_tick
    axis(
        g,
        "bottom",
        [(x.center(year), str(year)) for year in years.year_ticks(total_width, config.x_tick_gap)],
        (0, width),
        "x axis",
        translate(0, height),
    )
    axis(g, "left", [(y(t), y_format(t)) for t in y.ticks(config.y_tick_count)], (height, 0), "y axis")
    axis(
        g,
        "right",
        [(y2(t), format_tick(t)) for t in y2.ticks(config.y_tick_count)],
        (height, 0),
        "y2 axis",
        translate(width, 0),
    )

    label(g, config.x_label, {"transform": translate(width / 2, height + m.bottom), "dy": "-0.5em"}, "x label")
    label(
        g,
        config.y_label,
        {"transform": "rotate(-90)", "y": -m.left, "x": -(height / 2), "dy": "1em"},
        "y label",
    )
    label(
        g,
        config.y2_label,
        {"transform": "rotate(-90)", "y": width + m.right, "x": -(height / 2), "dy": "-1em"},
        "y2 label",
    )
    label(g, config.title, {"transform": translate(width / 2, 0), "dy": "-1em"}, "title")

    for datum in data:
        value = y_accessor(datum)
        left = x(config.x(datum))
        if math.isnan(value) or math.isnan(left):
            continue
        top = y(value)
        element(
            g,
            "rect",
            {
                "class": "bar",
                "fill": FETCHING_COLOR if config.fetching else config.color(datum),
                "x": left,
                "width": x.bandwidth,
                "y": top,
                "height": height - top,
            },
        )

    points = [(x.center(config.x(d)), y2(y2_accessor(d))) for d in data]
    element(g, "path", {"class": "y2line", "fill": "none", "stroke": LINE_COLOR, "d": line_path(points)})
    for cx, cy in points:
        if math.isnan(cx) or math.isnan(cy):
            continue
        element(g, "circle", {"class": "dot", "cx": cx, "cy": cy, "r": DOT_RADIUS})

    mount.replace(svg, ChartKind.DUAL)
    charts_rendered.labels(chart=ChartKind.DUAL.value).inc()
    render_duration_seconds.labels(chart=ChartKind.DUAL.value).observe(time.perf_counter() - started)
    logger.debug("render_completed", chart=ChartKind.DUAL.value, mount=mount.name, rows=len(data), fetching=config.fetching)
    return svg
