"""Prometheus metrics."""

from prometheus_client import Counter, Histogram

charts_rendered = Counter(
    "charts_rendered_total",
    "Total number of chart renders",
    ["chart"],
)

aggregation_groups_dropped = Counter(
    "aggregation_groups_dropped_total",
    "Total number of aggregated groups excluded as invalid",
    ["reason"],
)

external_queries_failed = Counter(
    "external_queries_failed_total",
    "Total number of failed external queries",
    ["category"],
)

svg_exports = Counter(
    "svg_exports_total",
    "Total number of SVG documents exported",
)

render_duration_seconds = Histogram(
    "render_duration_seconds",
    "Duration of chart renders in seconds",
    ["chart"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1],
)
