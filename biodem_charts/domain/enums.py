"""Domain enums for statistics, chart kinds and query categories."""

from enum import Enum


class Statistic(str, Enum):
    """Per-group statistic."""

    MEDIAN = "median"
    SUM = "sum"
    MEAN = "mean"


class ChartKind(str, Enum):
    """Renderer that owns a mount."""

    DUAL = "dual_chart"
    SCATTER = "scatter_plot"
    BRUSH = "brush"


class QueryCategory(str, Enum):
    """External query category, used as the error code."""

    YEAR_FACET = "year_facet"
    AUTOCOMPLETE = "autocomplete"
    INDICATORS = "indicators"


class ColorModeKind(str, Enum):
    """Color encoding strategy for the bubble chart."""

    SEQUENTIAL = "sequential"
    CATEGORICAL = "categorical"
