"""Aggregate records for the selected years and redraw the bubble chart."""

from operator import itemgetter
from typing import Any, Callable, Mapping

import pandas as pd

from biodem_charts.application.dto.chart_config import ScatterConfig
from biodem_charts.application.dto.query import AggregationQuery
from biodem_charts.application.services.aggregator import aggregate, year_region_filter
from biodem_charts.application.services.color import ColorMode
from biodem_charts.application.services.interaction import ScatterController
from biodem_charts.application.services.scatter_plot import render_scatter_plot
from biodem_charts.domain.entities import AggregatedGroup, Mount
from biodem_charts.infrastructure.io.countries import country_metadata

REGION_COLUMN = "e_regiongeo"


def group_metadata(groups: Mapping[str, AggregatedGroup], records: pd.DataFrame, key: str) -> dict[str, dict[str, Any]]:
    """Display name and region for each group key."""
    regions: dict[str, float] = {}
    if REGION_COLUMN in records.columns:
        regions = records.groupby(key)[REGION_COLUMN].median().to_dict()
    return {k: country_metadata(k, regions.get(k)) for k in groups}


def run(
    mount: Mount,
    records: pd.DataFrame,
    query: AggregationQuery,
    color_mode: ColorMode,
    selected_key: str | None = None,
    on_click: Callable[[str], None] | None = None,
    fetching: bool = False,
) -> ScatterController:
    """Aggregate, then render. Aggregation completes before drawing starts."""
    groups = aggregate(
        records,
        query.key,
        query.resolved_statistics(),
        where=year_region_filter(query.year_range.to_selection(), query.region),
        magnitude=query.magnitude,
        positive_magnitude=True,
    )

    config = ScatterConfig(
        data=list(groups.values()),
        x=itemgetter(query.x),
        y=itemgetter(query.y),
        r=itemgetter(query.magnitude),
        x_log=query.x_log,
        y_log=query.y_log,
        color_mode=color_mode,
        color_value=itemgetter(query.color),
        selected_key=selected_key,
        on_click=on_click,
        metadata=group_metadata(groups, records, query.key),
        x_label=query.x,
        y_label=query.y,
        title=f"{query.year_range.start}-{query.year_range.end}",
        fetching=fetching,
    )
    return render_scatter_plot(mount, config)
