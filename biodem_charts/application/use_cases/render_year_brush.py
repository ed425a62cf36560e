"""Render the per-year totals strip with a year-range brush."""

from operator import itemgetter
from typing import Callable

import pandas as pd

from biodem_charts.application.dto.chart_config import BrushConfig
from biodem_charts.application.services.brush import render_brush
from biodem_charts.application.services.interaction import BrushController
from biodem_charts.domain.entities import BrushSelection, Mount
from biodem_charts.domain.ports import ClockPort, SchedulerPort


def yearly_totals(records: pd.DataFrame, value_column: str = "records", year_column: str = "year") -> list[dict[str, float]]:
    """Sum of a value per year, missing values skipped."""
    if records.empty:
        return []
    totals = records.groupby(year_column)[value_column].sum(min_count=1)
    return [{"year": int(year), "total": float(total)} for year, total in totals.items()]


def run(
    mount: Mount,
    records: pd.DataFrame,
    bounds: tuple[int, int],
    selection: BrushSelection | None,
    on_brush: Callable[[BrushSelection], None] | None,
    clock: ClockPort,
    scheduler: SchedulerPort,
    throttle_seconds: float = 0.1,
) -> BrushController:
    """Render the brush strip over the declared year bounds."""
    config = BrushConfig(
        data=[t for t in yearly_totals(records) if bounds[0] <= t["year"] <= bounds[1]],
        x=itemgetter("year"),
        y=itemgetter("total"),
        x_min=bounds[0],
        x_max=bounds[1],
        selection=selection,
        on_brush=on_brush,
        throttle_seconds=throttle_seconds,
    )
    return render_brush(mount, config, clock, scheduler)
