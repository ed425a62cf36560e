"""Render a country's occurrence counts against one indicator."""

import math
import xml.etree.ElementTree as ET
from operator import itemgetter

import pandas as pd

from biodem_charts.application.dto.chart_config import DualChartConfig
from biodem_charts.application.services.dual_chart import render_dual_chart
from biodem_charts.domain.entities import Mount
from biodem_charts.domain.types import YearCountDict
from biodem_charts.infrastructure.io.countries import country_name


def build_series(
    counts: list[YearCountDict],
    indicators: pd.DataFrame,
    country: str,
    indicator: str,
    year_min: int,
    year_max: int,
) -> list[dict[str, float]]:
    """Per-year rows within the window, sorted by year.

    Years with indicator data but no reported occurrences count as zero.
    """
    records = {c["year"]: c["records"] for c in counts if year_min <= c["year"] <= year_max}
    rows = indicators[(indicators["country"] == country) & indicators["year"].between(year_min, year_max)]
    values = dict(zip(rows["year"].astype(int), rows[indicator])) if indicator in rows else {}

    series = []
    for year in sorted(set(records) | set(values)):
        series.append(
            {
                "year": year,
                "records": records.get(year, 0),
                "indicator": values.get(year, math.nan),
            }
        )
    return series


def run(
    mount: Mount,
    counts: list[YearCountDict],
    indicators: pd.DataFrame,
    country: str,
    indicator: str,
    year_min: int,
    year_max: int,
    fetching: bool = False,
) -> ET.Element:
    """Render the dual chart for one country."""
    config = DualChartConfig(
        data=build_series(counts, indicators, country, indicator, year_min, year_max),
        height=300,
        x_min=year_min,
        x_max=year_max,
        y_min=1,
        x=itemgetter("year"),
        y=itemgetter("records"),
        y2=itemgetter("indicator"),
        y_label="#Records",
        y2_label=indicator,
        title=country_name(country),
        fetching=fetching,
    )
    return render_dual_chart(mount, config)
