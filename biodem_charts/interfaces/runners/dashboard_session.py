"""Dashboard state owner: decides when to re-aggregate and re-render."""

from dataclasses import dataclass, field

import pandas as pd
import structlog

from biodem_charts.application.dto.query import AggregationQuery, YearRange
from biodem_charts.application.services.color import color_mode_for
from biodem_charts.application.use_cases.export_chart import run as export_chart
from biodem_charts.application.use_cases.load_occurrence_counts import QueryState
from biodem_charts.application.use_cases.load_occurrence_counts import run as load_occurrence_counts
from biodem_charts.application.use_cases.render_country_series import run as render_country_series
from biodem_charts.application.use_cases.render_year_brush import run as render_year_brush
from biodem_charts.application.use_cases.search_countries import run as search_countries
from biodem_charts.application.use_cases.update_bubble_chart import run as update_bubble_chart
from biodem_charts.domain.entities import BrushSelection, Mount
from biodem_charts.domain.enums import ChartKind, ColorModeKind
from biodem_charts.domain.ports import ClockPort, OccurrenceCountPort, SchedulerPort
from biodem_charts.domain.types import YearCountDict
from biodem_charts.infrastructure.config.settings import Settings
from biodem_charts.infrastructure.export.svg_export import ExportHandle, SvgExporter
from biodem_charts.infrastructure.io.csv_reader import countries
from biodem_charts.infrastructure.runtime.clock import AsyncioScheduler, SystemClock

logger = structlog.get_logger()

# Indicator driving each color mode
COLOR_COLUMNS = {
    ColorModeKind.SEQUENTIAL: "v2x_regime",
    ColorModeKind.CATEGORICAL: "e_regiongeo",
}


@dataclass
class DashboardState:
    """Current selections."""

    country: str
    indicator: str
    year_range: BrushSelection
    x_variable: str = "v2x_rule"
    y_variable: str = "v2x_freexp_altinf"
    x_log: bool = False
    y_log: bool = False
    color_mode: ColorModeKind = ColorModeKind.SEQUENTIAL
    region: int = 0
    selected_key: str | None = None
    fetching: bool = False
    counts: list[YearCountDict] = field(default_factory=list)


class DashboardSession:
    """Holds dashboard state and re-invokes the chart engine on changes."""

    def __init__(
        self,
        settings: Settings,
        indicators: pd.DataFrame,
        occurrences: pd.DataFrame,
        occurrence_counts: OccurrenceCountPort,
        exporter: SvgExporter | None = None,
        clock: ClockPort | None = None,
        scheduler: SchedulerPort | None = None,
        width: float = 960.0,
    ) -> None:
        """Initialize session."""
        self.settings = settings
        self.indicators = indicators
        self.records = indicators.merge(occurrences, on=["country", "year"], how="left")
        self.occurrence_counts = occurrence_counts
        self.exporter = exporter or SvgExporter(settings.export_dir)
        self.clock = clock or SystemClock()
        self.scheduler = scheduler or AsyncioScheduler()
        self.bounds = (settings.year_min, settings.year_max)
        self.mounts = {
            ChartKind.DUAL: Mount("series", width),
            ChartKind.SCATTER: Mount("bubbles", width),
            ChartKind.BRUSH: Mount("years", width),
        }
        self.queries = QueryState()
        self.countries = countries(indicators)
        self.state = DashboardState(
            country=settings.default_country,
            indicator=settings.default_indicator,
            year_range=BrushSelection.full(self.bounds),
        )

    @property
    def errors(self) -> dict[str, dict[str, str]]:
        """Error payloads keyed by query category."""
        return self.queries.errors

    async def start(self) -> None:
        """Draw every chart and fetch counts for the default country."""
        self.render_brush()
        self.render_bubbles()
        await self.select_country(self.state.country)

    async def select_country(self, country: str) -> None:
        """Switch country; bars stay visible but dimmed while fetching."""
        self.state.country = country
        self.state.fetching = True
        self.render_series()

        token = self.queries.latest_token + 1
        result = await load_occurrence_counts(country, self.occurrence_counts, self.queries)
        if not self.queries.is_current(token):
            return
        if result is not None:
            self.state.counts = result
            self.state.fetching = False
        self.render_series()

    def select_indicator(self, indicator: str) -> None:
        self.state.indicator = indicator
        self.render_series()

    def on_brush(self, selection: BrushSelection) -> None:
        """Brush message: new year range for the bubble chart."""
        logger.debug("brush_received", start=selection.start, end=selection.end)
        self.state.year_range = selection
        self.render_bubbles()

    def on_click(self, key: str) -> None:
        """Point click message: toggle the selected country."""
        self.state.selected_key = None if self.state.selected_key == key else key
        self.render_bubbles()

    def set_color_mode(self, kind: ColorModeKind | str) -> None:
        self.state.color_mode = ColorModeKind(kind)
        self.render_bubbles()

    def set_region(self, region: int) -> None:
        self.state.region = region
        self.render_bubbles()

    def set_axes(self, x_variable: str, y_variable: str, x_log: bool = False, y_log: bool = False) -> None:
        self.state.x_variable = x_variable
        self.state.y_variable = y_variable
        self.state.x_log = x_log
        self.state.y_log = y_log
        self.render_bubbles()

    def search(self, text: str) -> list[tuple[str, str]]:
        return search_countries(text, self.countries, self.queries)

    def render_series(self) -> None:
        render_country_series(
            self.mounts[ChartKind.DUAL],
            self.state.counts,
            self.indicators,
            self.state.country,
            self.state.indicator,
            self.settings.year_min,
            self.settings.year_max,
            fetching=self.state.fetching,
        )

    def render_bubbles(self) -> None:
        state = self.state
        query = AggregationQuery(
            x=state.x_variable,
            y=state.y_variable,
            color=COLOR_COLUMNS[state.color_mode],
            year_range=YearRange(start=state.year_range.start, end=state.year_range.end),
            region=state.region,
            x_log=state.x_log,
            y_log=state.y_log,
        )
        update_bubble_chart(
            self.mounts[ChartKind.SCATTER],
            self.records,
            query,
            color_mode_for(state.color_mode),
            selected_key=state.selected_key,
            on_click=self.on_click,
        )

    def render_brush(self) -> None:
        render_year_brush(
            self.mounts[ChartKind.BRUSH],
            self.records,
            self.bounds,
            self.state.year_range,
            self.on_brush,
            self.clock,
            self.scheduler,
            throttle_seconds=self.settings.brush_throttle_seconds,
        )

    def export(self, kind: ChartKind) -> ExportHandle | None:
        return export_chart(self.mounts[kind], self.exporter)
