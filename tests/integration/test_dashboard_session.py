"""Integration tests for the dashboard session."""

import io

import pytest

from biodem_charts.application.services.color import FETCHING_COLOR, REGION_PALETTE
from biodem_charts.application.services.svg_tree import find_all
from biodem_charts.domain.entities import BrushSelection
from biodem_charts.domain.enums import ChartKind, ColorModeKind, QueryCategory
from biodem_charts.domain.errors import QueryError
from biodem_charts.domain.ports import ClockPort, OccurrenceCountPort, SchedulerPort, TimerHandle
from biodem_charts.infrastructure.config.settings import Settings
from biodem_charts.infrastructure.io.csv_reader import read_indicators, read_occurrence_counts
from biodem_charts.infrastructure.runtime.clock import AsyncioScheduler, SystemClock
from biodem_charts.interfaces.runners.dashboard_session import DashboardSession

INDICATORS = """country,year,v2x_rule,v2x_freexp_altinf,v2x_regime,e_regiongeo
SWE,2000,0.9,0.95,3,2
SWE,2001,0.9,0.96,3,2
SWE,2002,0.91,0.96,3,2
NOR,2000,0.8,0.9,3,2
NOR,2001,0.8,0.9,3,2
NOR,2002,0.82,0.91,3,2
DEU,2000,0.85,0.9,3,1
DEU,2001,0.85,0.9,3,1
DEU,2002,0.86,0.91,3,1
"""

OCCURRENCES = """country,year,records
SWE,2000,100
SWE,2001,0
SWE,2002,250
NOR,2000,40
NOR,2001,60
NOR,2002,
"""


class FakeCounts(OccurrenceCountPort):
    """Year facets keyed by alpha-2 code; unknown codes fail."""

    def __init__(self, counts):
        self.counts = counts
        self.queries = []

    async def year_facet(self, alpha2):
        self.queries.append(alpha2)
        if alpha2 not in self.counts:
            raise QueryError(QueryCategory.YEAR_FACET, f"no data for {alpha2}")
        return self.counts[alpha2]


class FakeClock(ClockPort):
    def __init__(self) -> None:
        self.now = 0.0

    def monotonic(self) -> float:
        return self.now


class FakeTimer(TimerHandle):
    def __init__(self, callback) -> None:
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler(SchedulerPort):
    def __init__(self) -> None:
        self.timers = []

    def call_later(self, delay, callback) -> TimerHandle:
        timer = FakeTimer(callback)
        self.timers.append(timer)
        return timer

    def run_all(self) -> None:
        timers, self.timers = self.timers, []
        for timer in timers:
            if not timer.cancelled:
                timer.callback()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def port():
    return FakeCounts(
        {
            "SE": [{"year": 2000, "records": 100}, {"year": 2002, "records": 250}],
            "DE": [{"year": 2001, "records": 9}],
        }
    )


@pytest.fixture
def session(tmp_path, port, scheduler):
    settings = Settings(_env_file=None, year_min=2000, year_max=2002, export_dir=tmp_path)
    return DashboardSession(
        settings,
        read_indicators(io.StringIO(INDICATORS)),
        read_occurrence_counts(io.StringIO(OCCURRENCES)),
        port,
        clock=FakeClock(),
        scheduler=scheduler,
    )


def series(session):
    return session.mounts[ChartKind.DUAL].root


def bubble_keys(session):
    return [p.get("data-key") for p in find_all(session.mounts[ChartKind.SCATTER].root, "point")]


@pytest.mark.asyncio
async def test_start_renders_every_chart(session, port):
    """Test that starting draws all three charts for the default country."""
    await session.start()

    assert all(not mount.is_empty for mount in session.mounts.values())
    assert port.queries == ["SE"]
    bars = find_all(series(session), "bar")
    assert len(bars) == 3
    assert FETCHING_COLOR not in {b.get("fill") for b in bars}
    assert find_all(series(session), "title")[0].text == "Sweden"
    assert session.errors == {}


@pytest.mark.asyncio
async def test_bubbles_exclude_groups_without_records(session):
    """Test that a country with no occurrence rows is not plotted."""
    await session.start()
    assert bubble_keys(session) == ["NOR", "SWE"]


@pytest.mark.asyncio
async def test_failed_query_keeps_last_bars_dimmed(session):
    """Test that a failed query keeps the previous bars, drawn as stale."""
    await session.start()
    await session.select_country("NOR")

    assert session.errors["year_facet"]["code"] == "year_facet"
    bars = find_all(series(session), "bar")
    assert len(bars) == 3
    assert {b.get("fill") for b in bars} == {FETCHING_COLOR}

    await session.select_country("DEU")
    assert "year_facet" not in session.errors
    assert FETCHING_COLOR not in {b.get("fill") for b in find_all(series(session), "bar")}


@pytest.mark.asyncio
async def test_brush_drag_updates_bubbles(session, scheduler):
    """Test that dragging the brush re-aggregates the bubble chart."""
    await session.start()
    brush = session.mounts[ChartKind.BRUSH].interaction

    brush.press(brush.width)
    brush.move(350)
    assert session.state.year_range == BrushSelection(2000, 2001)
    title = find_all(session.mounts[ChartKind.SCATTER].root, "title")[0]
    assert title.text == "2000-2001"

    brush.move(100)
    brush.release()
    scheduler.run_all()
    assert session.state.year_range == BrushSelection(2000, 2001)
    assert session.mounts[ChartKind.BRUSH].interaction is brush


@pytest.mark.asyncio
async def test_click_toggles_selection(session):
    """Test that clicking a point selects it and clicking again clears it."""
    await session.start()
    session.mounts[ChartKind.SCATTER].interaction.click("SWE")
    assert session.state.selected_key == "SWE"
    selected = find_all(session.mounts[ChartKind.SCATTER].root, "selected")
    assert [p.get("data-key") for p in selected] == ["SWE"]

    session.mounts[ChartKind.SCATTER].interaction.click("SWE")
    assert session.state.selected_key is None
    assert find_all(session.mounts[ChartKind.SCATTER].root, "selected") == []


@pytest.mark.asyncio
async def test_categorical_color_mode(session):
    """Test switching to region colors."""
    await session.start()
    session.set_color_mode(ColorModeKind.CATEGORICAL)
    fills = {p.get("fill") for p in find_all(session.mounts[ChartKind.SCATTER].root, "point")}
    assert fills == {REGION_PALETTE[2]}


@pytest.mark.asyncio
async def test_region_filter(session):
    """Test limiting bubbles to one region."""
    await session.start()
    session.set_region(1)
    assert bubble_keys(session) == []
    session.set_region(0)
    assert bubble_keys(session) == ["NOR", "SWE"]


@pytest.mark.asyncio
async def test_select_indicator(session):
    """Test switching the secondary series."""
    await session.start()
    session.select_indicator("v2x_rule")
    labels = [node.text for node in find_all(series(session), "label")]
    assert "v2x_rule" in labels


@pytest.mark.asyncio
async def test_export(session, tmp_path):
    """Test exporting the series chart."""
    await session.start()
    handle = session.export(ChartKind.DUAL)
    assert handle.filename == "dual_chart-series.svg"
    assert b"xmlns:xlink" in handle.read_bytes()
    handle.release()


def test_search(session):
    """Test country autocomplete over the loaded countries."""
    assert session.search("nor")[0] == ("NOR", "Norway")


@pytest.mark.asyncio
async def test_session_builds_clock_and_scheduler(tmp_path, port):
    """Test that a session without injected timing ports drags on the event loop."""
    settings = Settings(_env_file=None, year_min=2000, year_max=2002, export_dir=tmp_path)
    session = DashboardSession(
        settings,
        read_indicators(io.StringIO(INDICATORS)),
        read_occurrence_counts(io.StringIO(OCCURRENCES)),
        port,
    )
    assert isinstance(session.clock, SystemClock)
    assert isinstance(session.scheduler, AsyncioScheduler)

    await session.start()
    brush = session.mounts[ChartKind.BRUSH].interaction
    brush.press(brush.width)
    brush.move(350)
    brush.move(100)
    brush.release()
    assert session.state.year_range == brush.selection()
