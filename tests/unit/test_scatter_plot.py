"""Unit tests for the bubble chart renderer and click dispatch."""

from operator import itemgetter

import pytest

from biodem_charts.application.dto.chart_config import ScatterConfig
from biodem_charts.application.services.color import FETCHING_COLOR, Sequential
from biodem_charts.application.services.scatter_plot import render_scatter_plot
from biodem_charts.application.services.svg_tree import find_all
from biodem_charts.domain.entities import AggregatedGroup, Mount
from biodem_charts.domain.enums import ChartKind


@pytest.fixture
def groups():
    return [
        AggregatedGroup("SWE", {"x": 0.9, "y": 0.8, "records": 100.0, "v2x_regime": 3.0}, count=5),
        AggregatedGroup("NOR", {"x": 0.5, "y": 0.4, "records": 25.0, "v2x_regime": 0.0}, count=5),
    ]


@pytest.fixture
def clicked():
    return []


@pytest.fixture
def config(groups, clicked):
    return ScatterConfig(
        data=groups,
        x=itemgetter("x"),
        y=itemgetter("y"),
        r=itemgetter("records"),
        color_mode=Sequential(),
        color_value=itemgetter("v2x_regime"),
        selected_key="SWE",
        on_click=clicked.append,
        metadata={"SWE": {"name": "Sweden", "region": "Northern Europe"}},
        width=560,
    )


def test_points_drawn_with_selection_last(config):
    """Test that the selected point is drawn last with a distinct stroke."""
    mount = Mount("bubbles")
    render_scatter_plot(mount, config)

    points = find_all(mount.root, "point")
    assert [p.get("data-key") for p in points] == ["NOR", "SWE"]
    assert points[1].get("stroke") == "#000"
    assert "selected" in points[1].get("class")
    assert points[0].get("stroke") == "#fff"
    assert mount.owner == ChartKind.SCATTER


def test_color_and_radius(config):
    """Test color encoding and square-root radius."""
    mount = Mount("bubbles")
    render_scatter_plot(mount, config)
    nor, swe = find_all(mount.root, "point")
    assert swe.get("fill") == "#fde725"
    assert nor.get("fill") == "#440154"
    assert swe.get("r") == "20"
    assert nor.get("r") == "11"


def test_fetching_color(config):
    """Test that stale points use the neutral color."""
    from dataclasses import replace

    mount = Mount("bubbles")
    render_scatter_plot(mount, replace(config, fetching=True))
    assert {p.get("fill") for p in find_all(mount.root, "point")} == {FETCHING_COLOR}


def test_click_invokes_callback(config, clicked):
    """Test that clicking a point reports its key."""
    controller = render_scatter_plot(Mount("bubbles"), config)
    assert controller.click("NOR")
    assert not controller.click("XXX")
    assert clicked == ["NOR"]


def test_click_at_hits_topmost_point(config, clicked):
    """Test pointer hit testing."""
    controller = render_scatter_plot(Mount("bubbles"), config)
    swe = next(p for p in controller.points if p.key == "SWE")
    assert controller.click_at(swe.cx, swe.cy)
    assert not controller.click_at(-100, -100)
    assert clicked == ["SWE"]


def test_tooltip(config):
    """Test tooltip content from the group and its metadata."""
    controller = render_scatter_plot(Mount("bubbles"), config)
    text = controller.hover("SWE")
    assert "<strong>Sweden</strong>" in text
    assert "Region: Northern Europe" in text
    assert "records: 100" in text
    assert controller.hover("NOR").startswith("<strong>NOR</strong>")
    assert controller.hover("XXX") is None


def test_tooltip_not_in_graphic(config):
    """Test that tooltip markup never lands in the graphic."""
    mount = Mount("bubbles")
    render_scatter_plot(mount, config)
    assert not any("Sweden" in (node.text or "") for node in mount.root.iter())


def test_redraw_detaches_previous_controller(config, clicked):
    """Test that a stale controller no longer dispatches clicks."""
    mount = Mount("bubbles")
    old = render_scatter_plot(mount, config)
    render_scatter_plot(mount, config)
    assert not old.click("SWE")
    assert clicked == []


def test_log_axis_clamps_non_positive():
    """Test that a log axis keeps zero-valued points on the floor."""
    groups = [
        AggregatedGroup("SWE", {"x": 100.0, "y": 0.5}, count=1),
        AggregatedGroup("NOR", {"x": 10.0, "y": 0.4}, count=1),
        AggregatedGroup("DNK", {"x": 0.0, "y": 0.3}, count=1),
    ]
    config = ScatterConfig(data=groups, x=itemgetter("x"), y=itemgetter("y"), x_log=True, width=560)
    controller = render_scatter_plot(Mount("bubbles"), config)
    cx = {p.key: p.cx for p in controller.points}
    assert cx["DNK"] == pytest.approx(0)
    assert cx["NOR"] == pytest.approx(200)
    assert cx["SWE"] == pytest.approx(400)
