"""Unit tests for the brush renderer and drag controller."""

from operator import itemgetter

import pytest

from biodem_charts.application.dto.chart_config import BrushConfig
from biodem_charts.application.services.brush import render_brush
from biodem_charts.application.services.svg_tree import find_all
from biodem_charts.domain.entities import BrushSelection, Mount
from biodem_charts.domain.enums import ChartKind
from biodem_charts.domain.ports import ClockPort, SchedulerPort, TimerHandle


class FakeClock(ClockPort):
    def __init__(self) -> None:
        self.now = 0.0

    def monotonic(self) -> float:
        return self.now


class FakeTimer(TimerHandle):
    def __init__(self, due: float, callback) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler(SchedulerPort):
    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.timers: list[FakeTimer] = []

    def call_later(self, delay, callback) -> TimerHandle:
        timer = FakeTimer(self.clock.now + delay, callback)
        self.timers.append(timer)
        return timer

    def advance(self, seconds: float) -> None:
        self.clock.now += seconds
        for timer in list(self.timers):
            if not timer.cancelled and timer.due <= self.clock.now:
                self.timers.remove(timer)
                timer.callback()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return FakeScheduler(clock)


@pytest.fixture
def reported():
    return []


def make_config(reported, selection=BrushSelection(2002, 2005), throttle_seconds=0.1):
    """Plot area 100px wide over 2000-2010, so one year is 10px."""
    return BrushConfig(
        data=[{"year": year, "total": year - 1999} for year in range(2000, 2011)],
        x=itemgetter("year"),
        y=itemgetter("total"),
        x_min=2000,
        x_max=2010,
        width=260,
        selection=selection,
        on_brush=reported.append,
        throttle_seconds=throttle_seconds,
    )


def test_initial_selection_drawn(reported, clock, scheduler):
    """Test that the selection rectangle covers the initial range."""
    mount = Mount("years")
    controller = render_brush(mount, make_config(reported), clock, scheduler)

    rect = find_all(mount.root, "selection")[0]
    assert rect.get("x") == "20"
    assert rect.get("width") == "30"
    west, east = find_all(mount.root, "handle")
    assert west.get("x") == "17"
    assert east.get("x") == "47"
    assert controller.selection() == BrushSelection(2002, 2005)
    assert find_all(mount.root, "area")[0].get("d").startswith("M")
    assert mount.owner == ChartKind.BRUSH
    assert reported == []


def test_drag_new_selection_is_throttled(reported, clock, scheduler):
    """Test that a drag reports immediately, then delivers the final range."""
    controller = render_brush(Mount("years"), make_config(reported), clock, scheduler)

    controller.press(55)
    controller.move(73)
    assert reported == [BrushSelection(2005, 2008)]

    controller.move(81)
    assert len(reported) == 1

    scheduler.advance(0.2)
    assert reported == [BrushSelection(2005, 2008), BrushSelection(2005, 2009)]

    controller.release()
    assert len(reported) == 2


def test_drag_moves_existing_selection(reported, clock, scheduler):
    """Test grabbing inside the selection moves it, clamped to the edges."""
    controller = render_brush(Mount("years"), make_config(reported), clock, scheduler)

    controller.press(30)
    controller.move(40)
    assert controller.selection() == BrushSelection(2003, 2006)

    controller.move(1000)
    assert controller.selection() == BrushSelection(2007, 2010)
    assert controller.extent == (70, 100)


def test_rectangle_follows_pointer(reported, clock, scheduler):
    """Test that the rectangle updates on every move."""
    mount = Mount("years")
    controller = render_brush(mount, make_config(reported), clock, scheduler)
    controller.press(10)
    controller.move(35)
    rect = find_all(mount.root, "selection")[0]
    assert rect.get("x") == "10"
    assert rect.get("width") == "25"


def test_out_of_bounds_selection_is_clamped(reported, clock, scheduler):
    """Test that a selection outside the bounds is clamped."""
    controller = render_brush(
        Mount("years"), make_config(reported, BrushSelection(1990, 2020)), clock, scheduler
    )
    assert controller.selection() == BrushSelection(2000, 2010)


def test_default_selection_is_full_range(reported, clock, scheduler):
    """Test that no selection means the whole domain."""
    controller = render_brush(Mount("years"), make_config(reported, None), clock, scheduler)
    assert controller.selection() == BrushSelection(2000, 2010)


def test_redraw_cancels_pending_delivery(reported, clock, scheduler):
    """Test that a redraw drops deliveries from the previous brush."""
    mount = Mount("years")
    controller = render_brush(mount, make_config(reported), clock, scheduler)
    controller.press(55)
    controller.move(73)
    controller.move(81)

    render_brush(mount, make_config(reported), clock, scheduler)
    scheduler.advance(1.0)
    assert reported == [BrushSelection(2005, 2008)]


def test_move_without_press_is_ignored(reported, clock, scheduler):
    """Test that pointer moves outside a gesture do nothing."""
    controller = render_brush(Mount("years"), make_config(reported), clock, scheduler)
    controller.move(90)
    controller.release()
    assert reported == []
    assert controller.selection() == BrushSelection(2002, 2005)


def test_release_delivers_final_range_without_timer(reported, clock, scheduler):
    """Test that releasing inside the throttle window delivers the last range at once."""
    controller = render_brush(Mount("years"), make_config(reported, throttle_seconds=10.0), clock, scheduler)

    controller.press(10)
    controller.move(30)
    controller.move(60)
    assert reported == [BrushSelection(2001, 2003)]

    controller.release()
    assert reported == [BrushSelection(2001, 2003), BrushSelection(2001, 2006)]
    assert all(timer.cancelled for timer in scheduler.timers)


def test_release_does_not_repeat_delivered_range(reported, clock, scheduler):
    """Test that a release on an already delivered range reports nothing more."""
    controller = render_brush(Mount("years"), make_config(reported), clock, scheduler)
    controller.press(55)
    controller.move(73)
    controller.move(74)
    controller.release()
    scheduler.advance(1.0)
    assert reported == [BrushSelection(2005, 2008)]


def test_east_handle_resizes_selection(reported, clock, scheduler):
    """Test that dragging the east handle keeps the west edge in place."""
    mount = Mount("years")
    controller = render_brush(mount, make_config(reported), clock, scheduler)

    controller.press(50)
    controller.move(80)
    controller.release()
    scheduler.advance(1.0)

    assert controller.extent == (20, 80)
    assert reported == [BrushSelection(2002, 2008)]
    east = find_all(mount.root, "handle--e")[0]
    assert east.get("x") == "77"


def test_west_handle_resizes_selection(reported, clock, scheduler):
    """Test that dragging the west handle keeps the east edge in place."""
    controller = render_brush(Mount("years"), make_config(reported), clock, scheduler)

    controller.press(21)
    controller.move(0)
    controller.release()

    assert controller.extent == (0, 50)
    assert reported == [BrushSelection(2000, 2005)]


def test_handle_dragged_past_other_edge_flips(reported, clock, scheduler):
    """Test that pulling a handle across the fixed edge swaps the edges."""
    controller = render_brush(Mount("years"), make_config(reported), clock, scheduler)
    controller.press(50)
    controller.move(5)
    assert controller.extent == (5, 20)
    assert controller.selection() == BrushSelection(2000, 2002)
