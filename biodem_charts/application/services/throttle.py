"""Leading and trailing edge throttle."""

from __future__ import annotations

from typing import Any, Callable

from biodem_charts.domain.ports import ClockPort, SchedulerPort, TimerHandle

_NOTHING = object()


class Throttle:
    """Invoke ``callback`` at most once per ``interval`` seconds.

    The first call goes through immediately. Calls inside the window only
    replace the pending arguments; when the window closes the latest
    arguments are delivered, so the final state is never lost.
    """

    def __init__(
        self,
        callback: Callable[..., Any],
        interval: float,
        clock: ClockPort,
        scheduler: SchedulerPort,
    ) -> None:
        self.callback = callback
        self.interval = interval
        self.clock = clock
        self.scheduler = scheduler
        self._last_call: float | None = None
        self._pending: Any = _NOTHING
        self._timer: TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not _NOTHING

    def __call__(self, *args: Any) -> None:
        self._pending = args
        if self._timer is not None:
            return
        now = self.clock.monotonic()
        elapsed = None if self._last_call is None else now - self._last_call
        if elapsed is None or elapsed >= self.interval:
            self._invoke(now)
        else:
            self._timer = self.scheduler.call_later(self.interval - elapsed, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        if self.pending:
            self._invoke(self.clock.monotonic())

    def _invoke(self, now: float) -> None:
        args = self._pending
        self._pending = _NOTHING
        self._last_call = now
        self.callback(*args)

    def flush(self) -> None:
        """Deliver pending arguments now."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self.pending:
            self._invoke(self.clock.monotonic())

    def cancel(self) -> None:
        """Drop pending arguments and any scheduled delivery."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending = _NOTHING
