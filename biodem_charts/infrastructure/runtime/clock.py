"""Clock and scheduler implementations."""

import asyncio
import time
from typing import Callable

from biodem_charts.domain.ports import ClockPort, SchedulerPort, TimerHandle


class SystemClock(ClockPort):
    """System clock implementation."""

    def monotonic(self) -> float:
        """Get monotonic seconds."""
        return time.monotonic()


class _AsyncioTimer(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self.handle = handle

    def cancel(self) -> None:
        self.handle.cancel()


class AsyncioScheduler(SchedulerPort):
    """Scheduler backed by the running event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Initialize scheduler; the running loop is used when none is given."""
        self.loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Schedule callback on the event loop."""
        loop = self.loop or asyncio.get_running_loop()
        return _AsyncioTimer(loop.call_later(delay, callback))
