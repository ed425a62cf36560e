"""Ports (interfaces) for infrastructure adapters."""

from abc import ABC, abstractmethod
from typing import Callable

from biodem_charts.domain.types import YearCountDict


class ClockPort(ABC):
    """Port for time operations."""

    @abstractmethod
    def monotonic(self) -> float:
        """Seconds from an arbitrary, monotonically increasing origin."""


class TimerHandle(ABC):
    """Cancellable scheduled call."""

    @abstractmethod
    def cancel(self) -> None:
        """Cancel the call if it has not run yet."""


class SchedulerPort(ABC):
    """Port for deferring a callback."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback after delay seconds."""


class OccurrenceCountPort(ABC):
    """Port for querying biodiversity record counts."""

    @abstractmethod
    async def year_facet(self, alpha2: str) -> list[YearCountDict]:
        """Get record counts per year for a country."""
