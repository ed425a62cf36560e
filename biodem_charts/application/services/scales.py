"""Scale builder: one-dimensional domain to pixel mappings."""

from __future__ import annotations

import math
from typing import Hashable, Sequence

import numpy as np

from biodem_charts.domain.errors import ScaleDomainError
from biodem_charts.domain.types import Extent

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


def tick_step(start: float, stop: float, count: float) -> float:
    """Nice step (1, 2 or 5 times a power of ten) for about ``count`` ticks."""
    step0 = abs(stop - start) / max(count, 1e-12)
    step1 = 10 ** math.floor(math.log10(step0))
    error = step0 / step1
    if error >= _E10:
        step1 *= 10
    elif error >= _E5:
        step1 *= 5
    elif error >= _E2:
        step1 *= 2
    return step1 if stop >= start else -step1


def tick_values(start: float, stop: float, count: float = 10) -> list[float]:
    """Evenly spaced, human-friendly values covering [start, stop]."""
    if not (math.isfinite(start) and math.isfinite(stop)) or count <= 0:
        return []
    if start == stop:
        return [start]
    lo, hi = min(start, stop), max(start, stop)
    step = abs(tick_step(lo, hi, count))
    first = math.ceil(lo / step - 1e-9)
    last = math.floor(hi / step + 1e-9)
    ticks = [round(float(i) * step, 10) for i in np.arange(first, last + 1)]
    return ticks if stop >= start else ticks[::-1]


class LinearScale:
    """Affine mapping from a numeric domain to a pixel range."""

    def __init__(self, domain: Extent, range_: Extent) -> None:
        self.domain = (float(domain[0]), float(domain[1]))
        self.range = (float(range_[0]), float(range_[1]))

    def _normalize(self, value: float) -> float:
        d0, d1 = self.domain
        if d1 == d0:
            return 0.5
        return (value - d0) / (d1 - d0)

    def __call__(self, value: float) -> float:
        if value is None or math.isnan(value):
            return math.nan
        r0, r1 = self.range
        return r0 + self._normalize(float(value)) * (r1 - r0)

    def invert(self, pixel: float) -> float:
        r0, r1 = self.range
        d0, d1 = self.domain
        if r1 == r0:
            return d0
        return d0 + (pixel - r0) / (r1 - r0) * (d1 - d0)

    def ticks(self, count: float = 10) -> list[float]:
        return tick_values(self.domain[0], self.domain[1], count)


class YearScale(LinearScale):
    """Linear scale over integer years."""

    def year_ticks(self, width: float, tick_gap: float) -> list[int]:
        """Whole-year ticks at roughly one per ``tick_gap`` pixels."""
        count = width / tick_gap if tick_gap > 0 else 10
        years: list[int] = []
        for tick in self.ticks(count):
            year = int(round(tick))
            if year not in years:
                years.append(year)
        return years

    def invert_year(self, pixel: float, rounding: str = "round") -> int:
        """Pixel to whole year (``floor``, ``ceil`` or ``round``)."""
        value = self.invert(pixel)
        if rounding == "floor":
            return math.floor(value + 1e-9)
        if rounding == "ceil":
            return math.ceil(value - 1e-9)
        return int(round(value))


class LogScale:
    """Base-10 logarithmic mapping. The domain must be strictly positive."""

    def __init__(self, domain: Extent, range_: Extent) -> None:
        d0, d1 = float(domain[0]), float(domain[1])
        if not (d0 > 0 and d1 > 0):
            raise ScaleDomainError(f"Log scale domain must be positive, got [{d0}, {d1}]")
        if not d0 < d1:
            raise ScaleDomainError(f"Log scale domain must satisfy min < max, got [{d0}, {d1}]")
        self.domain = (d0, d1)
        self.range = (float(range_[0]), float(range_[1]))
        self._log0 = math.log10(d0)
        self._span = math.log10(d1) - self._log0

    def __call__(self, value: float) -> float:
        if value is None or math.isnan(value) or value <= 0:
            return math.nan
        r0, r1 = self.range
        t = (math.log10(value) - self._log0) / self._span
        return r0 + t * (r1 - r0)

    def ticks(self, count: float = 10) -> list[float]:
        """Powers of ten, with 2-9 multiples when few decades are spanned."""
        d0, d1 = self.domain
        i = math.floor(math.log10(d0))
        j = math.ceil(math.log10(d1))
        multiples = range(1, 10) if j - i < count else (1,)
        ticks = []
        for exponent in range(i, j + 1):
            for k in multiples:
                value = k * 10.0 ** exponent
                if d0 <= value * (1 + 1e-12) and value <= d1 * (1 + 1e-12):
                    ticks.append(value)
        return ticks


class BandScale:
    """Ordinal scale giving each category a band of equal width.

    Padding applies between bands and at both outer edges, so the first
    and last categories get a full band.
    """

    def __init__(
        self,
        domain: Sequence[Hashable],
        range_: Extent,
        padding: float = 0.1,
        align: float = 0.5,
    ) -> None:
        self.domain = list(dict.fromkeys(domain))
        self.range = (float(range_[0]), float(range_[1]))
        self.padding = padding
        self._index = {value: i for i, value in enumerate(self.domain)}
        n = len(self.domain)
        r0, r1 = self.range
        reverse = r1 < r0
        start, stop = (r1, r0) if reverse else (r0, r1)
        self.step = (stop - start) / max(1, n - padding + padding * 2)
        start += (stop - start - self.step * (n - padding)) * align
        self.bandwidth = self.step * (1 - padding)
        self._reverse = reverse
        self._start = start

    def __call__(self, value: Hashable) -> float:
        index = self._index.get(value)
        if index is None:
            return math.nan
        if self._reverse:
            index = len(self.domain) - 1 - index
        return self._start + index * self.step

    def center(self, value: Hashable) -> float:
        return self(value) + self.bandwidth / 2


def year_band_scale(extent: Extent, range_: Extent, padding: float = 0.1) -> BandScale:
    """Band scale over every whole year in [min, max], inclusive."""
    years = range(int(extent[0]), int(extent[1]) + 1)
    return BandScale(years, range_, padding=padding)


def build_scale(domain: Extent, range_: Extent, log: bool = False) -> LinearScale | LogScale:
    """Linear or logarithmic scale for a numeric axis."""
    if log:
        return LogScale(domain, range_)
    return LinearScale(domain, range_)
