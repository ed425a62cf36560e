"""Color encodings for chart marks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Union

from matplotlib import colormaps
from matplotlib.colors import to_hex

from biodem_charts.application.services.numeric import parse_number
from biodem_charts.domain.enums import ColorModeKind
from biodem_charts.domain.types import Extent, Missing

FETCHING_COLOR = "#aaa"
NEUTRAL_COLOR = "#999999"
DEFAULT_BAR_COLOR = "steelblue"

# V-Dem v2x_regime codes
REGIME_NAMES: dict[int, str] = {
    0: "Closed autocracy",
    1: "Electoral autocracy",
    2: "Electoral democracy",
    3: "Liberal democracy",
}

# V-Dem e_regiongeo codes
REGION_NAMES: dict[int, str] = {
    1: "Western Europe",
    2: "Northern Europe",
    3: "Southern Europe",
    4: "Eastern Europe",
    5: "Northern Africa",
    6: "Western Africa",
    7: "Middle Africa",
    8: "Eastern Africa",
    9: "Southern Africa",
    10: "Western Asia",
    11: "Central Asia",
    12: "East Asia",
    13: "South-East Asia",
    14: "South Asia",
    15: "Oceania",
    16: "North America",
    17: "Central America",
    18: "South America",
    19: "Caribbean",
}


def _region_palette() -> dict[int, str]:
    cmap = colormaps["tab20"]
    return {code: to_hex(cmap(code - 1)) for code in REGION_NAMES}


REGION_PALETTE: dict[int, str] = _region_palette()


@dataclass(frozen=True)
class Sequential:
    """Continuous colormap over a fixed code range."""

    domain: Extent = (0.0, 3.0)
    colormap: str = "viridis"
    missing_color: str = NEUTRAL_COLOR
    kind: ColorModeKind = field(default=ColorModeKind.SEQUENTIAL, init=False)

    def color(self, value: Any) -> str:
        parsed = parse_number(value)
        if isinstance(parsed, Missing):
            return self.missing_color
        d0, d1 = self.domain
        t = 0.5 if d1 == d0 else (parsed.value - d0) / (d1 - d0)
        t = min(max(t, 0.0), 1.0)
        return to_hex(colormaps[self.colormap](t))


@dataclass(frozen=True)
class Categorical:
    """Discrete palette keyed by an integer code."""

    palette: Mapping[int, str] = field(default_factory=lambda: dict(REGION_PALETTE))
    default_color: str = NEUTRAL_COLOR
    kind: ColorModeKind = field(default=ColorModeKind.CATEGORICAL, init=False)

    def color(self, value: Any) -> str:
        parsed = parse_number(value)
        if isinstance(parsed, Missing) or not parsed.value.is_integer():
            return self.default_color
        return self.palette.get(int(parsed.value), self.default_color)


ColorMode = Union[Sequential, Categorical]


def color_mode_for(kind: ColorModeKind | str) -> ColorMode:
    """Default color mode for a kind: regime codes or region palette."""
    if ColorModeKind(kind) == ColorModeKind.SEQUENTIAL:
        return Sequential()
    return Categorical()


def color_scale(mode: ColorMode, value: Callable[[Any], Any]) -> Callable[[Any], str]:
    """Bind a color mode to the accessor feeding it."""
    encode = mode.color

    def scale(item: Any) -> str:
        return encode(value(item))

    return scale
