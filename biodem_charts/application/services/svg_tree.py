"""Helpers for building the retained SVG element tree."""

from __future__ import annotations

import math
import xml.etree.ElementTree as ET
from typing import Any, Iterable, Sequence

TICK_SIZE = 6
TICK_PADDING = 3

_SI_PREFIXES = ((1e12, "T"), (1e9, "G"), (1e6, "M"), (1e3, "k"))


def fmt(value: Any) -> str:
    """Attribute text for a number, trimmed to three decimals."""
    if isinstance(value, str):
        return value
    number = float(value)
    if number.is_integer():
        return str(int(number))
    text = f"{number:.3f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def translate(x: float, y: float) -> str:
    return f"translate({fmt(x)},{fmt(y)})"


def element(parent: ET.Element | None, tag: str, attrs: dict[str, Any] | None = None, text: str | None = None) -> ET.Element:
    """Create an element (optionally under a parent) with formatted attributes."""
    formatted = {k: fmt(v) for k, v in (attrs or {}).items() if v is not None}
    node = ET.Element(tag, formatted) if parent is None else ET.SubElement(parent, tag, formatted)
    if text is not None:
        node.text = text
    return node


def new_svg(width: float, height: float, margin_left: float, margin_top: float) -> tuple[ET.Element, ET.Element]:
    """Root ``svg`` plus the translated plot group."""
    svg = element(None, "svg", {"width": width, "height": height})
    g = element(svg, "g", {"transform": translate(margin_left, margin_top)})
    return svg, g


def format_tick(value: float) -> str:
    """Plain tick label; integers without a decimal part."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def format_si(value: float) -> str:
    """SI-prefixed tick label, e.g. 1k, 10M."""
    for threshold, suffix in _SI_PREFIXES:
        if abs(value) >= threshold:
            return f"{value / threshold:g}{suffix}"
    return format_tick(value)


def format_log_tick(value: float) -> str:
    """Label powers of ten only; intermediate ticks stay unlabeled."""
    exponent = math.log10(value)
    if abs(exponent - round(exponent)) > 1e-9:
        return ""
    return format_si(value)


def axis(
    parent: ET.Element,
    orient: str,
    ticks: Iterable[tuple[float, str]],
    range_: Sequence[float],
    css_class: str,
    transform: str | None = None,
) -> ET.Element:
    """Draw an axis: a domain path and one group per tick.

    ``orient`` is ``bottom``, ``left`` or ``right``.
    """
    g = element(parent, "g", {"class": css_class, "transform": transform})
    r0, r1 = min(range_), max(range_)
    sign = 1 if orient in ("bottom", "right") else -1
    outer = sign * TICK_SIZE
    if orient == "bottom":
        d = f"M{fmt(r0)},{outer}V0H{fmt(r1)}V{outer}"
    else:
        d = f"M{outer},{fmt(r0)}H0V{fmt(r1)}H{outer}"
    element(g, "path", {"class": "domain", "stroke": "currentColor", "fill": "none", "d": d})

    offset = sign * (TICK_SIZE + TICK_PADDING)
    for position, label in ticks:
        if position is None or math.isnan(position):
            continue
        if orient == "bottom":
            tick = element(g, "g", {"class": "tick", "transform": translate(position, 0)})
            element(tick, "line", {"stroke": "currentColor", "y2": outer})
            element(tick, "text", {"fill": "currentColor", "y": offset, "dy": "0.71em", "text-anchor": "middle"}, label)
        else:
            tick = element(g, "g", {"class": "tick", "transform": translate(0, position)})
            element(tick, "line", {"stroke": "currentColor", "x2": outer})
            anchor = "start" if orient == "right" else "end"
            element(tick, "text", {"fill": "currentColor", "x": offset, "dy": "0.32em", "text-anchor": anchor}, label)
    return g


def line_path(points: Iterable[tuple[float, float]]) -> str:
    """Polyline path data, broken where a point is missing."""
    parts: list[str] = []
    pen_down = False
    for x, y in points:
        if math.isnan(x) or math.isnan(y):
            pen_down = False
            continue
        parts.append(f"{'L' if pen_down else 'M'}{fmt(x)},{fmt(y)}")
        pen_down = True
    return "".join(parts)


def label(parent: ET.Element, text: str, attrs: dict[str, Any], css_class: str | None = None) -> ET.Element:
    """Centered text label."""
    merged = {"class": css_class, "text-anchor": "middle", **attrs}
    return element(parent, "text", merged, text)


def find_all(root: ET.Element, css_class: str) -> list[ET.Element]:
    """Elements whose class list contains ``css_class``."""
    return [node for node in root.iter() if css_class in node.get("class", "").split()]


def signature(root: ET.Element) -> list[tuple[str, tuple[tuple[str, str], ...], str | None]]:
    """Flattened (tag, attributes, text) listing, for equivalence checks."""
    return [(node.tag, tuple(sorted(node.attrib.items())), node.text) for node in root.iter()]
