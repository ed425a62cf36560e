"""Tabular record loading from comma-delimited text."""

from pathlib import Path
from typing import IO, Iterable

import pandas as pd
import structlog

from biodem_charts.application.services.numeric import parse_number
from biodem_charts.domain.types import Number, as_float

logger = structlog.get_logger()

# V-Dem indicators offered by the country series view
INDICATOR_OPTIONS = [
    "v2x_regime",
    "v2x_freexp_altinf",
    "v2x_frassoc_thick",
    "v2x_rule",
    "v2xcl_dmove",
    "v2xcs_ccsi",
    "v2x_corr",
    "v2x_clphy",
    "e_area",
    "e_regiongeo",
    "e_peaveduc",
    "e_migdppc",
    "e_peginiwi",
    "e_wri_pa",
    "e_population",
    "e_Civil_War",
    "e_miinterc",
    "conf",
]

COLUMN_ALIASES = {"confl": "conf"}


def read_records(
    source: str | Path | IO[str],
    text_columns: Iterable[str] = ("country",),
    year_column: str = "year",
) -> pd.DataFrame:
    """Read records keyed by entity and year.

    Rows whose year does not parse are dropped. Every other column apart
    from ``text_columns`` is coerced to float, with unparseable and empty
    cells becoming NaN rather than zero.
    """
    raw = pd.read_csv(source, dtype=str, keep_default_na=False)
    raw = raw.rename(columns=COLUMN_ALIASES)
    if year_column not in raw.columns:
        raise ValueError(f"Missing year column: {year_column}")

    text_columns = [c for c in text_columns if c in raw.columns]
    years = raw[year_column].map(parse_number)
    keep = years.map(lambda p: isinstance(p, Number) and p.value.is_integer())
    dropped = int((~keep).sum())
    if dropped:
        logger.warning("rows_dropped_unparseable_year", count=dropped)

    frame = raw.loc[keep].copy()
    frame[year_column] = years[keep].map(lambda p: int(p.value)).astype("int64")
    for column in frame.columns:
        if column == year_column or column in text_columns:
            continue
        frame[column] = frame[column].map(lambda v: as_float(parse_number(v))).astype("float64")

    frame = frame.reset_index(drop=True)
    logger.info("records_loaded", rows=len(frame), columns=len(frame.columns), dropped=dropped)
    return frame


def read_indicators(source: str | Path | IO[str]) -> pd.DataFrame:
    """Read the V-Dem indicator table."""
    return read_records(source, text_columns=("country",))


def read_occurrence_counts(source: str | Path | IO[str]) -> pd.DataFrame:
    """Read a per-country, per-year occurrence count table."""
    return read_records(source, text_columns=("country",))


def countries(frame: pd.DataFrame, key: str = "country") -> list[str]:
    """Distinct entity keys in first-seen order."""
    return list(dict.fromkeys(frame[key].tolist()))
