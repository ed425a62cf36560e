"""Grouped aggregation of per-year records."""

from __future__ import annotations

import math
from typing import Any, Callable, Iterable, Mapping

import pandas as pd
import structlog

from biodem_charts.application.services.numeric import parse_number
from biodem_charts.domain.entities import AggregatedGroup, BrushSelection, StatisticSpec
from biodem_charts.domain.enums import Statistic
from biodem_charts.domain.errors import AggregationError
from biodem_charts.domain.types import Number
from biodem_charts.infrastructure.observability.metrics import aggregation_groups_dropped

logger = structlog.get_logger()

KeyFunction = str | Callable[[Mapping[str, Any]], Any]
Predicate = Callable[[pd.DataFrame], pd.Series]

MISSING_VALUE = "missing_value"
NAN_STATISTIC = "nan_statistic"
NON_POSITIVE_MAGNITUDE = "non_positive_magnitude"


_STATISTICS: dict[Statistic, Callable[[pd.Series], float]] = {
    Statistic.MEDIAN: lambda values: values.median(),
    Statistic.SUM: lambda values: values.sum(min_count=1),
    Statistic.MEAN: lambda values: values.mean(),
}


def _as_frame(records: pd.DataFrame | Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    if isinstance(records, pd.DataFrame):
        return records
    return pd.DataFrame(list(records))


def _normalize_specs(
    statistics: Mapping[str, Statistic | str | StatisticSpec],
) -> dict[str, StatisticSpec]:
    specs: dict[str, StatisticSpec] = {}
    for name, spec in statistics.items():
        if isinstance(spec, StatisticSpec):
            specs[name] = spec
            continue
        try:
            specs[name] = StatisticSpec(column=name, statistic=Statistic(spec))
        except ValueError:
            raise AggregationError(f"Unknown statistic for {name}: {spec}")
    return specs


def _group_keys(frame: pd.DataFrame, key: KeyFunction) -> pd.Series:
    if isinstance(key, str):
        if key not in frame.columns:
            raise AggregationError(f"Unknown grouping key: {key}")
        return frame[key]
    if frame.empty:
        return pd.Series([], dtype=object, index=frame.index)
    return frame.apply(lambda row: key(row.to_dict()), axis=1)


def _evaluate_group(
    key: Any,
    part: pd.DataFrame,
    specs: dict[str, StatisticSpec],
    required: tuple[str, ...],
    magnitude: str | None,
    positive_magnitude: bool,
) -> AggregatedGroup:
    """Compute every statistic for one partition and decide validity."""
    key = str(key)
    count = len(part)

    for column in required:
        if any(not isinstance(parse_number(v), Number) for v in part[column]):
            return AggregatedGroup(key, {}, count, valid=False, reason=MISSING_VALUE)

    values: dict[str, float] = {}
    for name, spec in specs.items():
        parsed = [parse_number(v) for v in part[spec.column]]
        present = [p.value for p in parsed if isinstance(p, Number)]
        if len(present) < len(parsed) and not spec.skip_missing:
            return AggregatedGroup(key, {}, count, valid=False, reason=MISSING_VALUE)
        result = _STATISTICS[spec.statistic](pd.Series(present, dtype="float64"))
        if result is None or math.isnan(result):
            return AggregatedGroup(key, {}, count, valid=False, reason=NAN_STATISTIC)
        values[name] = float(result)

    if positive_magnitude and magnitude is not None and values[magnitude] <= 0:
        return AggregatedGroup(key, values, count, valid=False, reason=NON_POSITIVE_MAGNITUDE)

    return AggregatedGroup(key, values, count)


def group_records(
    records: pd.DataFrame | Iterable[Mapping[str, Any]],
    key: KeyFunction,
    statistics: Mapping[str, Statistic | str | StatisticSpec],
    where: Predicate | None = None,
    required: Iterable[str] | None = None,
    magnitude: str | None = None,
    positive_magnitude: bool = False,
) -> list[AggregatedGroup]:
    """Partition records by key and evaluate every group, valid or not.

    Groups come back sorted by key.
    """
    specs = _normalize_specs(statistics)
    if magnitude is not None and magnitude not in specs:
        raise AggregationError(f"Magnitude {magnitude} is not an aggregated dimension")

    frame = _as_frame(records)
    if where is not None and not frame.empty:
        frame = frame[where(frame)]

    if required is None:
        required_columns = tuple(s.column for s in specs.values() if not s.skip_missing)
    else:
        required_columns = tuple(required)

    columns = set(required_columns) | {s.column for s in specs.values()}
    unknown = sorted(c for c in columns if c not in frame.columns)
    if unknown and not frame.empty:
        raise AggregationError(f"Unknown dimensions: {unknown}")
    if frame.empty:
        return []

    keys = _group_keys(frame, key)
    return [
        _evaluate_group(group_key, part, specs, required_columns, magnitude, positive_magnitude)
        for group_key, part in frame.groupby(keys, sort=True, dropna=True)
    ]


def aggregate(
    records: pd.DataFrame | Iterable[Mapping[str, Any]],
    key: KeyFunction,
    statistics: Mapping[str, Statistic | str | StatisticSpec],
    where: Predicate | None = None,
    required: Iterable[str] | None = None,
    magnitude: str | None = None,
    positive_magnitude: bool = False,
) -> dict[str, AggregatedGroup]:
    """Aggregate records into valid groups keyed by entity.

    A group is dropped if any record is missing a required dimension, if a
    statistic comes out NaN, or if ``positive_magnitude`` is set and the
    magnitude statistic is zero or less. The mapping carries no ordering
    guarantee; sort by key where order matters.
    """
    groups = group_records(
        records,
        key,
        statistics,
        where=where,
        required=required,
        magnitude=magnitude,
        positive_magnitude=positive_magnitude,
    )

    result: dict[str, AggregatedGroup] = {}
    for group in groups:
        if not group.valid:
            aggregation_groups_dropped.labels(reason=group.reason).inc()
            logger.debug("aggregation_group_dropped", key=group.key, reason=group.reason)
            continue
        result[group.key] = group

    logger.info(
        "aggregation_completed",
        groups=len(groups),
        valid=len(result),
        dropped=len(groups) - len(result),
    )
    return result


def year_region_filter(
    selection: BrushSelection | None = None,
    region: int = 0,
    year_column: str = "year",
    region_column: str = "e_regiongeo",
) -> Predicate:
    """Row predicate for an inclusive year range and optional region code.

    Region 0 means no region filter.
    """

    def predicate(frame: pd.DataFrame) -> pd.Series:
        mask = pd.Series(True, index=frame.index)
        if selection is not None:
            mask &= frame[year_column].between(selection.start, selection.end, inclusive="both")
        if region:
            mask &= frame[region_column] == region
        return mask

    return predicate
