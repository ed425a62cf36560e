"""Unit tests for aggregation query DTOs."""

import pytest
from pydantic import ValidationError

from biodem_charts.application.dto.query import AggregationQuery, YearRange
from biodem_charts.domain.entities import BrushSelection
from biodem_charts.domain.enums import Statistic


def test_year_range_ordered():
    """Test that a reversed year range is rejected."""
    with pytest.raises(ValidationError):
        YearRange(start=2010, end=2000)
    assert YearRange(start=2000, end=2000).to_selection() == BrushSelection(2000, 2000)


def test_query_from_aliases():
    """Test parsing the camelCase form."""
    query = AggregationQuery.model_validate(
        {
            "xVariable": "v2x_rule",
            "yVariable": "v2x_freexp_altinf",
            "yearRange": {"start": 1990, "end": 2000},
            "xLog": True,
        }
    )
    assert query.x == "v2x_rule"
    assert query.x_log is True
    assert query.year_range.end == 2000
    assert query.region == 0


def test_query_rejects_negative_region():
    """Test region code validation."""
    with pytest.raises(ValidationError):
        AggregationQuery(x="a", y="b", year_range=YearRange(start=1, end=2), region=-1)


def test_resolved_statistics():
    """Test default statistics per dimension."""
    query = AggregationQuery(x="a", y="b", year_range=YearRange(start=1, end=2))
    specs = query.resolved_statistics()
    assert specs["a"].statistic == Statistic.MEDIAN
    assert specs["v2x_regime"].statistic == Statistic.MEDIAN
    assert specs["records"].statistic == Statistic.SUM
    assert specs["records"].skip_missing is True
    assert specs["a"].skip_missing is False


def test_resolved_statistics_override():
    """Test overriding a statistic."""
    query = AggregationQuery(
        x="a",
        y="b",
        year_range=YearRange(start=1, end=2),
        statistics={"a": "mean"},
    )
    assert query.resolved_statistics()["a"].statistic == Statistic.MEAN
