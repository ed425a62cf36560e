"""Unit tests for country lookups."""

from biodem_charts.infrastructure.io.countries import alpha2_for, country_metadata, country_name


def test_alpha2_for():
    """Test alpha-3 to alpha-2 conversion."""
    assert alpha2_for("SWE") == "SE"
    assert alpha2_for("swe") == "SE"
    assert alpha2_for("XXX") is None


def test_country_name():
    """Test display names with fallback to the code."""
    assert country_name("SWE") == "Sweden"
    assert country_name("XXX") == "XXX"


def test_country_metadata():
    """Test tooltip metadata."""
    assert country_metadata("SWE", 2.0) == {"name": "Sweden", "region": "Northern Europe"}
    assert country_metadata("SWE", float("nan")) == {"name": "Sweden"}
    assert country_metadata("SWE", 99) == {"name": "Sweden"}
