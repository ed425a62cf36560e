"""Country code lookups."""

import math

import pycountry

from biodem_charts.application.services.color import REGION_NAMES


def alpha2_for(alpha3: str) -> str | None:
    """ISO alpha-2 code for an alpha-3 code, None when unknown."""
    country = pycountry.countries.get(alpha_3=alpha3.upper())
    return country.alpha_2 if country is not None else None


def country_name(alpha3: str) -> str:
    """Display name for an alpha-3 code, falling back to the code."""
    country = pycountry.countries.get(alpha_3=alpha3.upper())
    return country.name if country is not None else alpha3


def country_metadata(alpha3: str, region_code: float | None = None) -> dict[str, str]:
    """Joined metadata shown in bubble tooltips."""
    metadata = {"name": country_name(alpha3)}
    if region_code is not None and not math.isnan(region_code):
        region = REGION_NAMES.get(int(region_code))
        if region:
            metadata["region"] = region
    return metadata
