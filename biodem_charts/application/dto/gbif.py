"""GBIF occurrence search response DTOs."""

from pydantic import BaseModel, Field


class FacetCount(BaseModel):
    """One facet bucket."""

    name: str
    count: int


class Facet(BaseModel):
    """Facet over one field."""

    field: str
    counts: list[FacetCount] = Field(default_factory=list)


class OccurrenceSearchResponse(BaseModel):
    """Subset of the occurrence search response used for year facets."""

    count: int = 0
    facets: list[Facet] = Field(default_factory=list)
