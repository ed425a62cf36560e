"""GBIF occurrence search client."""

import httpx
import structlog
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from biodem_charts.application.dto.gbif import OccurrenceSearchResponse
from biodem_charts.application.services.numeric import parse_number
from biodem_charts.domain.enums import QueryCategory
from biodem_charts.domain.errors import QueryError
from biodem_charts.domain.ports import OccurrenceCountPort
from biodem_charts.domain.types import JsonValue, Number, YearCountDict
from biodem_charts.infrastructure.config.settings import Settings

logger = structlog.get_logger()

FACET_LIMIT = 1000


class GbifClient(OccurrenceCountPort):
    """Occurrence counts from the GBIF search API."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        """Initialize HTTP client."""
        self.settings = settings
        self.url = settings.gbif_api_url
        self.client = client or httpx.AsyncClient(timeout=settings.gbif_timeout_seconds)

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _search(self, params: dict[str, str | int]) -> dict[str, JsonValue]:
        response = await self.client.get(self.url, params=params)
        response.raise_for_status()
        return response.json()

    async def year_facet(self, alpha2: str) -> list[YearCountDict]:
        """Get occurrence counts per year for a country, sorted by year."""
        params = {"country": alpha2, "facet": "year", "facetLimit": FACET_LIMIT, "limit": 0}
        logger.info("gbif_query", category=QueryCategory.YEAR_FACET.value, country=alpha2)
        try:
            payload = await self._search(params)
            response = OccurrenceSearchResponse(**payload)
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            raise QueryError(
                QueryCategory.YEAR_FACET,
                f"GBIF year facet query failed for {alpha2}: {e}",
            ) from e

        facet = next((f for f in response.facets if f.field.upper() == "YEAR"), None)
        if facet is None:
            return []

        counts: list[YearCountDict] = []
        for bucket in facet.counts:
            year = parse_number(bucket.name)
            if isinstance(year, Number):
                counts.append({"year": int(year.value), "records": bucket.count})
        counts.sort(key=lambda c: c["year"])
        logger.info("gbif_query_completed", country=alpha2, years=len(counts))
        return counts

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
