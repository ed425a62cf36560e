"""Query occurrence counts for a country, guarding against stale responses."""

from dataclasses import dataclass, field

import structlog

from biodem_charts.domain.enums import QueryCategory
from biodem_charts.domain.errors import QueryError
from biodem_charts.domain.ports import OccurrenceCountPort
from biodem_charts.domain.types import YearCountDict
from biodem_charts.infrastructure.io.countries import alpha2_for
from biodem_charts.infrastructure.observability.metrics import external_queries_failed

logger = structlog.get_logger()


@dataclass
class QueryState:
    """Error payloads keyed by query category, plus request tokens."""

    errors: dict[str, dict[str, str]] = field(default_factory=dict)
    latest_token: int = 0

    def issue(self) -> int:
        """Token for a new request; supersedes every earlier one."""
        self.latest_token += 1
        return self.latest_token

    def is_current(self, token: int) -> bool:
        return token == self.latest_token

    def record_failure(self, error: QueryError) -> None:
        self.errors[error.category.value] = error.to_payload()

    def clear(self, category: QueryCategory) -> None:
        self.errors.pop(category.value, None)


async def run(
    alpha3: str,
    counts: OccurrenceCountPort,
    state: QueryState,
) -> list[YearCountDict] | None:
    """Fetch per-year counts for a country.

    Returns None when the query failed or a newer request was issued while
    this one was in flight. Failures are stored under their category.
    """
    token = state.issue()
    try:
        alpha2 = alpha2_for(alpha3)
        if alpha2 is None:
            raise QueryError(QueryCategory.YEAR_FACET, f"Unknown country code: {alpha3}")
        result = await counts.year_facet(alpha2)
    except QueryError as e:
        external_queries_failed.labels(category=e.category.value).inc()
        logger.warning("gbif_query_failed", country=alpha3, category=e.category.value, error=e.message)
        if state.is_current(token):
            state.record_failure(e)
        return None

    if not state.is_current(token):
        logger.info("stale_response_discarded", country=alpha3, token=token, latest=state.latest_token)
        return None

    state.clear(QueryCategory.YEAR_FACET)
    return result
