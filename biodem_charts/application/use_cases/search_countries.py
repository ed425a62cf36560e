"""Country autocomplete over the loaded country list."""

import structlog

from biodem_charts.application.use_cases.load_occurrence_counts import QueryState
from biodem_charts.domain.enums import QueryCategory
from biodem_charts.domain.errors import QueryError
from biodem_charts.infrastructure.io.countries import country_name
from biodem_charts.infrastructure.observability.metrics import external_queries_failed

logger = structlog.get_logger()


def run(text: str, countries: list[str], state: QueryState, limit: int = 10) -> list[tuple[str, str]]:
    """(code, name) pairs whose code or name contains the text.

    Code prefix matches rank first. Failures are stored under the
    autocomplete category and yield no suggestions.
    """
    if not countries:
        error = QueryError(QueryCategory.AUTOCOMPLETE, "Country list is not loaded")
        external_queries_failed.labels(category=error.category.value).inc()
        logger.warning("autocomplete_failed", error=error.message)
        state.record_failure(error)
        return []

    state.clear(QueryCategory.AUTOCOMPLETE)
    needle = text.strip().lower()
    options = [(code, country_name(code)) for code in countries]
    if not needle:
        return options[:limit]

    prefix = [o for o in options if o[0].lower().startswith(needle)]
    contains = [o for o in options if o not in prefix and (needle in o[0].lower() or needle in o[1].lower())]
    return (prefix + contains)[:limit]
