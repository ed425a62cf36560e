"""Domain errors."""

from biodem_charts.domain.enums import QueryCategory


class DomainError(Exception):
    """Base domain error."""


class ScaleDomainError(DomainError, ValueError):
    """Scale built over a domain it cannot map."""


class AggregationError(DomainError):
    """Malformed aggregation request."""


class InvalidSelectionError(DomainError, ValueError):
    """Brush selection is reversed or outside the dataset bounds."""


class ExportError(DomainError):
    """Export resource misuse."""


class QueryError(DomainError):
    """External query failed."""

    def __init__(self, category: QueryCategory, message: str) -> None:
        super().__init__(message)
        self.category = category
        self.message = message

    def to_payload(self) -> dict[str, str]:
        """Error payload stored under the query category."""
        return {"code": self.category.value, "message": self.message}
