"""Search engine: query processing, retrieval, scoring and ranking."""

from woofsearch.search.engine import SearchEngine
from woofsearch.search.exceptions import (
    ConfigurationError,
    DataSourceError,
    SearchCapabilityNotImplementedError,
    WoofSearchError,
)
from woofsearch.search.models import (
    FacetBucket,
    HealthResult,
    PartnerResult,
    QuestionResult,
    SearchFilters,
    SearchQuery,
    SearchResponse,
    SearchResult,
    SearchType,
    SortOrder,
)

__all__ = [
    "SearchEngine",
    "ConfigurationError",
    "DataSourceError",
    "SearchCapabilityNotImplementedError",
    "WoofSearchError",
    "FacetBucket",
    "HealthResult",
    "PartnerResult",
    "QuestionResult",
    "SearchFilters",
    "SearchQuery",
    "SearchResponse",
    "SearchResult",
    "SearchType",
    "SortOrder",
]
