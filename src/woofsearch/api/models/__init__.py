"""API request and response models."""

from .search import (
    AdvancedSearchData,
    AdvancedSearchRequest,
    AdvancedSearchResponse,
    ErrorDetail,
    Pagination,
    Performance,
    QueryEcho,
    SearchMetadata,
)

__all__ = [
    "AdvancedSearchData",
    "AdvancedSearchRequest",
    "AdvancedSearchResponse",
    "ErrorDetail",
    "Pagination",
    "Performance",
    "QueryEcho",
    "SearchMetadata",
]
