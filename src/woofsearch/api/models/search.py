"""Advanced search API request and response models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from ...search.models import DEFAULT_LIMIT, FacetBucket, SearchResult

MAX_QUERY_LENGTH = 500


class AdvancedSearchRequest(BaseModel):
    """Advanced search request body.

    Query, type and sort are validated by the router so that invalid values
    get the documented error codes instead of a generic 422.
    """

    query: str | None = Field(default=None, description="Search query string (max 500 characters)")
    type: str = Field(
        default="all",
        description="What to search: all, questions, partners, health or content",
    )
    language: str = Field(default="en", description="Query language (e.g. 'en', 'hi')")
    filters: dict[str, Any] = Field(
        default_factory=dict,
        description="Domain filters (category, urgent, type, location, emergency, online, min_rating)",
    )
    sort: str = Field(
        default="relevance",
        description="Result ordering: relevance, date, popularity or rating",
    )
    page: int = Field(default=1, description="Page number (values below 1 are treated as 1)")
    limit: int = Field(
        default=DEFAULT_LIMIT,
        description="Results per page (clamped into 1..100)",
    )
    facets: bool = Field(default=False, description="Include type and category aggregations")
    highlighting: bool = Field(default=True, description="Include matched-term highlights")


class QueryEcho(BaseModel):
    """The query as understood by the server."""

    original: str = Field(..., description="Query as sent by the caller")
    normalized: str | None = Field(default=None, description="Normalized query text")
    type: str = Field(..., description="Search type")
    language: str = Field(..., description="Query language")
    filters: dict[str, Any] = Field(default_factory=dict, description="Filters applied")
    sort: str = Field(..., description="Result ordering")
    page: int = Field(..., description="Effective page number")
    limit: int = Field(..., description="Effective page size")


class Pagination(BaseModel):
    """Pagination summary."""

    page: int = Field(..., description="Current page")
    limit: int = Field(..., description="Page size")
    total: int = Field(..., description="Total number of matching results")
    pages: int = Field(..., description="Total number of pages")
    has_next: bool = Field(..., description="Whether a later page exists")
    has_prev: bool = Field(..., description="Whether an earlier page exists")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        """Derive the page counts for a result total."""
        pages = -(-total // limit)
        return cls(
            page=page,
            limit=limit,
            total=total,
            pages=pages,
            has_next=page < pages,
            has_prev=page > 1,
        )


class Performance(BaseModel):
    """Timing information."""

    search_time_ms: int = Field(..., description="Time spent in the search engine")
    total_time_ms: int = Field(..., description="Total request handling time")
    cached: bool = Field(..., description="Whether the response came from the cache")


class SearchMetadata(BaseModel):
    """Request metadata returned by POST searches."""

    search_id: str = Field(..., description="Unique identifier of this search")
    timestamp: datetime = Field(..., description="When the search was served (UTC)")
    user_id: str | None = Field(default=None, description="Caller user ID, if authenticated")


class AdvancedSearchData(BaseModel):
    """Payload of a successful search."""

    query: QueryEcho
    results: list[SearchResult] = Field(default_factory=list, description="Ranked results for this page")
    pagination: Pagination
    aggregations: dict[str, list[FacetBucket]] | None = Field(
        default=None, description="Facet counts over all matching results"
    )
    suggestions: list[str] = Field(default_factory=list, description="Query suggestions")
    performance: Performance
    metadata: SearchMetadata | None = Field(default=None, description="POST request metadata")


class AdvancedSearchResponse(BaseModel):
    """Successful search envelope."""

    success: bool = True
    data: AdvancedSearchData


class ErrorDetail(BaseModel):
    """Error payload carried in the ``detail`` field of failed requests."""

    success: bool = False
    error: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
