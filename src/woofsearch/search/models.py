"""Data models for search queries, results and responses."""

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from woofsearch.models.records import UtcDatetime

DEFAULT_LIMIT = 20
MAX_LIMIT = 100

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class SearchType(str, Enum):
    """Which record collections a query targets."""

    ALL = "all"
    QUESTIONS = "questions"
    PARTNERS = "partners"
    HEALTH = "health"
    CONTENT = "content"


class SortOrder(str, Enum):
    """Ordering applied after relevance ranking."""

    RELEVANCE = "relevance"
    DATE = "date"
    POPULARITY = "popularity"
    RATING = "rating"


class ResultType(str, Enum):
    """Discriminator of a search result."""

    QUESTION = "question"
    PARTNER = "partner"
    HEALTH_INFO = "health_info"
    CONTENT = "content"


class SearchFilters(BaseModel):
    """Domain filters applied by the individual sources.

    Unknown keys are kept so they can be recorded in analytics, but no
    source reads them.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    # Questions
    category: str | None = None
    urgent: bool | None = None

    # Partners
    type: str | None = None
    location: str | None = None
    emergency: bool | None = None
    online: bool | None = None
    min_rating: float | None = None


class SearchQuery(BaseModel):
    """A single search request.

    ``limit`` is clamped into 1..100 and ``page`` is at least 1, whatever the
    caller passes.
    """

    model_config = ConfigDict(frozen=True)

    query: str
    type: SearchType = SearchType.ALL
    language: str = "en"
    filters: SearchFilters = Field(default_factory=SearchFilters)
    sort: SortOrder = SortOrder.RELEVANCE
    page: int = 1
    limit: int = DEFAULT_LIMIT
    user_id: str | None = None

    @field_validator("language", mode="before")
    @classmethod
    def _default_language(cls, value: Any) -> Any:
        return value or "en"

    @field_validator("filters", mode="before")
    @classmethod
    def _default_filters(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("page", mode="before")
    @classmethod
    def _clamp_page(cls, value: Any) -> Any:
        if value is None:
            return 1
        return max(1, int(value))

    @field_validator("limit", mode="before")
    @classmethod
    def _clamp_limit(cls, value: Any) -> Any:
        if value is None:
            return DEFAULT_LIMIT
        return min(max(1, int(value)), MAX_LIMIT)


class QuestionMetadata(BaseModel):
    """Metadata carried by question results."""

    model_config = ConfigDict(frozen=True)

    category: str | None = None
    is_urgent: bool = False
    upvotes: int = 0
    views: int = 0
    answer_count: int = 0
    created_at: UtcDatetime
    author: str | None = None
    tags: list[str] = Field(default_factory=list)


class PartnerMetadata(BaseModel):
    """Metadata carried by partner results."""

    model_config = ConfigDict(frozen=True)

    partner_type: str
    location: str = ""
    rating: float = 0.0
    reviews: int = 0
    verified: bool = False
    emergency: bool = False
    online: bool = False
    specialization: list[str] = Field(default_factory=list)
    experience: int | None = None
    fee_range: str | None = None


class HealthMetadata(BaseModel):
    """Metadata carried by health-log results."""

    model_config = ConfigDict(frozen=True)

    date: UtcDatetime
    dog_name: str
    breed: str | None = None
    activity_level: str | None = None
    appetite: str | None = None
    mood: str | None = None


class _ResultBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    content: str | None = None
    excerpt: str = ""
    relevance_score: float = Field(default=0.0, ge=0.0)
    highlight: dict[str, list[str]] = Field(default_factory=dict)

    def sort_date(self) -> datetime:
        """Timestamp used by the ``date`` sort."""
        return EPOCH

    def popularity(self) -> int:
        """Value used by the ``popularity`` sort."""
        return 0

    def rating(self) -> float:
        """Value used by the ``rating`` sort."""
        return 0.0


class QuestionResult(_ResultBase):
    """A matching community question."""

    type: Literal["question"] = "question"
    metadata: QuestionMetadata

    def sort_date(self) -> datetime:
        return self.metadata.created_at

    def popularity(self) -> int:
        # Falls back to views only when a question has no upvotes at all
        return self.metadata.upvotes or self.metadata.views


class PartnerResult(_ResultBase):
    """A matching partner profile."""

    type: Literal["partner"] = "partner"
    metadata: PartnerMetadata

    def rating(self) -> float:
        return self.metadata.rating


class HealthResult(_ResultBase):
    """A matching health log of the caller's own dogs."""

    type: Literal["health_info"] = "health_info"
    metadata: HealthMetadata

    def sort_date(self) -> datetime:
        return self.metadata.date


SearchResult = Annotated[
    Union[QuestionResult, PartnerResult, HealthResult],
    Field(discriminator="type"),
]


class FacetBucket(BaseModel):
    """One bucket of an aggregation."""

    model_config = ConfigDict(frozen=True)

    key: str
    count: int


class SearchResponse(BaseModel):
    """Search response: one page of ranked results plus facets and suggestions."""

    model_config = ConfigDict(frozen=True)

    results: list[SearchResult] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = DEFAULT_LIMIT
    took: float = 0.0  # milliseconds, always the wall time of this call
    aggregations: dict[str, list[FacetBucket]] = Field(default_factory=dict)
    suggestions: list[str] = Field(default_factory=list)
    cached: bool = False

    def __len__(self) -> int:
        """Number of results on this page."""
        return len(self.results)

    def __str__(self) -> str:
        """String representation."""
        return f"SearchResponse(count={len(self.results)}, total={self.total}, page={self.page})"
