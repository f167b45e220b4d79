"""Unit tests for search query, result and response models."""

from datetime import datetime

import pytest
from pydantic import TypeAdapter, ValidationError

from woofsearch.search.models import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    HealthResult,
    PartnerMetadata,
    PartnerResult,
    QuestionResult,
    SearchFilters,
    SearchQuery,
    SearchResponse,
    SearchResult,
    SearchType,
    SortOrder,
)


class TestSearchQuery:
    """Tests for SearchQuery validation."""

    def test_defaults(self):
        """Should apply documented defaults."""
        query = SearchQuery(query="dog")

        assert query.type == SearchType.ALL
        assert query.language == "en"
        assert query.sort == SortOrder.RELEVANCE
        assert query.page == 1
        assert query.limit == DEFAULT_LIMIT
        assert query.filters == SearchFilters()
        assert query.user_id is None

    @pytest.mark.parametrize(
        "limit,expected",
        [(None, 20), (0, 1), (-5, 1), (1, 1), (50, 50), (100, 100), (500, MAX_LIMIT)],
    )
    def test_limit_clamped(self, limit, expected):
        """Should clamp the limit into 1..100."""
        assert SearchQuery(query="dog", limit=limit).limit == expected

    @pytest.mark.parametrize("page,expected", [(None, 1), (0, 1), (-3, 1), (4, 4)])
    def test_page_at_least_one(self, page, expected):
        """Should coerce pages below 1 to 1."""
        assert SearchQuery(query="dog", page=page).page == expected

    def test_none_language_and_filters(self):
        """Should replace missing language and filters with defaults."""
        query = SearchQuery(query="dog", language=None, filters=None)
        assert query.language == "en"
        assert query.filters == SearchFilters()

    def test_invalid_type_rejected(self):
        """Should reject unknown search types."""
        with pytest.raises(ValidationError):
            SearchQuery(query="dog", type="videos")

    def test_invalid_sort_rejected(self):
        """Should reject unknown sort orders."""
        with pytest.raises(ValidationError):
            SearchQuery(query="dog", sort="random")

    def test_frozen(self):
        """Should be immutable."""
        query = SearchQuery(query="dog")
        with pytest.raises(ValidationError):
            query.page = 2


class TestSearchFilters:
    """Tests for SearchFilters."""

    def test_typed_fields(self):
        """Should parse typed filter values."""
        filters = SearchFilters.model_validate({"urgent": "true", "min_rating": "4.5"})
        assert filters.urgent is True
        assert filters.min_rating == 4.5

    def test_unknown_keys_preserved(self):
        """Should keep unknown keys for analytics."""
        filters = SearchFilters.model_validate({"category": "health", "verified": True})
        dumped = filters.model_dump(exclude_none=True)
        assert dumped == {"category": "health", "verified": True}


class TestSearchResult:
    """Tests for the tagged result union."""

    def test_discriminates_on_type(self):
        """Should pick the result class from the type tag."""
        adapter = TypeAdapter(SearchResult)
        result = adapter.validate_python(
            {
                "type": "partner",
                "id": "p1",
                "title": "Happy Paws",
                "metadata": {"partner_type": "vet", "rating": 4.5},
            }
        )
        assert isinstance(result, PartnerResult)
        assert result.rating() == 4.5

    def test_health_type_tag(self):
        """Should use health_info as the health tag."""
        adapter = TypeAdapter(SearchResult)
        result = adapter.validate_python(
            {
                "type": "health_info",
                "id": "h1",
                "title": "Health log",
                "metadata": {"date": "2026-01-01T00:00:00", "dog_name": "Bruno"},
            }
        )
        assert isinstance(result, HealthResult)
        assert result.sort_date().tzinfo is not None

    def test_negative_score_rejected(self):
        """Should reject negative relevance scores."""
        with pytest.raises(ValidationError):
            PartnerResult(
                id="p1",
                title="x",
                relevance_score=-1.0,
                metadata=PartnerMetadata(partner_type="vet"),
            )

    def test_question_popularity_falls_back_to_views(self):
        """Should use views when there are no upvotes."""
        result = QuestionResult.model_validate(
            {
                "id": "q1",
                "title": "x",
                "metadata": {"upvotes": 0, "views": 7, "created_at": datetime(2026, 1, 1)},
            }
        )
        assert result.popularity() == 7


class TestSearchResponse:
    """Tests for SearchResponse."""

    def test_len_and_str(self):
        """Should report page length and a readable summary."""
        response = SearchResponse(total=42, page=2)
        assert len(response) == 0
        assert str(response) == "SearchResponse(count=0, total=42, page=2)"

    def test_json_round_trip_keeps_result_classes(self):
        """Should rebuild typed results from cached JSON."""
        response = SearchResponse(
            results=[
                PartnerResult(id="p1", title="x", metadata=PartnerMetadata(partner_type="vet")),
            ],
            total=1,
        )
        restored = SearchResponse.model_validate_json(response.model_dump_json())
        assert isinstance(restored.results[0], PartnerResult)
        assert restored == response
