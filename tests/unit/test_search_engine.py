"""Unit tests for the multi-source search engine."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from woofsearch.models.records import HealthLogRecord, PartnerRecord, QuestionRecord
from woofsearch.search.cache import InMemorySearchCache
from woofsearch.search.engine import SearchEngine
from woofsearch.search.exceptions import SearchCapabilityNotImplementedError
from woofsearch.search.language import LanguageResources
from woofsearch.search.models import SearchQuery, SearchResponse, SearchType
from woofsearch.storage.memory import (
    InMemoryAnalyticsSink,
    InMemoryHealthLogStore,
    InMemoryPartnerStore,
    InMemoryQuestionStore,
)


@pytest.fixture
def question_store():
    """Create an empty question store."""
    return InMemoryQuestionStore()


@pytest.fixture
def partner_store():
    """Create an empty partner store."""
    return InMemoryPartnerStore()


@pytest.fixture
def health_log_store():
    """Create an empty health log store."""
    return InMemoryHealthLogStore()


@pytest.fixture
def analytics_sink():
    """Create an empty analytics sink."""
    return InMemoryAnalyticsSink()


@pytest.fixture
def cache():
    """Create an empty response cache."""
    return InMemorySearchCache()


@pytest.fixture
def engine(question_store, partner_store, health_log_store, analytics_sink, cache):
    """Create a search engine over the in-memory stores with the bundled language data."""
    return SearchEngine(
        question_store=question_store,
        partner_store=partner_store,
        health_log_store=health_log_store,
        analytics_sink=analytics_sink,
        cache=cache,
        language_resources=LanguageResources.load(),
    )


@pytest.fixture
def uncached_engine(question_store, partner_store, health_log_store, analytics_sink):
    """Create a search engine whose cache never hits."""
    miss_cache = AsyncMock()
    miss_cache.key_for = lambda query: "key"
    miss_cache.get.return_value = None
    return SearchEngine(
        question_store=question_store,
        partner_store=partner_store,
        health_log_store=health_log_store,
        analytics_sink=analytics_sink,
        cache=miss_cache,
    )


def add_questions(store, count: int, title: str = "Vaccination question") -> None:
    for i in range(count):
        store.add(
            QuestionRecord(
                id=f"q{i:03d}",
                title=f"{title} {i}",
                upvotes=i,
                created_at=datetime(2026, 1, 1, tzinfo=UTC) + timedelta(hours=i),
            )
        )


class TestSearch:
    """Tests for SearchEngine.search."""

    @pytest.mark.asyncio
    async def test_cross_type_query(self, engine, question_store, partner_store):
        """Should merge questions and partners and rank the title match first."""
        question_store.add(
            QuestionRecord(id="q1", title="Vaccination for puppies", is_urgent=True,
                           category="health")
        )
        partner_store.add(
            PartnerRecord(id="p1", name="Dr. Rao", status="approved", verified=True,
                          specialization=["vaccination"])
        )

        response = await engine.search(
            SearchQuery(query="vaccination", type="all", language="en")
        )

        assert [r.id for r in response.results] == ["q1", "p1"]
        assert response.results[0].relevance_score > response.results[1].relevance_score
        assert [(b.key, b.count) for b in response.aggregations["types"]] == [
            ("question", 1),
            ("partner", 1),
        ]
        assert [(b.key, b.count) for b in response.aggregations["categories"]] == [("health", 1)]
        assert response.total == 2

    @pytest.mark.asyncio
    async def test_idempotent(self, uncached_engine, question_store, partner_store):
        """Should return identical results, totals and facets for repeated searches."""
        add_questions(question_store, 12)
        partner_store.add(
            PartnerRecord(id="p1", name="Vaccination Clinic", status="approved", verified=True)
        )
        query = SearchQuery(query="vaccination", limit=5, page=2)

        first = await uncached_engine.search(query)
        second = await uncached_engine.search(query)

        assert first.results == second.results
        assert first.total == second.total
        assert first.aggregations == second.aggregations

    @pytest.mark.asyncio
    async def test_limit_clamped_to_100(self, engine, question_store):
        """Should never return more than 100 results per page."""
        add_questions(question_store, 150)

        response = await engine.search(SearchQuery(query="vaccination", limit=500))

        assert response.limit == 100
        assert len(response.results) == 100
        assert response.total == 150

    @pytest.mark.asyncio
    async def test_limit_below_one_becomes_one(self, engine, question_store):
        """Should return a single result for a non-positive limit."""
        add_questions(question_store, 3)

        response = await engine.search(SearchQuery(query="vaccination", limit=0))

        assert response.limit == 1
        assert len(response.results) == 1

    @pytest.mark.asyncio
    async def test_pagination_boundary(self, engine, question_store):
        """Should split 25 results into pages of 10, 10, 5 and 0."""
        add_questions(question_store, 25)

        pages = [
            await engine.search(SearchQuery(query="vaccination", limit=10, page=page))
            for page in (1, 2, 3, 4)
        ]

        assert [len(p.results) for p in pages] == [10, 10, 5, 0]
        assert all(p.total == 25 for p in pages)

        seen = [r.id for p in pages for r in p.results]
        assert len(seen) == len(set(seen)) == 25

        full = await engine.search(SearchQuery(query="vaccination", limit=100))
        assert seen == [r.id for r in full.results]

    @pytest.mark.asyncio
    async def test_health_results_only_for_owner(self, engine, health_log_store):
        """Should only return the caller's own health logs."""
        today = datetime.now(UTC)
        health_log_store.add(
            HealthLogRecord(id="mine", user_id="u1", dog_name="Bruno", log_date=today,
                            notes="Vaccination booster")
        )
        health_log_store.add(
            HealthLogRecord(id="theirs", user_id="u2", dog_name="Max", log_date=today,
                            notes="Vaccination booster")
        )

        mine = await engine.search(SearchQuery(query="vaccination", type="health", user_id="u1"))
        anonymous = await engine.search(SearchQuery(query="vaccination", type="health"))

        assert [r.id for r in mine.results] == ["mine"]
        assert mine.results[0].type == "health_info"
        assert anonymous.results == []
        assert anonymous.total == 0

    @pytest.mark.asyncio
    async def test_hindi_transliteration(self, engine, question_store):
        """Should find Latin-script questions for a Devanagari query."""
        question_store.add(QuestionRecord(id="q1", title="My kutta will not eat", language="hi"))
        question_store.add(QuestionRecord(id="q2", title="Best dog toys", language="hi"))
        question_store.add(QuestionRecord(id="q3", title="Cat litter", language="hi"))

        response = await engine.search(
            SearchQuery(query="कुत्ता", language="hi", type="questions")
        )

        assert {r.id for r in response.results} == {"q1", "q2"}

    @pytest.mark.asyncio
    async def test_empty_query(self, engine, question_store):
        """Should not fail and return no suggestions for a too-short query."""
        add_questions(question_store, 3)

        response = await engine.search(SearchQuery(query="a"))

        assert response.suggestions == []
        assert response.total == 3

    @pytest.mark.asyncio
    async def test_content_type_is_empty(self, engine, question_store):
        """Should return no results for the content type."""
        add_questions(question_store, 3)

        response = await engine.search(SearchQuery(query="vaccination", type=SearchType.CONTENT))

        assert response.total == 0
        assert response.results == []

    @pytest.mark.asyncio
    async def test_suggestions_included(self, engine):
        """Should add predefined suggestions that contain the query."""
        response = await engine.search(SearchQuery(query="dog"))

        assert "dog health" in response.suggestions
        assert len(response.suggestions) <= 8

    @pytest.mark.asyncio
    async def test_failing_source_degrades_to_empty(self, question_store, analytics_sink, cache):
        """Should keep other sources' results when one source fails."""
        add_questions(question_store, 2)
        failing_partners = AsyncMock()
        failing_partners.find_partners.side_effect = RuntimeError("partner store down")

        engine = SearchEngine(
            question_store=question_store,
            partner_store=failing_partners,
            health_log_store=InMemoryHealthLogStore(),
            analytics_sink=analytics_sink,
            cache=cache,
        )

        response = await engine.search(SearchQuery(query="vaccination"))

        assert response.total == 2
        assert all(r.type == "question" for r in response.results)


class TestCacheAndAnalytics:
    """Tests for caching and analytics side effects."""

    @pytest.mark.asyncio
    async def test_cache_hit_recomputes_took(self, engine, question_store, analytics_sink):
        """Should serve repeated searches from the cache."""
        add_questions(question_store, 3)
        query = SearchQuery(query="vaccination")

        first = await engine.search(query)
        question_store.add(QuestionRecord(id="new", title="Vaccination news"))
        second = await engine.search(query)

        assert first.cached is False
        assert second.cached is True
        assert second.results == first.results
        assert second.total == 3
        assert len(analytics_sink.records) == 1

    @pytest.mark.asyncio
    async def test_caller_mutation_does_not_change_cache(self, engine, question_store):
        """Should keep cached entries intact when a caller mutates its response."""
        question_store.add(QuestionRecord(id="q1", title="Vaccination schedule"))
        query = SearchQuery(query="vaccination", type="questions")

        first = await engine.search(query)
        first.results[0].highlight.clear()
        first.results.clear()
        first.suggestions.append("mutated")
        first.aggregations.clear()

        second = await engine.search(query)
        second.results.clear()
        third = await engine.search(query)

        assert third.cached is True
        assert third.total == 1
        assert [r.id for r in third.results] == ["q1"]
        assert third.results[0].highlight == {"vaccination": ["Vaccination"]}
        assert "mutated" not in third.suggestions
        assert [(b.key, b.count) for b in third.aggregations["types"]] == [("question", 1)]

    @pytest.mark.asyncio
    async def test_failing_cache_key_skips_cache(self, question_store, analytics_sink):
        """Should search without caching when the cache key cannot be derived."""
        add_questions(question_store, 2)
        broken_cache = AsyncMock()
        broken_cache.key_for = MagicMock(side_effect=TypeError("unhashable query"))

        engine = SearchEngine(
            question_store=question_store,
            partner_store=InMemoryPartnerStore(),
            health_log_store=InMemoryHealthLogStore(),
            analytics_sink=analytics_sink,
            cache=broken_cache,
        )

        response = await engine.search(SearchQuery(query="vaccination"))

        assert response.total == 2
        assert response.cached is False
        broken_cache.get.assert_not_called()
        broken_cache.set.assert_not_called()
        assert len(analytics_sink.records) == 1

    @pytest.mark.asyncio
    async def test_analytics_record(self, engine, question_store, analytics_sink):
        """Should record the query, type, counts and applied filters."""
        add_questions(question_store, 2)

        await engine.search(
            SearchQuery(query="vaccination", type="questions", user_id="u1",
                        filters={"urgent": False, "verified": True})
        )

        record = analytics_sink.records[0]
        assert record.user_id == "u1"
        assert record.search_query == "vaccination"
        assert record.search_type == "questions"
        assert record.results_count == 2
        assert record.no_results is False
        assert record.filters_applied == {"urgent": False, "verified": True}
        assert isinstance(record.search_duration_ms, int)

    @pytest.mark.asyncio
    async def test_no_results_flag(self, engine, analytics_sink):
        """Should flag searches without results."""
        await engine.search(SearchQuery(query="nothing matches"))
        assert analytics_sink.records[0].no_results is True

    @pytest.mark.asyncio
    async def test_failing_cache_is_a_miss(self, question_store, analytics_sink):
        """Should still search when the cache fails on read and write."""
        add_questions(question_store, 2)
        broken_cache = AsyncMock()
        broken_cache.key_for = lambda query: "key"
        broken_cache.get.side_effect = ConnectionError("cache down")
        broken_cache.set.side_effect = ConnectionError("cache down")

        engine = SearchEngine(
            question_store=question_store,
            partner_store=InMemoryPartnerStore(),
            health_log_store=InMemoryHealthLogStore(),
            analytics_sink=analytics_sink,
            cache=broken_cache,
        )

        response = await engine.search(SearchQuery(query="vaccination"))

        assert response.total == 2
        assert response.cached is False
        broken_cache.set.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failing_analytics_does_not_fail_search(self, question_store, cache):
        """Should return results when analytics cannot be written."""
        add_questions(question_store, 2)
        broken_sink = AsyncMock()
        broken_sink.append.side_effect = RuntimeError("analytics down")
        broken_sink.find_popular_queries.return_value = []

        engine = SearchEngine(
            question_store=question_store,
            partner_store=InMemoryPartnerStore(),
            health_log_store=InMemoryHealthLogStore(),
            analytics_sink=broken_sink,
            cache=cache,
        )

        response = await engine.search(SearchQuery(query="vaccination"))

        assert isinstance(response, SearchResponse)
        assert response.total == 2
        broken_sink.append.assert_awaited_once()


class TestUnimplementedModalities:
    """Tests for voice and visual search."""

    @pytest.mark.asyncio
    async def test_voice_search_raises(self, engine):
        """Should always raise for voice search."""
        with pytest.raises(SearchCapabilityNotImplementedError, match="Voice search not implemented"):
            await engine.process_voice_search(b"audio", "hi")

    @pytest.mark.asyncio
    async def test_visual_search_raises(self, engine):
        """Should always raise for visual search, as a NotImplementedError."""
        with pytest.raises(NotImplementedError, match="Visual search not implemented"):
            await engine.process_visual_search(b"image")
