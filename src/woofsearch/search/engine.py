"""Multi-source search engine for questions, partners and health logs."""

import asyncio
import logging
import time
from collections.abc import Sequence
from typing import Any

from woofsearch.models.records import SearchAnalyticsRecord
from woofsearch.search.cache import SearchCache
from woofsearch.search.exceptions import SearchCapabilityNotImplementedError
from woofsearch.search.language import LanguageResources, get_default_resources
from woofsearch.search.models import SearchQuery, SearchResponse, SearchResult, SearchType
from woofsearch.search.normalizer import extract_terms, normalize_query
from woofsearch.search.ranking import build_aggregations, paginate, rank_results
from woofsearch.search.side_effects import run_non_critical
from woofsearch.search.sources import (
    HealthLogSource,
    PartnerSource,
    QuestionSource,
    SearchSource,
)
from woofsearch.search.suggestions import SuggestionBuilder
from woofsearch.storage.base import AnalyticsSink, HealthLogStore, PartnerStore, QuestionStore

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class SearchEngine:
    """Relevance-ranked search across community questions, partners and health logs.

    A search normalizes the query, extracts and expands terms, fans out to
    the requested sources concurrently, scores and ranks the merged results,
    then assembles one page with facets and suggestions. Responses are
    cached per query and every uncached search is recorded in analytics.

    Search types:
    - all: questions, partners and (for a known user) health logs
    - questions / partners / health: a single source
    - content: accepted, no source yet (always empty)

    Example:
        engine = SearchEngine(
            question_store=questions,
            partner_store=partners,
            health_log_store=health_logs,
            analytics_sink=analytics,
            cache=InMemorySearchCache(),
        )
        response = await engine.search(SearchQuery(query="vaccination"))
    """

    def __init__(
        self,
        question_store: QuestionStore,
        partner_store: PartnerStore,
        health_log_store: HealthLogStore,
        analytics_sink: AnalyticsSink,
        cache: SearchCache,
        language_resources: LanguageResources | None = None,
    ):
        """Initialize the search engine.

        Args:
            question_store: Community question store
            partner_store: Partner profile store
            health_log_store: Per-user health log store
            analytics_sink: Append-only analytics log (also feeds suggestions)
            cache: Response cache
            language_resources: Synonym/transliteration/suggestion tables
        """
        self.analytics_sink = analytics_sink
        self.cache = cache
        self.language_resources = language_resources or get_default_resources()

        question_source = QuestionSource(question_store)
        partner_source = PartnerSource(partner_store)
        health_source = HealthLogSource(health_log_store)

        self.sources: dict[SearchType, list[SearchSource]] = {
            SearchType.ALL: [question_source, partner_source, health_source],
            SearchType.QUESTIONS: [question_source],
            SearchType.PARTNERS: [partner_source],
            SearchType.HEALTH: [health_source],
            SearchType.CONTENT: [],
        }
        self.suggestion_builder = SuggestionBuilder(analytics_sink, self.language_resources)

    async def search(self, query: SearchQuery) -> SearchResponse:
        """Execute a search query.

        Never fails because of a broken source, cache or analytics sink:
        those degrade to empty results, a cache miss, or a logged warning.

        Args:
            query: The search query

        Returns:
            SearchResponse for the requested page
        """
        start = time.perf_counter()
        cache_key = self._cache_key(query)

        cached = await self._cache_get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for search '{query.query}'")
            # Deep copy so callers never share containers with the cached entry
            return cached.model_copy(
                update={"took": _elapsed_ms(start), "cached": True}, deep=True
            )

        normalized = normalize_query(query.query, query.language, self.language_resources)
        terms = extract_terms(normalized, query.language, self.language_resources)

        logger.info(
            f"Executing {query.type.value} search for '{query.query}' "
            f"(terms={terms}, page={query.page}, limit={query.limit})"
        )

        results = await self._retrieve(terms, query)
        ranked = rank_results(results, query.sort)

        suggestions = await self.suggestion_builder.build(query.query, normalized, query.language)

        response = SearchResponse(
            results=paginate(ranked, query.page, query.limit),
            total=len(ranked),
            page=query.page,
            limit=query.limit,
            took=_elapsed_ms(start),
            aggregations=build_aggregations(ranked),
            suggestions=suggestions,
        )

        logger.info(
            f"Search '{query.query}' matched {response.total} results in {response.took:.1f}ms"
        )

        if cache_key is not None:
            await run_non_critical(
                "cache write", self.cache.set(cache_key, response.model_copy(deep=True))
            )
        await run_non_critical(
            "search analytics",
            self.analytics_sink.append(self._analytics_record(query, response)),
        )

        return response

    def _cache_key(self, query: SearchQuery) -> str | None:
        try:
            return self.cache.key_for(query)
        except Exception as e:
            logger.warning(f"Cache key derivation failed, skipping cache: {e}")
            return None

    async def _cache_get(self, key: str | None) -> SearchResponse | None:
        if key is None:
            return None
        try:
            return await self.cache.get(key)
        except Exception as e:
            logger.warning(f"Cache lookup failed, treating as miss: {e}")
            return None

    async def _retrieve(self, terms: Sequence[str], query: SearchQuery) -> list[SearchResult]:
        """Query all sources for the search type concurrently and merge results."""
        sources = self.sources[query.type]
        batches = await asyncio.gather(
            *(self._fetch_source(source, terms, query) for source in sources)
        )
        return [result for batch in batches for result in batch]

    async def _fetch_source(
        self,
        source: SearchSource,
        terms: Sequence[str],
        query: SearchQuery,
    ) -> list[SearchResult]:
        """Fetch one source; a failing source contributes no results."""
        try:
            results = await source.fetch(terms, query)
        except Exception as e:
            logger.warning(f"Search source '{source.name}' failed: {e}", exc_info=True)
            return []

        logger.debug(f"Source '{source.name}' returned {len(results)} results")
        return results

    @staticmethod
    def _analytics_record(query: SearchQuery, response: SearchResponse) -> SearchAnalyticsRecord:
        filters: dict[str, Any] = query.filters.model_dump(exclude_none=True)
        return SearchAnalyticsRecord(
            user_id=query.user_id,
            search_query=query.query,
            search_type=query.type.value,
            language=query.language,
            results_count=response.total,
            search_duration_ms=round(response.took),
            no_results=response.total == 0,
            filters_applied=filters,
        )

    async def process_voice_search(self, audio: bytes, language: str = "en") -> SearchResponse:
        """Search from recorded speech. Not available.

        Raises:
            SearchCapabilityNotImplementedError: Always
        """
        raise SearchCapabilityNotImplementedError("Voice")

    async def process_visual_search(self, image: bytes) -> SearchResponse:
        """Search from an image (e.g. a skin condition photo). Not available.

        Raises:
            SearchCapabilityNotImplementedError: Always
        """
        raise SearchCapabilityNotImplementedError("Visual")
