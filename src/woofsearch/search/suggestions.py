"""Query completion suggestions from search history and canned phrases."""

import logging
from datetime import timedelta

from woofsearch.models.records import utc_now
from woofsearch.search.language import LanguageResources, get_default_resources
from woofsearch.storage.base import AnalyticsSink

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
HISTORY_WINDOW_DAYS = 30
MAX_HISTORY_SUGGESTIONS = 5
MAX_SUGGESTIONS = 8


class SuggestionBuilder:
    """Builds suggestions for a (possibly partial) query.

    Past queries from the analytics sink that returned results come first,
    followed by the language's predefined suggestions containing the query.
    """

    def __init__(
        self,
        analytics_sink: AnalyticsSink,
        language_resources: LanguageResources | None = None,
    ):
        """Initialize the builder.

        Args:
            analytics_sink: Source of historical queries
            language_resources: Predefined suggestions per language
        """
        self.analytics_sink = analytics_sink
        self.language_resources = language_resources or get_default_resources()

    async def build(self, raw_query: str, normalized: str, language: str) -> list[str]:
        """Suggest up to eight completions.

        Args:
            raw_query: Query as typed, used for substring matching
            normalized: Normalized query, used for the minimum-length guard
            language: Language of the query

        Returns:
            Deduplicated suggestions, history first
        """
        needle = raw_query.strip()
        if len(normalized.strip()) < MIN_QUERY_LENGTH or len(needle) < MIN_QUERY_LENGTH:
            return []

        history: list[str] = []
        try:
            history = await self.analytics_sink.find_popular_queries(
                contains=needle,
                language=language,
                since=utc_now() - timedelta(days=HISTORY_WINDOW_DAYS),
                limit=MAX_HISTORY_SUGGESTIONS,
            )
        except Exception as e:
            logger.warning(f"Failed to load suggestion history for '{needle}': {e}")

        lowered = needle.lower()
        predefined = [
            phrase
            for phrase in self.language_resources.suggestions_for(language)
            if lowered in phrase.lower()
        ]

        return list(dict.fromkeys([*history, *predefined]))[:MAX_SUGGESTIONS]
