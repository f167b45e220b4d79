"""Search sources: query one record store and project records into results."""

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from woofsearch.models.records import HealthLogRecord, PartnerRecord, QuestionRecord, utc_now
from woofsearch.search.highlighting import build_excerpt, build_highlight
from woofsearch.search.models import (
    HealthMetadata,
    HealthResult,
    PartnerMetadata,
    PartnerResult,
    QuestionMetadata,
    QuestionResult,
    SearchQuery,
    SearchResult,
)
from woofsearch.search.scoring import score_health_log, score_partner, score_question
from woofsearch.storage.base import (
    HealthLogCriteria,
    HealthLogStore,
    PartnerCriteria,
    PartnerStore,
    QuestionCriteria,
    QuestionStore,
)

logger = logging.getLogger(__name__)

MAX_RESULTS = 1000
MAX_HEALTH_RESULTS = 50
MAX_QUESTION_TAGS = 5


class SearchSource(Protocol):
    """One searchable collection."""

    name: str

    async def fetch(self, terms: Sequence[str], query: SearchQuery) -> list[SearchResult]:
        ...


class QuestionSource:
    """Active community questions in the query's language."""

    name = "questions"

    def __init__(self, store: QuestionStore, max_results: int = MAX_RESULTS):
        self.store = store
        self.max_results = max_results

    async def fetch(self, terms: Sequence[str], query: SearchQuery) -> list[SearchResult]:
        criteria = QuestionCriteria(
            language=query.language,
            terms=tuple(terms),
            category=query.filters.category,
            urgent_only=bool(query.filters.urgent),
            limit=self.max_results,
        )
        questions = await self.store.find_questions(criteria)
        return [self._to_result(q, terms) for q in questions]

    def _to_result(self, question: QuestionRecord, terms: Sequence[str]) -> QuestionResult:
        return QuestionResult(
            id=question.id,
            title=question.title,
            content=question.content,
            excerpt=build_excerpt(question.content, terms),
            relevance_score=score_question(question, terms),
            metadata=QuestionMetadata(
                category=question.category,
                is_urgent=question.is_urgent,
                upvotes=question.upvotes,
                views=question.views,
                answer_count=question.answer_count,
                created_at=question.created_at,
                author=question.author_name,
                tags=question.tags[:MAX_QUESTION_TAGS],
            ),
            highlight=build_highlight(f"{question.title} {question.content}", terms),
        )


class PartnerSource:
    """Approved and verified partner profiles."""

    name = "partners"

    def __init__(self, store: PartnerStore, max_results: int = MAX_RESULTS):
        self.store = store
        self.max_results = max_results

    async def fetch(self, terms: Sequence[str], query: SearchQuery) -> list[SearchResult]:
        filters = query.filters
        criteria = PartnerCriteria(
            terms=tuple(terms),
            partner_type=filters.type,
            location=filters.location,
            emergency_only=bool(filters.emergency),
            online_only=bool(filters.online),
            min_rating=filters.min_rating,
            limit=self.max_results,
        )
        partners = await self.store.find_partners(criteria)
        return [self._to_result(p, terms) for p in partners]

    def _to_result(self, partner: PartnerRecord, terms: Sequence[str]) -> PartnerResult:
        bio = partner.bio or ""
        title = partner.business_name or f"{partner.name}'s {partner.partner_type} Practice"
        return PartnerResult(
            id=partner.id,
            title=title,
            content=bio,
            excerpt=build_excerpt(bio, terms),
            relevance_score=score_partner(partner, terms),
            metadata=PartnerMetadata(
                partner_type=partner.partner_type,
                location=partner.location,
                rating=partner.rating_average,
                reviews=partner.total_reviews,
                verified=partner.verified,
                emergency=partner.emergency_available,
                online=partner.online_consultation,
                specialization=partner.specialization,
                experience=partner.experience_years,
                fee_range=partner.consultation_fee_range,
            ),
            highlight=build_highlight(f"{partner.business_name or partner.name} {bio}", terms),
        )


class HealthLogSource:
    """Health logs of the caller's own dogs.

    Anonymous queries have no health scope and get no results.
    """

    name = "health"

    def __init__(self, store: HealthLogStore, max_results: int = MAX_HEALTH_RESULTS):
        self.store = store
        self.max_results = max_results

    async def fetch(self, terms: Sequence[str], query: SearchQuery) -> list[SearchResult]:
        if not query.user_id or not terms:
            return []

        criteria = HealthLogCriteria(
            user_id=query.user_id,
            terms=tuple(terms),
            limit=self.max_results,
        )
        logs = await self.store.find_health_logs(criteria)
        logger.debug(f"Health log store returned {len(logs)} logs for user {query.user_id}")

        now = utc_now()
        return [
            self._to_result(log, terms, now)
            for log in logs
            if log.notes and log.user_id == query.user_id
        ]

    def _to_result(
        self,
        log: HealthLogRecord,
        terms: Sequence[str],
        now: datetime,
    ) -> HealthResult:
        notes = log.notes or ""
        return HealthResult(
            id=log.id,
            title=f"Health log for {log.dog_name} - {log.log_date:%a %b %d %Y}",
            content=notes,
            excerpt=build_excerpt(notes, terms),
            relevance_score=score_health_log(log, terms, now=now),
            metadata=HealthMetadata(
                date=log.log_date,
                dog_name=log.dog_name,
                breed=log.dog_breed,
                activity_level=log.activity_level,
                appetite=log.appetite,
                mood=log.mood,
            ),
            highlight=build_highlight(notes, terms),
        )
