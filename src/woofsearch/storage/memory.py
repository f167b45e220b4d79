"""In-memory record stores.

Used for local development, tests and deployments without Cosmos DB. They
implement exactly the matching and ordering rules of the store interfaces.
"""

import logging
from collections.abc import Iterable
from datetime import datetime

from woofsearch.models.records import (
    HealthLogRecord,
    PartnerRecord,
    QuestionRecord,
    SearchAnalyticsRecord,
    as_utc,
)
from woofsearch.storage.base import HealthLogCriteria, PartnerCriteria, QuestionCriteria

logger = logging.getLogger(__name__)


def _contains_any(terms: Iterable[str], *fields: str | None) -> bool:
    """True if any term occurs (case-insensitively) in any field."""
    haystacks = [f.lower() for f in fields if f]
    return any(term.lower() in haystack for term in terms for haystack in haystacks)


class InMemoryQuestionStore:
    """Community questions held in a list."""

    def __init__(self, questions: Iterable[QuestionRecord] = ()):
        self._questions: list[QuestionRecord] = list(questions)

    def add(self, question: QuestionRecord) -> None:
        self._questions.append(question)

    def _matches(self, q: QuestionRecord, criteria: QuestionCriteria) -> bool:
        if q.status != criteria.status or q.language != criteria.language:
            return False
        if criteria.category is not None and q.category != criteria.category:
            return False
        if criteria.urgent_only and not q.is_urgent:
            return False
        if criteria.terms and not _contains_any(criteria.terms, q.title, q.content, *q.tags):
            return False
        return True

    async def find_questions(self, criteria: QuestionCriteria) -> list[QuestionRecord]:
        matches = [q for q in self._questions if self._matches(q, criteria)]
        matches.sort(key=lambda q: (q.is_urgent, q.upvotes, q.created_at), reverse=True)
        return matches[:criteria.limit]


class InMemoryPartnerStore:
    """Partner profiles held in a list."""

    def __init__(self, partners: Iterable[PartnerRecord] = ()):
        self._partners: list[PartnerRecord] = list(partners)

    def add(self, partner: PartnerRecord) -> None:
        self._partners.append(partner)

    def _matches(self, p: PartnerRecord, criteria: PartnerCriteria) -> bool:
        if p.status != criteria.status or p.verified != criteria.verified:
            return False
        if criteria.partner_type is not None and p.partner_type != criteria.partner_type:
            return False
        if criteria.location and criteria.location.lower() not in p.location.lower():
            return False
        if criteria.emergency_only and not p.emergency_available:
            return False
        if criteria.online_only and not p.online_consultation:
            return False
        if criteria.min_rating is not None and p.rating_average < criteria.min_rating:
            return False
        if criteria.terms:
            specializations = {spec.lower() for spec in p.specialization}
            text_match = _contains_any(criteria.terms, p.name, p.business_name, p.bio, p.location)
            if not text_match and not any(t.lower() in specializations for t in criteria.terms):
                return False
        return True

    async def find_partners(self, criteria: PartnerCriteria) -> list[PartnerRecord]:
        matches = [p for p in self._partners if self._matches(p, criteria)]
        matches.sort(key=lambda p: (p.rating_average, p.total_reviews, p.verified), reverse=True)
        return matches[:criteria.limit]


class InMemoryHealthLogStore:
    """Health logs held in a list."""

    def __init__(self, logs: Iterable[HealthLogRecord] = ()):
        self._logs: list[HealthLogRecord] = list(logs)

    def add(self, log: HealthLogRecord) -> None:
        self._logs.append(log)

    async def find_health_logs(self, criteria: HealthLogCriteria) -> list[HealthLogRecord]:
        matches = [
            log
            for log in self._logs
            if log.user_id == criteria.user_id
            and (not criteria.terms or _contains_any(criteria.terms, log.notes))
        ]
        matches.sort(key=lambda log: log.log_date, reverse=True)
        return matches[:criteria.limit]


class InMemoryAnalyticsSink:
    """Append-only list of search analytics rows."""

    def __init__(self, records: Iterable[SearchAnalyticsRecord] = ()):
        self.records: list[SearchAnalyticsRecord] = list(records)

    async def append(self, record: SearchAnalyticsRecord) -> None:
        self.records.append(record)
        logger.debug(f"Recorded search analytics for '{record.search_query}'")

    async def find_popular_queries(
        self,
        contains: str,
        language: str,
        since: datetime,
        limit: int = 5,
    ) -> list[str]:
        needle = contains.lower()
        since = as_utc(since)
        rows = [
            r
            for r in self.records
            if r.language == language
            and needle in r.search_query.lower()
            and r.created_at >= since
            and r.results_count >= 1
        ]
        rows.sort(key=lambda r: r.results_count, reverse=True)

        # First occurrence wins, which is the highest result count per query
        queries = list(dict.fromkeys(r.search_query for r in rows))
        return queries[:limit]
