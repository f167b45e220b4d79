"""Collaborator interfaces consumed by the search engine.

Record stores answer filtered, ordered and capped queries. Text matching is
always a case-insensitive substring OR across terms and fields; an empty
term list means "no text predicate".
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from woofsearch.models.records import (
    HealthLogRecord,
    PartnerRecord,
    QuestionRecord,
    SearchAnalyticsRecord,
)


@dataclass(frozen=True)
class QuestionCriteria:
    """Question query.

    Matches status and language exactly, optional category and urgency, and
    any term in title, content or a tag name. Ordered urgent first, then by
    upvotes and newest.
    """

    language: str
    terms: tuple[str, ...] = ()
    status: str = "active"
    category: str | None = None
    urgent_only: bool = False
    limit: int = 1000


@dataclass(frozen=True)
class PartnerCriteria:
    """Partner query.

    Matches approved, verified partners; optional type, location substring,
    emergency and online flags and minimum rating; any term in name,
    business name, bio, location, or equal (ignoring case) to a specialization.
    Ordered by rating, review count and verification.
    """

    terms: tuple[str, ...] = ()
    status: str = "approved"
    verified: bool = True
    partner_type: str | None = None
    location: str | None = None
    emergency_only: bool = False
    online_only: bool = False
    min_rating: float | None = None
    limit: int = 1000


@dataclass(frozen=True)
class HealthLogCriteria:
    """Health-log query for the dogs of a single user, newest first."""

    user_id: str
    terms: tuple[str, ...] = ()
    limit: int = 50


class QuestionStore(Protocol):
    """Read access to community questions."""

    async def find_questions(self, criteria: QuestionCriteria) -> list[QuestionRecord]:
        ...


class PartnerStore(Protocol):
    """Read access to partner profiles."""

    async def find_partners(self, criteria: PartnerCriteria) -> list[PartnerRecord]:
        ...


class HealthLogStore(Protocol):
    """Read access to per-user health logs."""

    async def find_health_logs(self, criteria: HealthLogCriteria) -> list[HealthLogRecord]:
        ...


class AnalyticsSink(Protocol):
    """Append-only search analytics log."""

    async def append(self, record: SearchAnalyticsRecord) -> None:
        ...

    async def find_popular_queries(
        self,
        contains: str,
        language: str,
        since: datetime,
        limit: int = 5,
    ) -> list[str]:
        """Distinct past queries containing ``contains`` (case-insensitive).

        Only rows of ``language`` created at or after ``since`` with at least
        one result count; ordered by result count, highest first.
        """
        ...
