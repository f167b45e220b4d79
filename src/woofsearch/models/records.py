"""Data models for records owned by the platform data store.

The search engine never writes these records (apart from analytics rows);
it only filters and projects them into search results.
"""

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, Field


def utc_now() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes so records from any store compare safely."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class QuestionRecord(BaseModel):
    """Community question as stored by the platform."""

    id: str
    title: str
    content: str = ""
    category: str | None = None
    status: str = "active"
    language: str = "en"

    # Popularity signals
    is_urgent: bool = False
    upvotes: int = 0
    views: int = 0
    answer_count: int = 0

    created_at: UtcDatetime = Field(default_factory=utc_now)
    author_name: str | None = None
    tags: list[str] = Field(default_factory=list)


class PartnerRecord(BaseModel):
    """Partner (vet, trainer, groomer, ...) profile."""

    id: str
    name: str
    business_name: str | None = None
    partner_type: str = "vet"
    bio: str | None = None
    location: str = ""

    # Reputation
    rating_average: float = 0.0
    total_reviews: int = 0
    verified: bool = False
    status: str = "pending"

    # Service flags
    emergency_available: bool = False
    online_consultation: bool = False
    specialization: list[str] = Field(default_factory=list)
    experience_years: int | None = None
    consultation_fee_range: str | None = None

    created_at: UtcDatetime = Field(default_factory=utc_now)


class HealthLogRecord(BaseModel):
    """Daily health log for a dog, scoped to the dog's owner."""

    id: str
    user_id: str  # owner of the dog
    dog_name: str
    dog_breed: str | None = None
    log_date: UtcDatetime
    notes: str | None = None
    activity_level: str | None = None
    appetite: str | None = None
    mood: str | None = None


class SearchAnalyticsRecord(BaseModel):
    """One row per executed search (append-only)."""

    user_id: str | None = None
    search_query: str
    search_type: str = "all"
    language: str = "en"
    results_count: int = 0
    search_duration_ms: int = 0
    no_results: bool = False
    filters_applied: dict[str, Any] = Field(default_factory=dict)
    created_at: UtcDatetime = Field(default_factory=utc_now)
