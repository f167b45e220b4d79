"""Shared data models."""

from woofsearch.models.records import (
    HealthLogRecord,
    PartnerRecord,
    QuestionRecord,
    SearchAnalyticsRecord,
    UtcDatetime,
    as_utc,
    utc_now,
)

__all__ = [
    "QuestionRecord",
    "PartnerRecord",
    "HealthLogRecord",
    "SearchAnalyticsRecord",
    "UtcDatetime",
    "as_utc",
    "utc_now",
]
