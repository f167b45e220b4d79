"""Record stores and analytics sinks consulted by the search engine."""

from woofsearch.storage.base import (
    AnalyticsSink,
    HealthLogCriteria,
    HealthLogStore,
    PartnerCriteria,
    PartnerStore,
    QuestionCriteria,
    QuestionStore,
)
from woofsearch.storage.memory import (
    InMemoryAnalyticsSink,
    InMemoryHealthLogStore,
    InMemoryPartnerStore,
    InMemoryQuestionStore,
)

__all__ = [
    "AnalyticsSink",
    "HealthLogCriteria",
    "HealthLogStore",
    "PartnerCriteria",
    "PartnerStore",
    "QuestionCriteria",
    "QuestionStore",
    "InMemoryAnalyticsSink",
    "InMemoryHealthLogStore",
    "InMemoryPartnerStore",
    "InMemoryQuestionStore",
]
