"""Relevance scoring for each record type.

Scores are additive and unnormalized: field-match weights plus popularity,
reputation or recency boosts. Question, partner and health-log scores share
one raw scale, so a combined search compares them directly.
"""

import math
from collections.abc import Sequence
from datetime import datetime

from woofsearch.models.records import (
    HealthLogRecord,
    PartnerRecord,
    QuestionRecord,
    as_utc,
    utc_now,
)

# Field weights
TITLE_WEIGHT = 3.0
BODY_WEIGHT = 1.0
TAG_WEIGHT = 2.0
NAME_WEIGHT = 3.0
LOCATION_WEIGHT = 2.0
SPECIALIZATION_WEIGHT = 2.0
NOTES_WEIGHT = 2.0

# Boosts
UPVOTE_BOOST = 0.5
VIEW_BOOST = 0.2
URGENT_BOOST = 1.0
VERIFIED_BOOST = 1.0
RATING_BOOST = 0.5
REVIEW_BOOST = 0.3
RECENCY_WINDOW_DAYS = 30
RECENCY_BOOST = 0.1

SECONDS_PER_DAY = 86400


def score_question(question: QuestionRecord, terms: Sequence[str]) -> float:
    """Score a community question.

    Each term adds 3 for a title match, 1 for a content match and 2 if any
    tag contains it. Upvotes, views and the urgent flag add boosts.
    """
    score = 0.0
    title = question.title.lower()
    content = question.content.lower()
    tags = [tag.lower() for tag in question.tags]

    for term in terms:
        needle = term.lower()
        if needle in title:
            score += TITLE_WEIGHT
        if needle in content:
            score += BODY_WEIGHT
        if any(needle in tag for tag in tags):
            score += TAG_WEIGHT

    score += math.log(question.upvotes + 1) * UPVOTE_BOOST
    score += math.log(question.views + 1) * VIEW_BOOST
    if question.is_urgent:
        score += URGENT_BOOST

    return score


def score_partner(partner: PartnerRecord, terms: Sequence[str]) -> float:
    """Score a partner profile.

    Each term adds 3 for a name or business-name match, 1 for a bio match,
    2 for a location match and 2 if any specialization contains it.
    Verification, rating and review count add boosts.
    """
    score = 0.0
    name = f"{partner.name} {partner.business_name or ''}".lower()
    bio = (partner.bio or "").lower()
    location = partner.location.lower()
    specializations = [spec.lower() for spec in partner.specialization]

    for term in terms:
        needle = term.lower()
        if needle in name:
            score += NAME_WEIGHT
        if needle in bio:
            score += BODY_WEIGHT
        if needle in location:
            score += LOCATION_WEIGHT
        if any(needle in spec for spec in specializations):
            score += SPECIALIZATION_WEIGHT

    if partner.verified:
        score += VERIFIED_BOOST
    score += max(partner.rating_average, 0.0) * RATING_BOOST
    score += math.log(partner.total_reviews + 1) * REVIEW_BOOST

    return score


def score_health_log(
    log: HealthLogRecord,
    terms: Sequence[str],
    now: datetime | None = None,
) -> float:
    """Score a health log.

    Each term found in the notes adds 2. Logs from the last 30 days get a
    recency boost that decays linearly to zero.

    Args:
        log: Health log record
        terms: Search terms
        now: Reference time (default: current UTC time)
    """
    score = 0.0
    notes = (log.notes or "").lower()

    for term in terms:
        if term.lower() in notes:
            score += NOTES_WEIGHT

    reference = as_utc(now) if now else utc_now()
    days_since = max(0.0, (reference - log.log_date).total_seconds() / SECONDS_PER_DAY)
    score += max(0.0, RECENCY_WINDOW_DAYS - days_since) * RECENCY_BOOST

    return score
