"""Ranking, pagination and aggregation over scored results."""

from collections import Counter
from collections.abc import Sequence

from woofsearch.search.models import (
    FacetBucket,
    QuestionResult,
    SearchResult,
    SortOrder,
)


def rank_results(
    results: Sequence[SearchResult],
    sort: SortOrder = SortOrder.RELEVANCE,
) -> list[SearchResult]:
    """Order results for presentation.

    Results are always sorted by descending relevance first. Non-relevance
    orders then apply a second stable sort on their key, so ties on that key
    keep their relevance order.

    Args:
        results: Scored results from all sources
        sort: Requested ordering

    Returns:
        New ranked list
    """
    ranked = sorted(results, key=lambda r: r.relevance_score, reverse=True)

    if sort == SortOrder.DATE:
        ranked.sort(key=lambda r: r.sort_date(), reverse=True)
    elif sort == SortOrder.POPULARITY:
        ranked.sort(key=lambda r: r.popularity(), reverse=True)
    elif sort == SortOrder.RATING:
        ranked.sort(key=lambda r: r.rating(), reverse=True)

    return ranked


def paginate(results: Sequence[SearchResult], page: int, limit: int) -> list[SearchResult]:
    """Slice one page out of the ranked results.

    Pages past the end yield an empty list.
    """
    start = (max(page, 1) - 1) * limit
    return list(results[start:start + limit])


def build_aggregations(results: Sequence[SearchResult]) -> dict[str, list[FacetBucket]]:
    """Count results per type and question results per category.

    Computed over the full ranked list, not the page. Buckets are ordered by
    first appearance in ``results``.

    Returns:
        {"types": [...], "categories": [...]}
    """
    type_counts = Counter(result.type for result in results)

    category_counts: Counter[str] = Counter()
    for result in results:
        if isinstance(result, QuestionResult) and result.metadata.category:
            category_counts[result.metadata.category] += 1

    return {
        "types": [FacetBucket(key=key, count=count) for key, count in type_counts.items()],
        "categories": [
            FacetBucket(key=key, count=count) for key, count in category_counts.items()
        ],
    }
