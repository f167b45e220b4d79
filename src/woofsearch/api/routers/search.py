"""Search API router."""

import logging
import time
import uuid
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request

from ...search.engine import SearchEngine
from ...search.exceptions import SearchCapabilityNotImplementedError
from ...search.models import SearchQuery, SearchResponse, SearchType, SortOrder
from ...search.normalizer import normalize_query
from ..dependencies import CurrentUserIdDep, SearchEngineDep
from ..models.search import (
    MAX_QUERY_LENGTH,
    AdvancedSearchData,
    AdvancedSearchRequest,
    AdvancedSearchResponse,
    ErrorDetail,
    Pagination,
    Performance,
    QueryEcho,
    SearchMetadata,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])

_VALID_TYPES = {t.value for t in SearchType}
_VALID_SORTS = {s.value for s in SortOrder}


def _fail(status_code: int, error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail=ErrorDetail(error=error, message=message).model_dump(),
    )


def _validate(query: str | None, search_type: str, sort: str) -> str:
    """Check the raw request values and return the trimmed query.

    Raises:
        HTTPException: 400 with MISSING_QUERY, QUERY_TOO_LONG, INVALID_TYPE or INVALID_SORT
    """
    if not query or not query.strip():
        raise _fail(400, "MISSING_QUERY", "Search query is required")
    if len(query) > MAX_QUERY_LENGTH:
        raise _fail(
            400,
            "QUERY_TOO_LONG",
            f"Search query too long (max {MAX_QUERY_LENGTH} characters)",
        )
    if search_type not in _VALID_TYPES:
        raise _fail(400, "INVALID_TYPE", "Invalid search type")
    if sort not in _VALID_SORTS:
        raise _fail(400, "INVALID_SORT", "Invalid sort option")
    return query.strip()


async def _execute(engine: SearchEngine, search_query: SearchQuery) -> SearchResponse:
    try:
        return await engine.search(search_query)
    except Exception as e:
        logger.error(f"Advanced search failed: {e}", exc_info=True)
        raise _fail(500, "SEARCH_ERROR", "Search failed")


def _performance(response: SearchResponse, start: float) -> Performance:
    return Performance(
        search_time_ms=round(response.took),
        total_time_ms=round((time.perf_counter() - start) * 1000),
        cached=response.cached,
    )


@router.get("/advanced", response_model=AdvancedSearchResponse)
async def advanced_search(
    engine: SearchEngineDep,
    user_id: CurrentUserIdDep,
    q: str | None = Query(default=None, description="Search query"),
    type: str = Query(default="all", description="all, questions, partners, health or content"),
    lang: str = Query(default="en", description="Query language"),
    sort: str = Query(default="relevance", description="relevance, date, popularity or rating"),
    page: int = Query(default=1, description="Page number"),
    limit: int = Query(default=20, description="Results per page (max 100)"),
    category: str | None = Query(default=None, description="Question category"),
    urgent: bool | None = Query(default=None, description="Only urgent questions"),
    partner_type: str | None = Query(default=None, description="Partner category (vet, trainer, ...)"),
    location: str | None = Query(default=None, description="Partner location substring"),
    emergency: bool | None = Query(default=None, description="Only partners offering emergency care"),
    online: bool | None = Query(default=None, description="Only partners offering online consultation"),
    verified: bool | None = Query(default=None, description="Accepted for compatibility; partners are always verified"),
    min_rating: float | None = Query(default=None, description="Minimum partner rating"),
):
    """
    Search community questions, partner profiles and your dogs' health logs.

    Results from every requested source are scored, merged and ranked:
    - **relevance**: best match first (default)
    - **date**: newest first among equally relevant results
    - **popularity**: most upvoted (or viewed) questions first
    - **rating**: best rated partners first

    Hindi queries are matched against their English equivalents as well.
    Health logs are only searched for authenticated callers.
    """
    start = time.perf_counter()
    text = _validate(q, type, sort)

    filters: dict[str, Any] = {
        "category": category,
        "urgent": urgent,
        "type": partner_type,
        "location": location,
        "emergency": emergency,
        "online": online,
        "verified": verified,
        "min_rating": min_rating,
    }
    filters = {key: value for key, value in filters.items() if value is not None}

    logger.info(
        f"Advanced search request: query='{text}', type={type}, lang={lang}, "
        f"sort={sort}, page={page}, limit={limit}, filters={filters}"
    )

    try:
        search_query = SearchQuery(
            query=text,
            type=type,
            language=lang,
            filters=filters,
            sort=sort,
            page=page,
            limit=limit,
            user_id=user_id,
        )
    except ValueError as e:
        logger.warning(f"Invalid search request: {e}")
        raise _fail(400, "INVALID_REQUEST", str(e))

    response = await _execute(engine, search_query)

    return AdvancedSearchResponse(
        data=AdvancedSearchData(
            query=QueryEcho(
                original=q,
                type=type,
                language=search_query.language,
                filters=filters,
                sort=sort,
                page=search_query.page,
                limit=search_query.limit,
            ),
            results=response.results,
            pagination=Pagination.build(response.page, response.limit, response.total),
            aggregations=response.aggregations,
            suggestions=response.suggestions,
            performance=_performance(response, start),
        )
    )


@router.post("/advanced", response_model=AdvancedSearchResponse)
async def advanced_search_post(
    request: AdvancedSearchRequest,
    engine: SearchEngineDep,
    user_id: CurrentUserIdDep,
):
    """
    Search with a JSON body.

    Same semantics as the GET endpoint, plus:
    - **facets**: include type/category aggregations (default off)
    - **highlighting**: include matched-term highlights (default on)
    - **metadata**: a search ID and timestamp for client-side correlation
    """
    start = time.perf_counter()
    text = _validate(request.query, request.type, request.sort)

    logger.info(
        f"Advanced search request: query='{text}', type={request.type}, "
        f"lang={request.language}, sort={request.sort}, page={request.page}, "
        f"limit={request.limit}, filters={request.filters}"
    )

    try:
        search_query = SearchQuery(
            query=text,
            type=request.type,
            language=request.language,
            filters=request.filters,
            sort=request.sort,
            page=request.page,
            limit=request.limit,
            user_id=user_id,
        )
    except ValueError as e:
        logger.warning(f"Invalid search request: {e}")
        raise _fail(400, "INVALID_REQUEST", str(e))

    response = await _execute(engine, search_query)

    results = response.results
    if not request.highlighting:
        results = [r.model_copy(update={"highlight": {}}) for r in results]

    return AdvancedSearchResponse(
        data=AdvancedSearchData(
            query=QueryEcho(
                original=request.query,
                normalized=normalize_query(
                    text, search_query.language, engine.language_resources
                ),
                type=request.type,
                language=search_query.language,
                filters=request.filters,
                sort=request.sort,
                page=search_query.page,
                limit=search_query.limit,
            ),
            results=results,
            pagination=Pagination.build(response.page, response.limit, response.total),
            aggregations=response.aggregations if request.facets else None,
            suggestions=response.suggestions,
            performance=_performance(response, start),
            metadata=SearchMetadata(
                search_id=f"search_{uuid.uuid4().hex}",
                timestamp=datetime.now(UTC),
                user_id=user_id,
            ),
        )
    )


@router.post("/voice")
async def voice_search(request: Request, engine: SearchEngineDep, lang: str = "en"):
    """Search from recorded speech (request body is the audio). Not available yet."""
    audio = await request.body()
    try:
        return await engine.process_voice_search(audio, lang)
    except SearchCapabilityNotImplementedError as e:
        raise _fail(501, "NOT_IMPLEMENTED", str(e))


@router.post("/visual")
async def visual_search(request: Request, engine: SearchEngineDep):
    """Search from an image (request body is the image). Not available yet."""
    image = await request.body()
    try:
        return await engine.process_visual_search(image)
    except SearchCapabilityNotImplementedError as e:
        raise _fail(501, "NOT_IMPLEMENTED", str(e))
