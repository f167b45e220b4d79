"""Azure Cosmos DB backed record stores.

Each store wraps one container of the platform database and translates
search criteria into parameterized Cosmos SQL. Throttled or temporarily
unavailable requests are retried with exponential backoff; any other
Cosmos failure surfaces as DataSourceError.
"""

import logging
import uuid
from datetime import datetime
from typing import Any

from azure.cosmos import exceptions as cosmos_exceptions
from azure.cosmos.aio import CosmosClient
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from woofsearch.models.records import (
    HealthLogRecord,
    PartnerRecord,
    QuestionRecord,
    SearchAnalyticsRecord,
    as_utc,
)
from woofsearch.search.exceptions import DataSourceError
from woofsearch.storage.base import HealthLogCriteria, PartnerCriteria, QuestionCriteria

logger = logging.getLogger(__name__)

TRANSIENT_STATUS_CODES = (429, 503)


def _is_transient(error: BaseException) -> bool:
    """Throttling and service-unavailable responses are worth retrying."""
    return (
        isinstance(error, cosmos_exceptions.CosmosHttpResponseError)
        and error.status_code in TRANSIENT_STATUS_CODES
    )


def cosmos_timestamp(value: datetime) -> str:
    """Format a datetime the way stored documents serialize it (ISO 8601, Z suffix)."""
    return as_utc(value).isoformat().replace("+00:00", "Z")


def build_term_clause(
    terms: tuple[str, ...],
    field_templates: list[str],
    parameters: list[dict[str, Any]],
) -> str | None:
    """Build an OR clause matching any term against any field.

    Templates contain ``{p}`` where the term parameter goes, e.g.
    ``"CONTAINS(c.title, {p}, true)"``. Term parameters are appended to
    ``parameters``.

    Returns:
        Parenthesized clause, or None when there are no terms
    """
    if not terms:
        return None

    conditions = []
    for i, term in enumerate(terms):
        param = f"@term{i}"
        parameters.append({"name": param, "value": term})
        conditions.extend(template.format(p=param) for template in field_templates)

    return "(" + " OR ".join(conditions) + ")"


class CosmosContainerStore:
    """Shared plumbing for stores backed by a single Cosmos container."""

    def __init__(
        self,
        cosmos_client: CosmosClient,
        database_name: str,
        container_name: str,
        max_retries: int = 3,
    ):
        """Initialize the store.

        Args:
            cosmos_client: Cosmos DB client
            database_name: Database name
            container_name: Container holding this store's documents
            max_retries: Attempts for throttled or unavailable requests
        """
        self.cosmos_client = cosmos_client
        self.database_name = database_name
        self.container_name = container_name
        self.max_retries = max_retries

    def _container(self):
        database = self.cosmos_client.get_database_client(self.database_name)
        return database.get_container_client(self.container_name)

    async def _query(self, query: str, parameters: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Run a parameterized query and collect all items.

        Raises:
            DataSourceError: If the query fails after retries
        """
        container = self._container()
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception(_is_transient),
                stop=stop_after_attempt(self.max_retries),
                wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
                reraise=True,
            ):
                with attempt:
                    logger.debug(
                        f"Querying {self.container_name} "
                        f"(attempt {attempt.retry_state.attempt_number})"
                    )
                    items = []
                    async for item in container.query_items(
                        query=query,
                        parameters=parameters,
                        enable_cross_partition_query=True,
                    ):
                        items.append(item)
                    return items
        except cosmos_exceptions.CosmosHttpResponseError as e:
            logger.error(f"Cosmos DB error querying {self.container_name}: {e}")
            raise DataSourceError(self.container_name, str(e)) from e
        return []


class CosmosQuestionStore(CosmosContainerStore):
    """Community questions stored in Cosmos DB."""

    async def find_questions(self, criteria: QuestionCriteria) -> list[QuestionRecord]:
        parameters: list[dict[str, Any]] = [
            {"name": "@status", "value": criteria.status},
            {"name": "@language", "value": criteria.language},
            {"name": "@limit", "value": criteria.limit},
        ]
        conditions = ["c.status = @status", "c.language = @language"]

        if criteria.category is not None:
            conditions.append("c.category = @category")
            parameters.append({"name": "@category", "value": criteria.category})
        if criteria.urgent_only:
            conditions.append("c.is_urgent = true")

        term_clause = build_term_clause(
            criteria.terms,
            [
                "CONTAINS(c.title, {p}, true)",
                "CONTAINS(c.content, {p}, true)",
                "EXISTS(SELECT VALUE t FROM t IN c.tags WHERE CONTAINS(t, {p}, true))",
            ],
            parameters,
        )
        if term_clause:
            conditions.append(term_clause)

        query = (
            f"SELECT * FROM c WHERE {' AND '.join(conditions)} "
            "ORDER BY c.is_urgent DESC, c.upvotes DESC, c.created_at DESC "
            "OFFSET 0 LIMIT @limit"
        )
        items = await self._query(query, parameters)
        return [QuestionRecord.model_validate(item) for item in items]


class CosmosPartnerStore(CosmosContainerStore):
    """Partner profiles stored in Cosmos DB."""

    async def find_partners(self, criteria: PartnerCriteria) -> list[PartnerRecord]:
        parameters: list[dict[str, Any]] = [
            {"name": "@status", "value": criteria.status},
            {"name": "@verified", "value": criteria.verified},
            {"name": "@limit", "value": criteria.limit},
        ]
        conditions = ["c.status = @status", "c.verified = @verified"]

        if criteria.partner_type is not None:
            conditions.append("c.partner_type = @partner_type")
            parameters.append({"name": "@partner_type", "value": criteria.partner_type})
        if criteria.location:
            conditions.append("CONTAINS(c.location, @location, true)")
            parameters.append({"name": "@location", "value": criteria.location})
        if criteria.emergency_only:
            conditions.append("c.emergency_available = true")
        if criteria.online_only:
            conditions.append("c.online_consultation = true")
        if criteria.min_rating is not None:
            conditions.append("c.rating_average >= @min_rating")
            parameters.append({"name": "@min_rating", "value": criteria.min_rating})

        term_clause = build_term_clause(
            criteria.terms,
            [
                "CONTAINS(c.name, {p}, true)",
                "CONTAINS(c.business_name, {p}, true)",
                "CONTAINS(c.bio, {p}, true)",
                "CONTAINS(c.location, {p}, true)",
                "EXISTS(SELECT VALUE s FROM s IN c.specialization WHERE LOWER(s) = LOWER({p}))",
            ],
            parameters,
        )
        if term_clause:
            conditions.append(term_clause)

        query = (
            f"SELECT * FROM c WHERE {' AND '.join(conditions)} "
            "ORDER BY c.rating_average DESC, c.total_reviews DESC, c.verified DESC "
            "OFFSET 0 LIMIT @limit"
        )
        items = await self._query(query, parameters)
        return [PartnerRecord.model_validate(item) for item in items]


class CosmosHealthLogStore(CosmosContainerStore):
    """Health logs stored in Cosmos DB, one document per log."""

    async def find_health_logs(self, criteria: HealthLogCriteria) -> list[HealthLogRecord]:
        parameters: list[dict[str, Any]] = [
            {"name": "@user_id", "value": criteria.user_id},
            {"name": "@limit", "value": criteria.limit},
        ]
        conditions = ["c.user_id = @user_id"]

        term_clause = build_term_clause(
            criteria.terms,
            ["CONTAINS(c.notes, {p}, true)"],
            parameters,
        )
        if term_clause:
            conditions.append(term_clause)

        query = (
            f"SELECT * FROM c WHERE {' AND '.join(conditions)} "
            "ORDER BY c.log_date DESC "
            "OFFSET 0 LIMIT @limit"
        )
        items = await self._query(query, parameters)
        return [HealthLogRecord.model_validate(item) for item in items]


class CosmosAnalyticsSink(CosmosContainerStore):
    """Search analytics rows stored in Cosmos DB."""

    async def append(self, record: SearchAnalyticsRecord) -> None:
        doc = record.model_dump(mode="json")
        doc["id"] = str(uuid.uuid4())

        try:
            await self._container().create_item(doc)
        except cosmos_exceptions.CosmosHttpResponseError as e:
            raise DataSourceError(self.container_name, str(e)) from e

        logger.debug(f"Recorded search analytics for '{record.search_query}'")

    async def find_popular_queries(
        self,
        contains: str,
        language: str,
        since: datetime,
        limit: int = 5,
    ) -> list[str]:
        # DISTINCT cannot be combined with ORDER BY on another field, so
        # rows are deduplicated here keeping the highest result count.
        query = (
            "SELECT c.search_query, c.results_count FROM c "
            "WHERE c.language = @language "
            "AND CONTAINS(c.search_query, @contains, true) "
            "AND c.created_at >= @since "
            "AND c.results_count >= 1 "
            "ORDER BY c.results_count DESC"
        )
        parameters = [
            {"name": "@language", "value": language},
            {"name": "@contains", "value": contains},
            {"name": "@since", "value": cosmos_timestamp(since)},
        ]
        items = await self._query(query, parameters)

        queries: list[str] = []
        for item in items:
            text = item.get("search_query")
            if text and text not in queries:
                queries.append(text)
            if len(queries) >= limit:
                break
        return queries
