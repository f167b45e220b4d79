"""Shared dependencies for FastAPI application.

This module provides dependency injection functions for FastAPI endpoints.
These dependencies are used to access the search engine, its cache and the
caller identity.
"""

import logging
from functools import lru_cache
from typing import Annotated, Any

from azure.cosmos.aio import CosmosClient
from azure.identity.aio import DefaultAzureCredential
from fastapi import Depends, Request
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..search.cache import InMemorySearchCache
from ..search.engine import SearchEngine
from ..search.language import LanguageResources
from ..storage.cosmos import (
    CosmosAnalyticsSink,
    CosmosHealthLogStore,
    CosmosPartnerStore,
    CosmosQuestionStore,
)
from ..storage.memory import (
    InMemoryAnalyticsSink,
    InMemoryHealthLogStore,
    InMemoryPartnerStore,
    InMemoryQuestionStore,
)

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Cosmos DB settings (in-memory stores are used when no endpoint is set)
    cosmos_db_endpoint: str | None = Field(
        default=None, description="Cosmos DB endpoint URL"
    )
    cosmos_db_key: str | None = Field(
        default=None,
        description="Cosmos DB account key (DefaultAzureCredential is used when unset)",
    )
    cosmos_db_database: str = Field(
        default="woofadaar", description="Cosmos DB database name"
    )
    cosmos_db_questions_container: str = Field(
        default="community_questions", description="Community questions container"
    )
    cosmos_db_partners_container: str = Field(
        default="partners", description="Partner profiles container"
    )
    cosmos_db_health_logs_container: str = Field(
        default="health_logs", description="Dog health logs container"
    )
    cosmos_db_analytics_container: str = Field(
        default="search_analytics", description="Search analytics container"
    )

    # Search settings
    search_cache_ttl_seconds: int = Field(
        default=600, description="Lifetime of cached search responses"
    )
    search_cache_max_entries: int = Field(
        default=1000, description="Maximum number of cached search responses"
    )
    language_resources_path: str | None = Field(
        default=None,
        description="Override for the bundled synonym/transliteration/suggestion file",
    )

    # Logging settings
    log_level: str = Field(default="INFO", description="Logging level")

    # API settings
    api_version: str = Field(default="1.0.0", description="API version")
    api_title: str = Field(default="Woofadaar Search API", description="API title")
    api_description: str = Field(
        default="Multi-language search across community questions, partners and health logs",
        description="API description",
    )

    # CORS settings
    cors_origins: list[str] = Field(
        default=["*"], description="Allowed CORS origins"
    )
    cors_allow_credentials: bool = Field(
        default=True, description="Allow credentials in CORS"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


# Global service instances (initialized during lifespan)
_services: dict[str, Any] = {}


def _init_cosmos_stores(settings: Settings) -> dict[str, Any]:
    if settings.cosmos_db_key:
        credential: Any = settings.cosmos_db_key
    else:
        credential = DefaultAzureCredential()
        _services["credential"] = credential

    cosmos_client = CosmosClient(url=settings.cosmos_db_endpoint, credential=credential)
    _services["cosmos_client"] = cosmos_client

    common = {
        "cosmos_client": cosmos_client,
        "database_name": settings.cosmos_db_database,
    }
    return {
        "question_store": CosmosQuestionStore(
            container_name=settings.cosmos_db_questions_container, **common
        ),
        "partner_store": CosmosPartnerStore(
            container_name=settings.cosmos_db_partners_container, **common
        ),
        "health_log_store": CosmosHealthLogStore(
            container_name=settings.cosmos_db_health_logs_container, **common
        ),
        "analytics_sink": CosmosAnalyticsSink(
            container_name=settings.cosmos_db_analytics_container, **common
        ),
    }


def _init_memory_stores() -> dict[str, Any]:
    return {
        "question_store": InMemoryQuestionStore(),
        "partner_store": InMemoryPartnerStore(),
        "health_log_store": InMemoryHealthLogStore(),
        "analytics_sink": InMemoryAnalyticsSink(),
    }


async def init_services(settings: Settings) -> None:
    """Initialize application services.

    Called during FastAPI lifespan startup.

    Raises:
        ConfigurationError: If the language resource file cannot be loaded
    """
    language_resources = LanguageResources.load(settings.language_resources_path)
    _services["language_resources"] = language_resources

    if settings.cosmos_db_endpoint:
        logger.info(f"Using Cosmos DB stores at {settings.cosmos_db_endpoint}")
        stores = _init_cosmos_stores(settings)
    else:
        logger.warning("COSMOS_DB_ENDPOINT not set, using empty in-memory stores")
        stores = _init_memory_stores()
    _services.update(stores)

    search_cache = InMemorySearchCache(
        ttl_seconds=settings.search_cache_ttl_seconds,
        max_entries=settings.search_cache_max_entries,
    )
    _services["search_cache"] = search_cache

    _services["search_engine"] = SearchEngine(
        question_store=stores["question_store"],
        partner_store=stores["partner_store"],
        health_log_store=stores["health_log_store"],
        analytics_sink=stores["analytics_sink"],
        cache=search_cache,
        language_resources=language_resources,
    )


async def cleanup_services() -> None:
    """Cleanup application services.

    Called during FastAPI lifespan shutdown.
    """
    # Close Cosmos DB client
    if "cosmos_client" in _services:
        await _services["cosmos_client"].close()

    # Close Azure credential
    if "credential" in _services:
        await _services["credential"].close()

    # Clear services
    _services.clear()


def get_search_engine() -> SearchEngine:
    """Get the search engine instance."""
    if "search_engine" not in _services:
        raise RuntimeError("Services not initialized. Call init_services() first.")
    return _services["search_engine"]


def get_search_cache() -> InMemorySearchCache:
    """Get the search response cache instance."""
    if "search_cache" not in _services:
        raise RuntimeError("Services not initialized. Call init_services() first.")
    return _services["search_cache"]


async def get_current_user_id(request: Request) -> str | None:
    """Get the caller's user ID from request state.

    The user is set by an upstream authentication layer. Anonymous callers
    get ``None`` and therefore no health log results.

    Returns:
        User ID, or None for anonymous callers
    """
    user = getattr(request.state, "user", None)
    if not user:
        return None
    user_id = user.get("sub") or user.get("id")
    return str(user_id) if user_id else None


# Type aliases for dependency injection
SearchEngineDep = Annotated[SearchEngine, Depends(get_search_engine)]
CurrentUserIdDep = Annotated[str | None, Depends(get_current_user_id)]
