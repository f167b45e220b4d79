"""FastAPI application for the Woofadaar search API.

This module defines the main FastAPI application with:
- Lifespan management for service initialization/cleanup
- Health and readiness check endpoints
- CORS and request logging middleware
- OpenAPI documentation
- Router registration
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .dependencies import (
    _services,
    cleanup_services,
    get_search_cache,
    get_settings,
    init_services,
)
from .middleware import LoggingMiddleware, configure_logging
from .routers import search


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    Manages initialization and cleanup of services:
    - Startup: Load language resources, connect stores, build the search engine
    - Shutdown: Close the Cosmos DB client and credential
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    await init_services(settings)

    yield

    await cleanup_services()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    This function is separated to allow for easier testing and to avoid
    loading settings at module level.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get(
        "/health",
        tags=["health"],
        summary="Health check",
        description="Basic health check endpoint. Returns 200 if the service is running.",
    )
    async def health_check():
        """Health check endpoint.

        Returns a simple status indicating the service is running.
        This endpoint does not check dependencies.
        """
        return {"status": "healthy"}

    @app.get(
        "/ready",
        tags=["health"],
        summary="Readiness check",
        description="Readiness check endpoint. Returns 200 if the service is ready to handle requests.",
    )
    async def readiness_check():
        """Readiness check endpoint.

        Reports whether the search engine and its collaborators are initialized.
        """
        dependencies = {
            "search_engine": "ready" if "search_engine" in _services else "not_initialized",
            "search_cache": "ready" if "search_cache" in _services else "not_initialized",
            "language_resources": (
                "ready" if "language_resources" in _services else "not_initialized"
            ),
            "storage": (
                "cosmos_db" if "cosmos_client" in _services
                else "in_memory" if "question_store" in _services
                else "not_initialized"
            ),
        }

        all_ready = "not_initialized" not in dependencies.values()

        body: dict = {
            "status": "ready" if all_ready else "not_ready",
            "dependencies": dependencies,
        }
        if "search_cache" in _services:
            cache = get_search_cache()
            body["cache"] = {
                "entries": len(cache),
                "hits": cache.stats.hits,
                "misses": cache.stats.misses,
                "hit_rate": round(cache.stats.hit_rate, 3),
            }
        return body

    app.include_router(search.router, prefix="/api/v1")

    return app


# Create the application instance
app = create_app()
