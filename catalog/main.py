"""
FastAPI Application Entry Point

This module creates and configures the FastAPI application.

Key Concepts:
=============

1. Application Factory Pattern
   - create_app() function returns configured app
   - Cache and search backends can be injected (used by the tests)

2. Lifespan Events
   - startup: build the Redis and Elasticsearch backends, connect them
     through the health monitor, create missing indices
   - shutdown: close both clients
   - Neither backend is required: a failed connection is logged and the
     API keeps serving from the database

3. Exception Handlers
   - NotFoundError -> 404, CatalogValidationError -> 400,
     StoreUnavailableError -> 503
   - Database errors and anything unexpected -> 500
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from catalog.config import get_settings
from catalog.exceptions import (
    CatalogError,
    CatalogValidationError,
    NotFoundError,
    StoreUnavailableError,
)
from catalog.routers import (
    authors_router,
    books_router,
    reviews_router,
    sales_router,
    search_router,
)
from catalog.services.cache import CacheBackend, NullCache, RedisCache
from catalog.services.collections import SEARCHABLE_COLLECTIONS
from catalog.services.coordinator import CacheAsideCoordinator
from catalog.services.elasticsearch import ElasticsearchIndex, NullSearchIndex, SearchIndex
from catalog.services.health import Backend, HealthMonitor
from catalog.services.search import SearchMirror

# =============================================================================
# Logging Configuration
# =============================================================================
# Configure logging before creating the app
settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Backend Construction
# =============================================================================
def build_cache_backend() -> CacheBackend:
    if not settings.cache_enabled:
        return NullCache()
    return RedisCache.from_settings(settings)


def build_search_index() -> SearchIndex:
    if not settings.elasticsearch_enabled:
        return NullSearchIndex()
    return ElasticsearchIndex.from_settings(settings)


# =============================================================================
# Lifespan Events
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Code before yield: Runs on startup
    Code after yield: Runs on shutdown
    """
    # ----- STARTUP -----
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"API version: {settings.api_version}")

    cache: CacheBackend = app.state.cache_backend
    if cache is None:
        cache = build_cache_backend()
    search_index: SearchIndex = app.state.search_index
    if search_index is None:
        search_index = build_search_index()

    health = HealthMonitor(
        cache,
        search_index,
        retry_interval=settings.cache_retry_interval,
        probe_timeout=settings.elasticsearch_timeout,
    )
    app.state.health = health
    app.state.coordinator = CacheAsideCoordinator(cache, health, ttl=settings.cache_ttl)
    app.state.mirror = SearchMirror(search_index, health, prefix=settings.elasticsearch_index_prefix)

    # Connect Redis
    if await health.connect(Backend.CACHE):
        logger.info("Redis caching enabled")
    else:
        logger.warning("Redis unavailable - caching disabled")

    # Connect Elasticsearch
    if await health.connect(Backend.SEARCH):
        await app.state.mirror.ensure_indices()
        logger.info("Elasticsearch connected - index search enabled")
    else:
        logger.warning("Elasticsearch unavailable - falling back to database search")

    yield  # Application runs here

    # ----- SHUTDOWN -----
    logger.info(f"Shutting down {settings.app_name}...")
    await search_index.close()
    cache.close()


# =============================================================================
# Application Factory
# =============================================================================
def create_app(
    cache_backend: CacheBackend | None = None,
    search_index: SearchIndex | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        cache_backend: Cache to use instead of the one built from settings
        search_index: Search index to use instead of the one built from settings

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.app_name,
        description="""
## Catalog API

A RESTful API for managing a catalog of authors, books, reviews and sales.

### Features
- **Authors, Books, Reviews, Sales**: CRUD with partial updates
- **Rankings**: top rated and top selling books
- **Search**: full-text search with a database fallback

Redis and Elasticsearch are optional accelerants; the API keeps working
when either is down.
        """,
        version=settings.api_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.cache_backend = cache_backend
    app.state.search_index = search_index

    # -------------------------------------------------------------------------
    # CORS Middleware
    # -------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------
    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": exc.message},
        )

    @app.exception_handler(CatalogValidationError)
    async def validation_handler(request: Request, exc: CatalogValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": exc.message, **({"errors": exc.details} if exc.details else {})},
        )

    @app.exception_handler(StoreUnavailableError)
    async def store_unavailable_handler(
        request: Request,
        exc: StoreUnavailableError,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "The database is unavailable. Please try again later."},
        )

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
        logger.error(f"Catalog error: {exc.message}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": exc.message},
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(
        request: Request,
        exc: SQLAlchemyError,
    ) -> JSONResponse:
        """
        Handle SQLAlchemy database errors.

        Logs the actual error for debugging while hiding details from users.
        """
        logger.error(f"Database error: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "A database error occurred. Please try again later."},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """
        Catch-all exception handler.

        In production, hide internal errors from users.
        In debug mode, show more details.
        """
        logger.error(f"Unhandled error: {exc}", exc_info=True)

        if settings.debug:
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"detail": str(exc)},
            )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "An internal error occurred."},
        )

    # -------------------------------------------------------------------------
    # Register Routers
    # -------------------------------------------------------------------------
    api_prefix = f"/api/{settings.api_version}"

    app.include_router(authors_router, prefix=api_prefix)
    app.include_router(books_router, prefix=api_prefix)
    app.include_router(reviews_router, prefix=api_prefix)
    app.include_router(sales_router, prefix=api_prefix)
    app.include_router(search_router, prefix=api_prefix)

    # -------------------------------------------------------------------------
    # Health Check Endpoint
    # -------------------------------------------------------------------------
    @app.get(
        "/health",
        tags=["Health"],
        summary="Health check",
        description="Check if the API is running and which accelerants are usable.",
    )
    async def health_check(request: Request) -> dict:
        """
        Health check endpoint.

        The API is healthy as long as it runs; Redis and Elasticsearch
        are reported but never make it unhealthy.
        """
        health: HealthMonitor = request.app.state.health
        mirror: SearchMirror = request.app.state.mirror

        search_healthy = await health.search_available()
        cache_healthy = health.cache_available()

        document_counts: dict[str, int] = {}
        if search_healthy:
            for name, collection in SEARCHABLE_COLLECTIONS.items():
                try:
                    document_counts[name] = await mirror.index.count(mirror.index_name(collection))
                except CatalogError as e:
                    logger.warning(f"Could not count documents in {name}: {e}")

        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.api_version,
            "backends": health.snapshot(),
            "cache": {
                "enabled": settings.cache_enabled,
                "healthy": cache_healthy,
                **(request.app.state.coordinator.cache.stats() if cache_healthy else {}),
            },
            "elasticsearch": {
                "enabled": settings.elasticsearch_enabled,
                "healthy": search_healthy,
                "document_counts": document_counts,
            },
        }

    @app.get(
        "/",
        tags=["Root"],
        summary="API root",
        description="Welcome message and API information.",
    )
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    return app


# =============================================================================
# Application Instance
# =============================================================================
# This is what uvicorn imports: uvicorn catalog.main:app
app = create_app()


# =============================================================================
# Development Server
# =============================================================================
# python -m catalog.main
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "catalog.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
