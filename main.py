# ============================================================================
# QUEST MIRROR - MAIN APPLICATION
# ============================================================================
# STATUS: Core - FastAPI application entry point
# PURPOSE: Wire the pool, services and routes of the quest mirror
# CREATED: 19 OCT 2026
# ============================================================================
"""
Quest Mirror Main Application

FastAPI application that:
1. Serves the mirrored quest catalog at GET /v1/quests
2. Keeps the catalog in a normalized PostgreSQL store
3. Refreshes it from the provider when the cached copy goes stale

Usage:
    uvicorn main:app --host 0.0.0.0 --port 3000
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from __version__ import __version__, BUILD_DATE
from core.config import get_settings
from core.errors import QuestMirrorError
from core.logging import configure_logging, get_logger
from repositories import CacheRepository, QuestRepository
from repositories.database import init_pool, close_pool
from infrastructure import DatabaseInitializer, LockService, SingleFlight
from services import CatalogCacheService, ProviderClient, QuestSyncService
from api import health_router, quest_router, set_quest_services

configure_logging(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    json_output=os.environ.get("LOG_FORMAT", "").lower() == "json",
)
logger = get_logger(__name__)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() == "true"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Initializes services on startup, cleans up on shutdown.
    """
    logger.info(f"Starting Quest Mirror v{__version__} (Build {BUILD_DATE})")

    # Missing provider token is fatal here
    settings = get_settings()
    logger.info(f"Provider: {settings.provider!r}")

    pool = await init_pool()
    logger.info("Database pool initialized")

    # Optional: Bootstrap schema on startup
    if _env_flag("AUTO_BOOTSTRAP_SCHEMA"):
        logger.info("Auto-bootstrap enabled, deploying schema...")
        result = await DatabaseInitializer(pool).initialize_all_async()
        if result.success:
            logger.info("Schema bootstrap completed successfully")
        else:
            logger.warning(f"Schema bootstrap had issues: {result.errors}")

    quest_repo = QuestRepository(pool)
    cache_repo = CacheRepository(pool)
    sync_service = QuestSyncService(
        pool,
        settings,
        provider_client=ProviderClient(settings.provider),
        quest_repo=quest_repo,
        cache_repo=cache_repo,
    )
    cache_service = CatalogCacheService(
        settings,
        sync_service,
        cache_repo,
        single_flight=SingleFlight(LockService(pool)),
    )
    set_quest_services(cache_service)

    if _env_flag("INITIAL_SYNC", "true"):
        logger.info("Running initial sync...")
        try:
            outcome = await cache_service.refresh()
            logger.info(
                f"Initial sync complete: {outcome.new_count} new, "
                f"{outcome.skipped_count} already stored"
            )
        except QuestMirrorError as e:
            logger.warning(f"Initial sync failed, serving on demand: {e}")

    yield

    # Shutdown
    logger.info("Shutting down Quest Mirror...")
    set_quest_services(None)
    await close_pool()
    logger.info("Quest Mirror stopped")


# Create FastAPI app
app = FastAPI(
    title="Quest Mirror",
    description="Normalized mirror of the provider quest catalog",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Unknown routes and other HTTP errors as structured JSON."""
    if exc.status_code == 404:
        return JSONResponse(
            status_code=404,
            content={
                "error": "Not Found",
                "message": f"The requested resource {request.url.path} was not found",
                "status": 404,
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "status": exc.status_code},
    )


# Health check routes (no prefix - /health, /livez)
app.include_router(health_router)

# Catalog routes
app.include_router(quest_router, prefix="/v1")


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "Quest Mirror",
        "version": __version__,
        "build_date": BUILD_DATE,
        "status": "running",
        "endpoints": ["/v1/quests", "/health"],
    }


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "3000"))

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=os.environ.get("RELOAD", "false").lower() == "true",
    )
