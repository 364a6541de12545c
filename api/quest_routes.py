# ============================================================================
# QUEST ROUTES
# ============================================================================
# STATUS: Core - Public catalog HTTP endpoint
# PURPOSE: Serve the mirrored quest catalog in the provider's shape
# CREATED: 19 OCT 2026
# ============================================================================
"""
Quest Routes

Endpoints:
- GET /v1/quests - Catalog document, refreshed first when the cache is stale

Failures come back as ``{"error": <message>, "status": <code>}`` with:
- 502 when the provider cannot be read
- 500 for storage, mapping or unexpected failures
- 503 before the services are wired
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from core.errors import QuestMirrorError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["quests"])


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================

_cache_service = None


def set_quest_services(cache_service):
    """Called by main.py at startup to inject the catalog cache service."""
    global _cache_service
    _cache_service = cache_service


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "status": status_code},
    )


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("/quests")
async def get_quests():
    """
    Return the quest catalog.

    Serves the cached document while it is fresh; otherwise runs one
    sync cycle against the provider and returns its result.
    """
    if _cache_service is None:
        return _error_response(503, "Quest service not initialized")

    try:
        return await _cache_service.get_catalog()
    except QuestMirrorError as e:
        logger.error(f"GET /quests failed ({e.kind}): {e.message}")
        return JSONResponse(status_code=e.status_code, content=e.to_response())
    except Exception as e:
        logger.exception(f"GET /quests failed unexpectedly: {e}")
        return _error_response(500, str(e))
