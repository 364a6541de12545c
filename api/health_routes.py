# ============================================================================
# HEALTH ROUTES
# ============================================================================
# STATUS: Core - Liveness endpoints
# PURPOSE: Report process liveness and version
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Routes

Endpoints:
- GET /health - Status and version
- GET /livez  - Bare liveness probe
"""

from fastapi import APIRouter

from __version__ import __version__

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    return {"status": "ok", "version": __version__}


@router.get("/livez")
async def livez():
    return {"status": "alive"}
