# ============================================================================
# API MODULE
# ============================================================================
# STATUS: Core - FastAPI routes
# PURPOSE: HTTP API for the mirrored quest catalog
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Module

FastAPI routes for the quest mirror.
"""

from .quest_routes import router as quest_router, set_quest_services
from .health_routes import router as health_router

__all__ = [
    "quest_router",
    "set_quest_services",
    "health_router",
]
