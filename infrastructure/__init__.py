# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# STATUS: Infrastructure - Schema bootstrap and concurrency control
# PURPOSE: Database schema deployment and sync locking
# CREATED: 19 OCT 2026
# ============================================================================
"""
Infrastructure module for the quest mirror.

Provides:
- DatabaseInitializer: Bootstrap database schema from Pydantic models
- LockService / SingleFlight: Coalesce concurrent sync cycles per cache key

Usage:
    from infrastructure import DatabaseInitializer, LockService, SingleFlight

    result = await DatabaseInitializer(pool).initialize_all_async()
    flight = SingleFlight(LockService(pool))
"""

from infrastructure.database_initializer import (
    DatabaseInitializer,
    InitializationResult,
    StepResult,
)
from infrastructure.locking import (
    LockService,
    SingleFlight,
)

__all__ = [
    # Database Initialization
    'DatabaseInitializer',
    'InitializationResult',
    'StepResult',
    # Locking
    'LockService',
    'SingleFlight',
]
