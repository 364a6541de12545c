# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for the quest mirror.
"""

from core.config.defaults import (
    ProviderDefaults,
    CacheDefaults,
    CatalogDefaults,
    Settings,
    get_settings,
    reset_settings,
)

__all__ = [
    "ProviderDefaults",
    "CacheDefaults",
    "CatalogDefaults",
    "Settings",
    "get_settings",
    "reset_settings",
]
