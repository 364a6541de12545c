# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Provider, cache and catalog settings with environment overrides
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Defaults

Settings consumed by the quest mirror core. Each group is an immutable
dataclass with a ``from_env`` constructor; ``get_settings()`` builds and
caches the full set once per process.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- ConfigurationError on missing or malformed values (fatal at startup)
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from core.errors import ConfigurationError


DEFAULT_PROVIDER_URL = "https://discord.com/api/v10/quests/@me"
DEFAULT_CACHE_KEY = "discord_quests"


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    """Read an integer environment variable, rejecting junk."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class ProviderDefaults:
    """
    Upstream quest provider access.

    The token is sent verbatim in the Authorization header.
    """
    token: str = ""
    api_url: str = DEFAULT_PROVIDER_URL
    timeout_seconds: float = 30.0
    locale: str = "en-US"
    user_agent: str = "quest-mirror/1.0"

    def __repr__(self) -> str:
        # Never leak the credential into logs
        return (
            f"ProviderDefaults(api_url={self.api_url!r}, "
            f"timeout_seconds={self.timeout_seconds}, locale={self.locale!r})"
        )

    @classmethod
    def from_env(cls) -> "ProviderDefaults":
        """Create from environment variables. The token is required."""
        token = os.getenv("PROVIDER_TOKEN") or os.getenv("DISCORD_TOKEN") or ""
        if not token.strip():
            raise ConfigurationError("PROVIDER_TOKEN must be set in environment")

        return cls(
            token=token.strip(),
            api_url=os.getenv("PROVIDER_API_URL", DEFAULT_PROVIDER_URL),
            timeout_seconds=_env_float("PROVIDER_TIMEOUT_SECONDS", 30.0),
            locale=os.getenv("PROVIDER_LOCALE", "en-US"),
            user_agent=os.getenv("PROVIDER_USER_AGENT", "quest-mirror/1.0"),
        )


@dataclass(frozen=True)
class CacheDefaults:
    """
    Cached reconstruction freshness.

    A cached document is stale once its age reaches the duration.
    """
    duration_minutes: int = 30
    cache_key: str = DEFAULT_CACHE_KEY

    @property
    def duration_ms(self) -> int:
        """Cache duration in milliseconds, the unit staleness is compared in."""
        return self.duration_minutes * 60 * 1000

    @classmethod
    def from_env(cls) -> "CacheDefaults":
        return cls(
            duration_minutes=_env_int("CACHE_DURATION_MINUTES", 30),
            cache_key=os.getenv("CACHE_KEY", DEFAULT_CACHE_KEY),
        )


@dataclass(frozen=True)
class CatalogDefaults:
    """Reconstruction window: quests expired longer ago than this are hidden."""
    quest_age_days: int = 30

    @classmethod
    def from_env(cls) -> "CatalogDefaults":
        return cls(quest_age_days=_env_int("QUEST_AGE_DAYS", 30))


# ============================================================================
# GLOBAL SETTINGS INSTANCE
# ============================================================================

@dataclass
class Settings:
    """Container for all configuration groups."""
    provider: ProviderDefaults = field(default_factory=ProviderDefaults)
    cache: CacheDefaults = field(default_factory=CacheDefaults)
    catalog: CatalogDefaults = field(default_factory=CatalogDefaults)

    @classmethod
    def from_env(cls) -> "Settings":
        """Create all settings from environment variables."""
        return cls(
            provider=ProviderDefaults.from_env(),
            cache=CacheDefaults.from_env(),
            catalog=CatalogDefaults.from_env(),
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "DEFAULT_PROVIDER_URL",
    "DEFAULT_CACHE_KEY",
    "ProviderDefaults",
    "CacheDefaults",
    "CatalogDefaults",
    "Settings",
    "get_settings",
    "reset_settings",
]
