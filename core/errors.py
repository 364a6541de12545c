# ============================================================================
# ERROR TAXONOMY
# ============================================================================
# STATUS: Foundation - Exception hierarchy
# PURPOSE: Typed failures surfaced by storage, provider, mapping and config
# CREATED: 19 OCT 2026
# ============================================================================
"""
Error taxonomy for the quest mirror.

Every failure that can reach the request boundary is a QuestMirrorError
carrying the HTTP status code it maps to. The route layer turns these into
``{"error": <message>, "status": <code>}`` bodies.

    StorageError        500  any read/write against PostgreSQL failed
    QuestNotFoundError  500  requested quest id is not stored
    ProviderFetchError  502  upstream non-2xx, transport error, bad JSON
    MappingError        500  provider document does not fit the expected shape
    ConfigurationError  500  required settings absent or invalid (startup)
"""

from typing import Optional


class QuestMirrorError(Exception):
    """Base class for all quest mirror failures."""

    status_code: int = 500
    kind: str = "internal_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_response(self) -> dict:
        """Structured error body returned to HTTP clients."""
        return {"error": self.message, "status": self.status_code}


class StorageError(QuestMirrorError):
    """A read or write against the normalized store failed."""

    kind = "storage_error"


class QuestNotFoundError(StorageError):
    """Raised when a quest id is not present in the store."""

    kind = "not_found"

    def __init__(self, quest_id: str):
        self.quest_id = quest_id
        super().__init__(f"Quest {quest_id} not found")


class ProviderFetchError(QuestMirrorError):
    """The upstream quest provider could not be read."""

    status_code = 502
    kind = "provider_error"

    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.upstream_status = upstream_status
        self.body = body
        super().__init__(message)


class MappingError(QuestMirrorError):
    """A provider document (or one quest in it) does not fit the expected shape."""

    kind = "mapping_error"

    def __init__(self, message: str, quest_id: Optional[str] = None):
        self.quest_id = quest_id
        super().__init__(message)


class ConfigurationError(QuestMirrorError):
    """Required settings are missing or invalid. Fatal at startup."""

    kind = "configuration_error"


__all__ = [
    "QuestMirrorError",
    "StorageError",
    "QuestNotFoundError",
    "ProviderFetchError",
    "MappingError",
    "ConfigurationError",
]
