# ============================================================================
# PROVIDER HTTP CLIENT
# ============================================================================
# STATUS: Service - Upstream quest catalog fetch
# PURPOSE: Single authenticated GET against the provider's quest endpoint
# CREATED: 19 OCT 2026
# ============================================================================
"""
Provider Client

Async httpx client for the upstream quest catalog. One attempt per call,
no retries; the caller decides what a failure means.

Every failure is raised as ProviderFetchError:
- non-2xx response (status and body kept on the exception)
- connection or timeout failure
- a body that is not a JSON object
"""

from typing import Any, Dict, Optional

import httpx

from core.config import ProviderDefaults
from core.errors import ProviderFetchError
from core.logging import ComponentType, get_logger

logger = get_logger(__name__, ComponentType.PROVIDER)

# Upstream error bodies are truncated to this many characters
MAX_ERROR_BODY = 2000


class ProviderClient:
    """Fetches the raw quest catalog document from the provider."""

    def __init__(self, settings: ProviderDefaults, timeout: Optional[httpx.Timeout] = None):
        self._settings = settings
        self._timeout = timeout or httpx.Timeout(settings.timeout_seconds)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": self._settings.token,
            "Accept": "application/json",
            "Accept-Language": f"{self._settings.locale},en;q=0.9",
            "X-Discord-Locale": self._settings.locale,
            "User-Agent": self._settings.user_agent,
        }

    async def fetch_catalog(self) -> Dict[str, Any]:
        """
        GET the catalog document.

        Raises:
            ProviderFetchError: transport failure, non-2xx status or bad JSON
        """
        url = self._settings.api_url

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(url, headers=self._headers())
        except httpx.TimeoutException as e:
            logger.error(f"Provider timeout: {url}: {e}")
            raise ProviderFetchError(f"Request to provider timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.error(f"Cannot reach provider at {url}: {e}")
            raise ProviderFetchError(f"Request failed: {e}") from e

        if not resp.is_success:
            body = resp.text[:MAX_ERROR_BODY]
            logger.error(f"Provider returned {resp.status_code}: {body}")
            raise ProviderFetchError(
                f"Provider API returned {resp.status_code}: {body}",
                upstream_status=resp.status_code,
                body=body,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderFetchError(f"Failed to parse response: {e}") from e

        if not isinstance(data, dict):
            raise ProviderFetchError(
                f"Failed to parse response: expected a JSON object, got {type(data).__name__}"
            )

        logger.debug(f"Fetched provider catalog ({len(data.get('quests') or [])} quests)")
        return data


__all__ = ["ProviderClient"]
