# ============================================================================
# QUEST ROUTES TESTS
# ============================================================================
# STATUS: Tests - HTTP surface
# PURPOSE: Verify GET /v1/quests responses, error bodies and app-level routes
# CREATED: 19 OCT 2026
# ============================================================================
"""
Quest Routes Tests

Uses FastAPI TestClient with a mocked CatalogCacheService. The main app is
exercised without its lifespan, so no database or provider is touched.

Run with:
    pytest tests/test_quest_routes.py -v
"""

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from __version__ import __version__
from api.quest_routes import router, set_quest_services
from core.errors import (
    MappingError,
    ProviderFetchError,
    QuestNotFoundError,
    StorageError,
)


# ============================================================================
# FIXTURES
# ============================================================================

def _make_test_app(cache_service_mock):
    """Create a test FastAPI app with quest routes and mocked service."""
    app = FastAPI()
    app.include_router(router, prefix="/v1")
    set_quest_services(cache_service_mock)
    return app


@pytest.fixture(autouse=True)
def _reset_services():
    yield
    set_quest_services(None)


# ============================================================================
# GET /v1/quests
# ============================================================================

class TestGetQuests:

    def test_returns_document(self):
        svc = AsyncMock()
        svc.get_catalog.return_value = {"quests": [{"id": "1"}]}
        client = TestClient(_make_test_app(svc))

        resp = client.get("/v1/quests")

        assert resp.status_code == 200
        assert resp.json() == {"quests": [{"id": "1"}]}

    def test_provider_failure_is_502(self):
        svc = AsyncMock()
        svc.get_catalog.side_effect = ProviderFetchError(
            "Provider API returned 401: Unauthorized", upstream_status=401
        )
        client = TestClient(_make_test_app(svc))

        resp = client.get("/v1/quests")

        assert resp.status_code == 502
        assert resp.json() == {
            "error": "Provider API returned 401: Unauthorized",
            "status": 502,
        }

    def test_storage_failure_is_500(self):
        svc = AsyncMock()
        svc.get_catalog.side_effect = StorageError("Database error during list recent quests")
        client = TestClient(_make_test_app(svc))

        resp = client.get("/v1/quests")

        assert resp.status_code == 500
        assert resp.json()["status"] == 500
        assert "list recent quests" in resp.json()["error"]

    def test_mapping_failure_is_500(self):
        svc = AsyncMock()
        svc.get_catalog.side_effect = MappingError("Quest 9: bad timestamp", quest_id="9")
        client = TestClient(_make_test_app(svc))

        resp = client.get("/v1/quests")

        assert resp.status_code == 500
        assert resp.json() == {"error": "Quest 9: bad timestamp", "status": 500}

    def test_not_found_is_storage_error(self):
        svc = AsyncMock()
        svc.get_catalog.side_effect = QuestNotFoundError("42")
        client = TestClient(_make_test_app(svc))

        resp = client.get("/v1/quests")

        assert resp.status_code == 500
        assert resp.json()["error"] == "Quest 42 not found"

    def test_unexpected_failure_is_structured_500(self):
        svc = AsyncMock()
        svc.get_catalog.side_effect = KeyError("quests")
        client = TestClient(_make_test_app(svc))

        resp = client.get("/v1/quests")

        assert resp.status_code == 500
        assert resp.json() == {"error": "'quests'", "status": 500}

    def test_uninitialized_service_is_503(self):
        app = FastAPI()
        app.include_router(router, prefix="/v1")
        set_quest_services(None)

        resp = TestClient(app).get("/v1/quests")

        assert resp.status_code == 503
        assert resp.json()["status"] == 503


# ============================================================================
# MAIN APP
# ============================================================================

class TestMainApp:

    def _client(self):
        from main import app
        return TestClient(app)

    def test_health(self):
        resp = self._client().get("/health")

        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": __version__}

    def test_unknown_route_is_structured_404(self):
        resp = self._client().get("/v1/nothing-here")

        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "Not Found"
        assert body["status"] == 404
        assert "/v1/nothing-here" in body["message"]

    def test_quests_mounted_under_v1(self):
        svc = AsyncMock()
        svc.get_catalog.return_value = {"quests": []}
        set_quest_services(svc)

        resp = self._client().get("/v1/quests")

        assert resp.status_code == 200
        assert resp.json() == {"quests": []}
