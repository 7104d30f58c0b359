"""Unit tests for health API routes.

Tests the /health (liveness) and /ready (readiness) endpoints.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from src.services.model_host import ModelHost
from tests.unit.providers.fake_backend import FakeBackend


# =============================================================================
# Constants (S1192: Avoid duplicated string literals)
# =============================================================================

STATUS_OK = "ok"
HEALTH_ENDPOINT = "/health"
READY_ENDPOINT = "/ready"
MODEL_VERSION = "v1.0"
NOT_READY_MESSAGE = "Model is not ready"


def _app(model_host: ModelHost | None = None, service_name: str | None = "predict") -> FastAPI:
    from src.api.routes.health import router

    app = FastAPI(title="health-test")
    app.include_router(router)
    app.state.model_host = model_host
    app.state.service_name = service_name
    return app


def _client(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


# =============================================================================
# TestHealthEndpoint
# =============================================================================


class TestHealthEndpoint:
    """Test /health liveness endpoint."""

    def test_health_returns_200(self) -> None:
        response = TestClient(_app()).get(HEALTH_ENDPOINT)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": STATUS_OK, "service": "predict", "version": "0.1.0"}

    def test_health_ok_while_model_loading(self) -> None:
        host = ModelHost(FakeBackend(), model_version=MODEL_VERSION)

        response = TestClient(_app(host)).get(HEALTH_ENDPOINT)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == STATUS_OK

    def test_health_falls_back_to_app_title(self) -> None:
        response = TestClient(_app(service_name=None)).get(HEALTH_ENDPOINT)

        assert response.json()["service"] == "health-test"


# =============================================================================
# TestReadinessEndpoint
# =============================================================================


class TestReadinessEndpoint:
    """Test /ready readiness endpoint."""

    @pytest.fixture
    async def failed_host(self, fake_artifact_path: Path) -> ModelHost:
        host = ModelHost(FakeBackend(fail_on="load"), model_version=MODEL_VERSION)
        await host.load(str(fake_artifact_path))
        return host

    async def test_ready_returns_200_when_model_ready(self, ready_host: ModelHost) -> None:
        async with _client(_app(ready_host)) as client:
            response = await client.get(READY_ENDPOINT)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"ready": True, "modelVersion": MODEL_VERSION}

    async def test_ready_returns_503_while_loading(self, loading_host: ModelHost) -> None:
        async with _client(_app(loading_host)) as client:
            response = await client.get(READY_ENDPOINT)

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json() == {
            "ready": False,
            "modelVersion": MODEL_VERSION,
            "message": NOT_READY_MESSAGE,
        }

    async def test_failed_load_looks_like_loading(
        self, loading_host: ModelHost, failed_host: ModelHost
    ) -> None:
        async with _client(_app(loading_host)) as client:
            loading = await client.get(READY_ENDPOINT)
        async with _client(_app(failed_host)) as client:
            failed = await client.get(READY_ENDPOINT)

        assert failed.status_code == loading.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert failed.json() == loading.json()

    async def test_ready_without_host_returns_503(self) -> None:
        async with _client(_app(None)) as client:
            response = await client.get(READY_ENDPOINT)

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["ready"] is False

    async def test_ready_flips_after_load(
        self, loading_host: ModelHost, fake_artifact_path: Path
    ) -> None:
        app = _app(loading_host)

        async with _client(app) as client:
            before = await client.get(READY_ENDPOINT)
            await loading_host.load(str(fake_artifact_path))
            after = await client.get(READY_ENDPOINT)

        assert before.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert after.status_code == status.HTTP_200_OK
