"""pytest configuration and fixtures for forecast service tests.

This module provides shared fixtures for unit and integration tests.
Fixtures are minimal and focused: a fake backend, small artifacts on
disk, a ready ModelHost and apps wired around them.
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient

from tests.unit.providers.fake_backend import FakeBackend


if TYPE_CHECKING:
    from fastapi import FastAPI

    from src.core.config import PredictSettings
    from src.services.model_host import ModelHost

# =============================================================================
# Constants (S1192: Avoid duplicated string literals)
# =============================================================================

TEST_MODEL_VERSION = "v1.0"
TEST_INPUT_DIM = 7
TEST_BASE_URL = "http://testserver"
LINEAR_WEIGHTS = [0.5, 0.25, 0.1, 0.05, 0.0, 0.0, 0.0]
LINEAR_BIAS = 1.0


# =============================================================================
# Markers
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (both apps wired)")


# =============================================================================
# Payload Fixtures
# =============================================================================


@pytest.fixture
def valid_payload() -> dict[str, Any]:
    """A /predict body that passes every check for D=7."""
    return {
        "features": [float(i) for i in range(TEST_INPUT_DIM)],
        "meta": {"featureCount": TEST_INPUT_DIM, "dataId": "abc", "source": "test"},
    }


# =============================================================================
# Artifact Fixtures
# =============================================================================


@pytest.fixture
def linear_artifact() -> dict[str, Any]:
    """Linear artifact document with D=7."""
    return {
        "inputName": "features",
        "outputName": "demand",
        "weights": LINEAR_WEIGHTS,
        "bias": LINEAR_BIAS,
    }


@pytest.fixture
def linear_artifact_path(tmp_path: Path, linear_artifact: dict[str, Any]) -> Path:
    """Linear artifact written to a temporary model directory."""
    path = tmp_path / "model.json"
    path.write_text(json.dumps(linear_artifact))
    return path


@pytest.fixture
def fake_artifact_path(tmp_path: Path) -> Path:
    """Opaque bytes accepted by FakeBackend."""
    path = tmp_path / "model.onnx"
    path.write_bytes(b"fake-model")
    return path


# =============================================================================
# ModelHost Fixtures
# =============================================================================


@pytest.fixture
def fake_backend() -> FakeBackend:
    """Fresh FakeBackend with D=7 and output 42.5."""
    return FakeBackend(input_dim=TEST_INPUT_DIM)


@pytest.fixture
def loading_host(fake_backend: FakeBackend) -> ModelHost:
    """ModelHost that has not been loaded."""
    from src.services.model_host import ModelHost

    return ModelHost(fake_backend, model_version=TEST_MODEL_VERSION)


@pytest.fixture
async def ready_host(loading_host: ModelHost, fake_artifact_path: Path) -> ModelHost:
    """ModelHost loaded from the fake artifact."""
    await loading_host.load(str(fake_artifact_path))
    assert loading_host.is_ready()
    return loading_host


# =============================================================================
# App Fixtures
# =============================================================================


@pytest.fixture
def predict_settings(tmp_path: Path) -> PredictSettings:
    """Predict settings that never load a model on their own."""
    from src.core.config import PredictSettings

    return PredictSettings(
        model_dir=str(tmp_path),
        model_version=TEST_MODEL_VERSION,
        autoload_model=False,
        tracing_enabled=False,
    )


@pytest.fixture
def predict_app(predict_settings: PredictSettings, ready_host: ModelHost) -> FastAPI:
    """Predict application around a ready host."""
    from src.main import create_app

    return create_app(predict_settings, model_host=ready_host)


@pytest.fixture
async def async_client(predict_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for the predict app.

    Args:
        predict_app: FastAPI application.

    Yields:
        AsyncClient for making test requests.
    """
    transport = ASGITransport(app=predict_app)
    async with AsyncClient(transport=transport, base_url=TEST_BASE_URL) as client:
        yield client
