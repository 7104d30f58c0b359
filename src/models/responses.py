"""Response models for the predict and orchestrator services."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.core.constants import SERVICE_VERSION


class HealthResponse(BaseModel):
    """Liveness body; independent of model state."""

    status: str = Field(default="ok", examples=["ok"])
    service: str = Field(examples=["predict", "orchestrator"])
    version: str = Field(default=SERVICE_VERSION, examples=["0.1.0"])


class ReadinessResponse(BaseModel):
    """Readiness body for the predict service.

    The same not-ready body is returned while loading and after a failed
    load.
    """

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    ready: bool
    model_version: str = Field(alias="modelVersion")
    message: str | None = None


class PredictionResult(BaseModel):
    """Successful /predict body.

    Attributes:
        prediction: Model output clamped to be non-negative.
        latency_ms: Milliseconds from request receipt to response assembly.
    """

    model_config = ConfigDict(populate_by_name=True)

    prediction: float = Field(ge=0)
    latency_ms: int = Field(ge=0, alias="latencyMs")


class ErrorResponse(BaseModel):
    """Flat error body shared by every failure status.

    Attributes:
        error: Human-readable message; generic for 500 and 502.
        code: Machine-readable error code.
        ready: Present (always False) on not-ready responses.
    """

    error: str
    code: str | None = None
    ready: bool | None = None


class SagaResult(BaseModel):
    """Aggregated result of one orchestration run.

    prediction_id and timestamp pass through from the predict reply and are
    null when it does not carry them.
    """

    model_config = ConfigDict(populate_by_name=True)

    data_id: Any = Field(alias="dataId")
    prediction_id: Any = Field(default=None, alias="predictionId")
    prediction: float
    timestamp: Any = None
