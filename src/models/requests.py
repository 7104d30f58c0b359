"""Request models for the predict and orchestrator services.

Patterns applied:
- Pydantic v2 models with camelCase aliases matching the wire contract
- frozen=True for values that must not change after construction
- PEP 604 union syntax (X | None)
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PredictionMeta(BaseModel):
    """Metadata accompanying a feature vector.

    Attributes:
        feature_count: Number of features the caller claims to send.
        data_id: Opaque identifier of the acquired record.
        source: Name of the calling component.
        correlation_id: Optional identifier for tracing across services.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    feature_count: int = Field(alias="featureCount")
    data_id: Any = Field(default=None, alias="dataId")
    source: str | None = None
    correlation_id: Any = Field(default=None, alias="correlationId")


class PredictionRequest(BaseModel):
    """A validated prediction request.

    Built only after the gateway's ordered checks have passed, so
    len(features) == meta.feature_count == model input dimension.
    """

    model_config = ConfigDict(frozen=True)

    features: tuple[float, ...]
    meta: PredictionMeta


class FeatureRecord(BaseModel):
    """The part of an Acquire reply consumed by the saga.

    Other fields Acquire reports (featureCount, scalerVersion, createdAt)
    are ignored; feature values are forwarded untouched and validated by
    the predict service.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    data_id: Any = Field(alias="dataId")
    features: list[Any]
