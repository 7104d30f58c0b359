"""Linear scoring backend.

Evaluates `x @ weights + bias` with numpy from a small JSON artifact:

    {
        "inputName": "features",
        "outputName": "demand",
        "weights": [0.4, 0.3, 0.2, 0.01, 0.0, 0.0, 0.0],
        "bias": 1.5
    }

D is the number of weights. Useful for light deployments and for
exercising the serving path without an ONNX graph.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import numpy as np
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from src.core.exceptions import ModelSignatureError
from src.providers.base import ModelSignature, ScoringBackend


class LinearArtifact(BaseModel):
    """Schema of the JSON artifact."""

    model_config = ConfigDict(populate_by_name=True)

    input_name: str = Field(default="input", alias="inputName")
    output_name: str = Field(default="output", alias="outputName")
    weights: list[float] = Field(min_length=1)
    bias: float = 0.0


class LinearBackend(ScoringBackend):
    """Scoring backend for linear JSON artifacts."""

    name = "linear"

    def __init__(self) -> None:
        self._weights: np.ndarray | None = None
        self._bias = 0.0

    def load(self, artifact: bytes) -> ModelSignature:
        try:
            parsed = LinearArtifact.model_validate_json(artifact)
        except PydanticValidationError as e:
            raise ModelSignatureError(f"Invalid linear artifact: {e}") from e

        self._weights = np.asarray(parsed.weights, dtype=np.float32).reshape(-1, 1)
        self._bias = parsed.bias
        return ModelSignature(
            input_name=parsed.input_name,
            input_dim=len(parsed.weights),
            output_name=parsed.output_name,
        )

    def allocate(self, features: Sequence[float], signature: ModelSignature) -> Any:
        return np.asarray(features, dtype=np.float32).reshape(1, signature.input_dim)

    def execute(self, inputs: Any, signature: ModelSignature) -> list[Any]:
        if self._weights is None:
            raise RuntimeError("Linear model not loaded; call load() first")
        return [inputs @ self._weights + self._bias]

    def extract(self, output: Any) -> float:
        values = np.asarray(output).reshape(-1)
        if values.size == 0:
            raise ValueError("Model produced an empty output tensor")
        return float(values[0])
