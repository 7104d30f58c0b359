"""ONNX Runtime scoring backend.

Opens a serialized ONNX graph and resolves the signature from the graph's
declared inputs and outputs: the first input's name and second axis give
input_name and D, the first output gives output_name.

Patterns applied:
- ScoringBackend ABC implementation
- OrtValue tensors so allocation and release are explicit
- Exception classes ending in "Error"
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import numpy as np
import onnxruntime as ort

from src.core.exceptions import ModelSignatureError
from src.providers.base import ModelSignature, ScoringBackend


DEFAULT_EXECUTION_PROVIDERS = ("CPUExecutionProvider",)


class OnnxBackendError(RuntimeError):
    """Raised when the backend is used before a session exists."""


class OnnxBackend(ScoringBackend):
    """Scoring backend built on onnxruntime.InferenceSession.

    Args:
        providers: Execution providers in priority order.
        intra_op_threads: Threads per operator; 0 lets onnxruntime decide.

    Example:
        >>> backend = OnnxBackend()
        >>> signature = backend.load(Path("model.onnx").read_bytes())
        >>> signature.input_dim
        7
    """

    name = "onnx"

    def __init__(
        self,
        providers: Sequence[str] | None = None,
        intra_op_threads: int = 0,
    ) -> None:
        self._providers = list(providers or DEFAULT_EXECUTION_PROVIDERS)
        self._intra_op_threads = intra_op_threads
        self._session: ort.InferenceSession | None = None

    def load(self, artifact: bytes) -> ModelSignature:
        options = ort.SessionOptions()
        options.intra_op_num_threads = self._intra_op_threads
        session = ort.InferenceSession(
            artifact,
            sess_options=options,
            providers=self._providers,
        )

        inputs = session.get_inputs()
        outputs = session.get_outputs()
        if not inputs:
            raise ModelSignatureError("Model graph declares no inputs")
        if not outputs:
            raise ModelSignatureError("Model graph declares no outputs")

        shape = inputs[0].shape
        # Symbolic dims come back as strings or None
        if len(shape) < 2 or not isinstance(shape[1], int) or shape[1] <= 0:
            raise ModelSignatureError(
                f"Input '{inputs[0].name}' has no fixed feature dimension: {shape}"
            )

        self._session = session
        return ModelSignature(
            input_name=inputs[0].name,
            input_dim=shape[1],
            output_name=outputs[0].name,
        )

    def allocate(self, features: Sequence[float], signature: ModelSignature) -> Any:
        array = np.asarray(features, dtype=np.float32).reshape(1, signature.input_dim)
        return ort.OrtValue.ortvalue_from_numpy(array)

    def execute(self, inputs: Any, signature: ModelSignature) -> list[Any]:
        if self._session is None:
            raise OnnxBackendError("No inference session; call load() first")
        return list(
            self._session.run_with_ort_values(
                [signature.output_name],
                {signature.input_name: inputs},
            )
        )

    def extract(self, output: Any) -> float:
        values = np.asarray(output.numpy()).reshape(-1)
        if values.size == 0:
            raise ValueError("Model produced an empty output tensor")
        return float(values[0])
