"""Scoring backends for the predict service.

Providers:
- base: ScoringBackend ABC, ModelSignature
- onnx_runtime: OnnxBackend (onnxruntime graph)
- linear: LinearBackend (numpy, JSON weights)
- factory: BackendFactory
"""

from src.providers.base import ModelSignature, ScoringBackend
from src.providers.factory import BackendFactory
from src.providers.linear import LinearBackend
from src.providers.onnx_runtime import OnnxBackend


__all__: list[str] = [
    "BackendFactory",
    "LinearBackend",
    "ModelSignature",
    "OnnxBackend",
    "ScoringBackend",
]
