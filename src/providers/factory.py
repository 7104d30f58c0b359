"""Scoring backend factory.

Creates the backend named by PREDICT_MODEL_BACKEND, allowing deployments
to switch artifact formats without touching ModelHost.
"""

from __future__ import annotations

from src.core.exceptions import ConfigurationError
from src.providers.base import ScoringBackend
from src.providers.linear import LinearBackend
from src.providers.onnx_runtime import OnnxBackend


# =============================================================================
# Backend Constants
# =============================================================================
BACKEND_ONNX = "onnx"
BACKEND_LINEAR = "linear"


class BackendFactory:
    """Factory for creating scoring backends by name.

    Supports:
    - Name normalization ("ONNX" -> "onnx")
    - Custom backend registration via register_backend()
    - Clear error messages for unknown backends

    Example:
        >>> backend = BackendFactory.create_backend("onnx")
        >>> isinstance(backend, OnnxBackend)
        True
    """

    _registry: dict[str, type[ScoringBackend]] = {
        BACKEND_ONNX: OnnxBackend,
        BACKEND_LINEAR: LinearBackend,
    }

    @classmethod
    def create_backend(cls, name: str) -> ScoringBackend:
        """Create a backend instance.

        Args:
            name: Backend name, case-insensitive.

        Returns:
            A fresh, unloaded ScoringBackend.

        Raises:
            ConfigurationError: If the name is empty or unknown.
        """
        normalized = (name or "").strip().lower()
        if normalized not in cls._registry:
            raise ConfigurationError(
                f"Unknown scoring backend: '{name}'. "
                f"Supported backends: {cls.get_registered_backends()}",
                setting="model_backend",
            )
        return cls._registry[normalized]()

    @classmethod
    def register_backend(
        cls,
        name: str,
        backend_class: type[ScoringBackend],
    ) -> None:
        """Register a backend class under a name.

        Args:
            name: Backend name; stored lowercased.
            backend_class: ScoringBackend subclass to instantiate.
        """
        cls._registry[name.lower()] = backend_class

    @classmethod
    def get_registered_backends(cls) -> list[str]:
        """Return the registered backend names."""
        return sorted(cls._registry)
