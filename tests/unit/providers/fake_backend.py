"""Fake scoring backend for testing the ScoringBackend interface.

Provides a concrete, deterministic ScoringBackend that records every
allocation and release so tests can assert that no tensor outlives its
inference call.
"""

import threading
from collections.abc import Sequence
from typing import Any

from src.core.exceptions import ModelSignatureError
from src.providers.base import ModelSignature, ScoringBackend


class FakeTensor:
    """Stand-in for a native tensor handle."""

    def __init__(self, values: Sequence[float]) -> None:
        self.values = list(values)
        self.released = False


class FakeBackend(ScoringBackend):
    """Fake implementation of ScoringBackend for testing.

    Args:
        input_dim: Feature dimension D reported by load().
        output: Raw value returned by every inference.
        fail_on: Stage that raises ("load", "allocate", "execute",
            "extract", "release"); may be changed after load.
    """

    name = "fake"

    def __init__(
        self,
        input_dim: int = 7,
        output: float = 42.5,
        fail_on: str | None = None,
    ) -> None:
        self.input_dim = input_dim
        self.output = output
        self.fail_on = fail_on
        self.artifact: bytes | None = None
        self.calls: list[tuple[float, ...]] = []
        self.allocated = 0
        self.released = 0
        self._lock = threading.Lock()

    def _count(self, attribute: str) -> None:
        with self._lock:
            setattr(self, attribute, getattr(self, attribute) + 1)

    @property
    def outstanding(self) -> int:
        """Tensors allocated but not yet released."""
        return self.allocated - self.released

    def load(self, artifact: bytes) -> ModelSignature:
        if self.fail_on == "load":
            raise ModelSignatureError("Fake artifact rejected")
        self.artifact = artifact
        return ModelSignature(
            input_name="features",
            input_dim=self.input_dim,
            output_name="demand",
        )

    def allocate(self, features: Sequence[float], signature: ModelSignature) -> Any:
        if self.fail_on == "allocate":
            raise RuntimeError("allocation failed")
        self.calls.append(tuple(features))
        self._count("allocated")
        return FakeTensor(features)

    def execute(self, inputs: Any, signature: ModelSignature) -> list[Any]:
        if self.fail_on == "execute":
            raise RuntimeError("execution failed")
        self._count("allocated")
        return [FakeTensor([self.output])]

    def extract(self, output: Any) -> float:
        if self.fail_on == "extract":
            raise ValueError("extraction failed")
        return output.values[0]

    def release(self, tensor: Any) -> None:
        self._count("released")
        tensor.released = True
        if self.fail_on == "release":
            raise RuntimeError("release failed")
