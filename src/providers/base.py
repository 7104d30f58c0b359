"""Base classes for scoring backends.

Defines the ScoringBackend ABC that every concrete backend implements.
The model is an opaque scoring function: a fixed-length float vector in,
one scalar out. Backends never own inference state; ModelHost drives them
and scopes every tensor they allocate.

Patterns applied:
- ABC with @abstractmethod decorator
- Frozen dataclass for the resolved signature
- PEP 604 union syntax (X | None)
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ModelSignature:
    """Input/output contract declared by a loaded artifact.

    Attributes:
        input_name: Name of the single input tensor.
        input_dim: Required feature count D (second axis of the input).
        output_name: Name of the output tensor holding the prediction.
    """

    input_name: str
    input_dim: int
    output_name: str


class ScoringBackend(ABC):
    """Abstract base class for scoring backends.

    Ports and Adapters: ScoringBackend is the port, OnnxBackend and
    LinearBackend are adapters.

    Lifecycle: load() once, then any number of allocate/execute/extract
    cycles. Every object returned by allocate() and execute() is a tensor
    that must be passed to release() exactly once.

    Example:
        class MyBackend(ScoringBackend):
            name = "mine"

            def load(self, artifact):
                ...
    """

    name: str = "abstract"

    @abstractmethod
    def load(self, artifact: bytes) -> ModelSignature:
        """Open an artifact and resolve its signature.

        Args:
            artifact: Raw artifact bytes.

        Returns:
            The declared ModelSignature.

        Raises:
            ModelSignatureError: If the signature is missing or unusable.
            Exception: Any backend initialization failure.
        """
        ...

    @abstractmethod
    def allocate(self, features: Sequence[float], signature: ModelSignature) -> Any:
        """Build a [1, D] float32 input tensor from a feature vector."""
        ...

    @abstractmethod
    def execute(self, inputs: Any, signature: ModelSignature) -> list[Any]:
        """Run the scoring function, returning every output tensor."""
        ...

    @abstractmethod
    def extract(self, output: Any) -> float:
        """Read the single scalar held by an output tensor."""
        ...

    def release(self, tensor: Any) -> None:  # noqa: B027
        """Release a tensor returned by allocate() or execute().

        Default implementation does nothing; host-memory tensors are freed
        once the owning scope drops its reference.
        """
