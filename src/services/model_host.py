"""Model host service owning the scoring model lifecycle.

This module provides:
- ModelState: the loading -> ready | failed state machine
- TensorScope: scoped ownership of every tensor allocated by one inference
- ModelHost: load / warm-up / readiness / single-request inference

ModelHost is constructed once per process and shared by reference with the
HTTP layer through app.state. The state attribute has exactly one writer
(load) and is written once, so readers need no lock; every request path
re-reads it because the server accepts connections before load completes.
"""

from __future__ import annotations

import asyncio
import math
import threading
import time
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from enum import Enum
from types import TracebackType
from typing import Any

import httpx

from src.core.constants import (
    DEFAULT_ARTIFACT_CONNECT_RETRIES,
    DEFAULT_ARTIFACT_TIMEOUT_SECONDS,
    DEFAULT_MODEL_VERSION,
)
from src.core.exceptions import (
    FatalLoadError,
    InferenceExecutionError,
    NotReadyError,
    ValidationError,
)
from src.core.logging import get_logger
from src.providers.base import ModelSignature, ScoringBackend
from src.services.artifacts import fetch_artifact


logger = get_logger(__name__)


# =============================================================================
# State Machine
# =============================================================================


class ModelState(str, Enum):
    """Lifecycle state of the hosted model.

    LOADING is initial; READY and FAILED are terminal.
    """

    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


# =============================================================================
# Tensor Scoping
# =============================================================================


class TensorLedger:
    """Thread-safe count of tensors held by open scopes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._live = 0

    @property
    def live(self) -> int:
        return self._live

    def acquired(self, count: int = 1) -> None:
        with self._lock:
            self._live += count

    def released(self, count: int = 1) -> None:
        with self._lock:
            self._live -= count


class TensorScope:
    """Owns the tensors allocated during a single inference call.

    Every tracked tensor is released when the block exits, whether it exits
    normally or through an exception. Release failures are logged and do not
    replace the exception that is already propagating.

    Example:
        with TensorScope(backend, ledger) as scope:
            inputs = scope.track(backend.allocate(features, signature))
            outputs = scope.track_all(backend.execute(inputs, signature))
            value = backend.extract(outputs[0])
    """

    def __init__(self, backend: ScoringBackend, ledger: TensorLedger) -> None:
        self._backend = backend
        self._ledger = ledger
        self._tensors: list[Any] = []

    def __enter__(self) -> TensorScope:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def track(self, tensor: Any) -> Any:
        """Take ownership of one tensor and return it."""
        self._tensors.append(tensor)
        self._ledger.acquired()
        return tensor

    def track_all(self, tensors: Iterable[Any]) -> list[Any]:
        """Take ownership of several tensors and return them as a list."""
        return [self.track(tensor) for tensor in tensors]

    def close(self) -> None:
        """Release tracked tensors, newest first."""
        while self._tensors:
            tensor = self._tensors.pop()
            try:
                self._backend.release(tensor)
            except Exception as e:
                logger.warning(
                    "Tensor release failed",
                    backend=self._backend.name,
                    error=repr(e),
                )
            finally:
                self._ledger.released()


@contextmanager
def _inference_stage(stage: str) -> Iterator[None]:
    """Convert backend failures in one stage to InferenceExecutionError."""
    try:
        yield
    except InferenceExecutionError:
        raise
    except Exception as e:
        raise InferenceExecutionError(
            f"Inference failed during {stage}: {e!r}",
            stage=stage,
        ) from e


# =============================================================================
# ModelHost Service
# =============================================================================


class ModelHost:
    """Owns the opaque scoring function and its lifecycle state.

    Attributes:
        model_version: Version string reported by the readiness endpoint.
    """

    def __init__(
        self,
        backend: ScoringBackend,
        model_version: str = DEFAULT_MODEL_VERSION,
    ) -> None:
        """Initialize in the LOADING state.

        Args:
            backend: Unloaded scoring backend this host will drive.
            model_version: Version reported by /ready.
        """
        self.model_version = model_version
        self._backend = backend
        self._state = ModelState.LOADING
        self._signature: ModelSignature | None = None
        self._load_error: FatalLoadError | None = None
        self._load_started = False
        self._ledger = TensorLedger()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def state(self) -> ModelState:
        return self._state

    @property
    def signature(self) -> ModelSignature | None:
        return self._signature

    @property
    def input_dim(self) -> int | None:
        """Required feature count D, known once the model is ready."""
        return self._signature.input_dim if self._signature else None

    @property
    def load_error(self) -> FatalLoadError | None:
        return self._load_error

    @property
    def live_tensors(self) -> int:
        """Tensors currently owned by in-flight inferences."""
        return self._ledger.live

    def is_ready(self) -> bool:
        """True iff the model loaded and warmed up successfully."""
        return self._state is ModelState.READY

    # =========================================================================
    # Load
    # =========================================================================

    async def load(
        self,
        artifact_location: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_ARTIFACT_TIMEOUT_SECONDS,
        connect_retries: int = DEFAULT_ARTIFACT_CONNECT_RETRIES,
    ) -> ModelState:
        """Load the artifact, resolve its signature and warm it up.

        Never raises for load problems: any failure moves the host to
        FAILED and is kept in load_error. There is no retry, and a second
        call is ignored.

        Args:
            artifact_location: URL or filesystem path of the artifact.
            client: Optional HTTP client for remote artifacts.
            timeout: Artifact fetch timeout in seconds.
            connect_retries: Connection attempts for remote artifacts.

        Returns:
            The state after the attempt.
        """
        if self._load_started:
            logger.warning("Model load already attempted", state=self._state.value)
            return self._state
        self._load_started = True

        started = time.perf_counter()
        logger.info(
            "Loading model",
            artifact=artifact_location,
            backend=self._backend.name,
            model_version=self.model_version,
        )

        try:
            artifact = await fetch_artifact(
                artifact_location,
                client=client,
                timeout=timeout,
                connect_retries=connect_retries,
            )
            signature = await asyncio.to_thread(self._backend.load, artifact)
            logger.info(
                "Model signature resolved",
                input_name=signature.input_name,
                input_dim=signature.input_dim,
                output_name=signature.output_name,
            )

            # Warm-up through the same scoped path as real traffic
            warm = await asyncio.to_thread(
                self._run, (0.0,) * signature.input_dim, signature
            )
        except FatalLoadError as e:
            if e.artifact_location is None:
                e.artifact_location = artifact_location
            self._fail(e)
        except Exception as e:
            error = FatalLoadError(
                f"Model load failed: {e!r}",
                artifact_location=artifact_location,
            )
            error.__cause__ = e
            self._fail(error)
        else:
            self._signature = signature
            self._state = ModelState.READY
            logger.info(
                "Model ready",
                model_version=self.model_version,
                warmup_prediction=warm,
                load_ms=int((time.perf_counter() - started) * 1000),
            )

        return self._state

    def _fail(self, error: FatalLoadError) -> None:
        self._load_error = error
        self._state = ModelState.FAILED
        logger.error(
            "Model load failed; service will not become ready",
            error=error.message,
            error_code=error.error_code,
            artifact=error.artifact_location,
            cause=repr(error.__cause__) if error.__cause__ else None,
        )

    # =========================================================================
    # Inference
    # =========================================================================

    async def infer(self, features: Sequence[float]) -> float:
        """Score one feature vector.

        Args:
            features: Exactly D numbers.

        Returns:
            The model's scalar output, clamped to be non-negative.

        Raises:
            NotReadyError: If the model is not ready.
            ValidationError: If len(features) != D.
            InferenceExecutionError: If the scoring function fails.
        """
        signature = self._signature
        if not self.is_ready() or signature is None:
            raise NotReadyError(model_version=self.model_version)
        if len(features) != signature.input_dim:
            raise ValidationError(
                f"features must be an array of {signature.input_dim} numbers",
                field="features",
                expected=signature.input_dim,
                received=len(features),
            )
        return await asyncio.to_thread(self._run, tuple(features), signature)

    def _run(self, features: Sequence[float], signature: ModelSignature) -> float:
        """Allocate, execute and extract inside one tensor scope (blocking)."""
        with TensorScope(self._backend, self._ledger) as scope:
            with _inference_stage("allocate"):
                inputs = scope.track(self._backend.allocate(features, signature))
            with _inference_stage("execute"):
                outputs = scope.track_all(self._backend.execute(inputs, signature))
            with _inference_stage("extract"):
                if not outputs:
                    raise ValueError("Model returned no outputs")
                raw = self._backend.extract(outputs[0])
                if not math.isfinite(raw):
                    raise ValueError(f"Model returned a non-finite value: {raw}")

        return raw if raw > 0 else 0.0
