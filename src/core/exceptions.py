"""Custom exceptions for the forecast services.

Exception Hierarchy:
    ForecastServiceError (base)
    ├── RetriableError (transient errors)
    │   └── NotReadyError
    └── NonRetriableError (permanent errors)
        ├── ValidationError
        ├── InternalError
        │   └── InferenceExecutionError
        ├── UpstreamError
        ├── FatalLoadError
        │   └── ModelSignatureError
        └── ConfigurationError

HTTP mapping lives in src/api/error_handlers.py. FatalLoadError never
reaches a client: ModelHost records it and stays in the failed state.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


# =============================================================================
# Error Codes Enum
# =============================================================================


class ErrorCode(str, Enum):
    """Error codes used in responses and log events."""

    FORECAST_ERROR = "FORECAST_ERROR"

    # Retriable errors
    MODEL_NOT_READY = "MODEL_NOT_READY"

    # Non-retriable errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INFERENCE_FAILED = "INFERENCE_FAILED"
    UPSTREAM_FAILED = "UPSTREAM_FAILED"
    MODEL_LOAD_FAILED = "MODEL_LOAD_FAILED"
    MODEL_SIGNATURE_INVALID = "MODEL_SIGNATURE_INVALID"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


# =============================================================================
# Base Exception
# =============================================================================


class ForecastServiceError(Exception):
    """Base exception for all forecast service errors.

    Attributes:
        message: Human-readable error message.
        error_code: Machine-readable error code from ErrorCode enum.
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.FORECAST_ERROR,
        **kwargs: Any,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            error_code: Machine-readable error code.
            **kwargs: Additional attributes to set on the exception.
        """
        super().__init__(message)
        self.message = message
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )

        for key, value in kwargs.items():
            setattr(self, key, value)


class RetriableError(ForecastServiceError):
    """Base class for transient errors that may succeed on retry.

    Attributes:
        retry_after_ms: Suggested retry delay in milliseconds.
    """

    def __init__(
        self,
        message: str,
        retry_after_ms: int = 1000,
        error_code: str | ErrorCode = ErrorCode.FORECAST_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.retry_after_ms = retry_after_ms


class NonRetriableError(ForecastServiceError):
    """Base class for permanent errors that should not be retried."""

    pass


# =============================================================================
# Retriable Exceptions
# =============================================================================


class NotReadyError(RetriableError):
    """The model has not reached the ready state.

    Raised both while loading and after a failed load; callers cannot
    tell the two apart.

    Attributes:
        model_version: Version of the model being served.
    """

    def __init__(
        self,
        message: str = "Model not ready",
        model_version: str | None = None,
        retry_after_ms: int = 2000,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            retry_after_ms=retry_after_ms,
            error_code=ErrorCode.MODEL_NOT_READY,
            **kwargs,
        )
        self.model_version = model_version


# =============================================================================
# Non-Retriable Exceptions
# =============================================================================


class ValidationError(NonRetriableError):
    """Prediction request is malformed or internally inconsistent.

    Attributes:
        field: Name of the invalid field.
        expected: Expected value (e.g. the model input dimension).
        received: Value received from the caller.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        expected: Any = None,
        received: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            error_code=ErrorCode.VALIDATION_ERROR,
            **kwargs,
        )
        self.field = field
        self.expected = expected
        self.received = received


class InternalError(NonRetriableError):
    """Request passed validation but could not be served."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.INTERNAL_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code=error_code, **kwargs)


class InferenceExecutionError(InternalError):
    """The scoring function failed while executing or producing output.

    Attributes:
        stage: Where it failed ("allocate", "execute" or "extract").
    """

    def __init__(
        self,
        message: str,
        stage: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code=ErrorCode.INFERENCE_FAILED, **kwargs)
        self.stage = stage


class UpstreamError(NonRetriableError):
    """A saga hop failed.

    Attributes:
        hop: Name of the failed hop ("acquire" or "predict").
        reason: Failure class ("timeout", "transport", "status", "payload").
        status_code: HTTP status returned by the hop, when there was one.
    """

    def __init__(
        self,
        message: str,
        hop: str | None = None,
        reason: str | None = None,
        status_code: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            error_code=ErrorCode.UPSTREAM_FAILED,
            **kwargs,
        )
        self.hop = hop
        self.reason = reason
        self.status_code = status_code


class FatalLoadError(NonRetriableError):
    """Model load failed at startup; the model can never become ready.

    Attributes:
        artifact_location: Where the artifact was loaded from.
    """

    def __init__(
        self,
        message: str,
        artifact_location: str | None = None,
        error_code: str | ErrorCode = ErrorCode.MODEL_LOAD_FAILED,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code=error_code, **kwargs)
        self.artifact_location = artifact_location


class ModelSignatureError(FatalLoadError):
    """Artifact does not declare a usable input/output signature."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(
            message,
            error_code=ErrorCode.MODEL_SIGNATURE_INVALID,
            **kwargs,
        )


class ConfigurationError(NonRetriableError):
    """Service configuration is invalid.

    Attributes:
        setting: Name of the problematic setting.
    """

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            error_code=ErrorCode.CONFIGURATION_ERROR,
            **kwargs,
        )
        self.setting = setting
