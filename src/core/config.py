"""Core configuration module for the forecast services.

Loads settings from PREDICT_* and ORCHESTRATOR_* prefixed environment
variables using Pydantic Settings. Each process reads only its own class.

Patterns applied:
- pydantic-settings BaseSettings (Pydantic v2 split)
- env_prefix per process for namespace isolation
- @field_validator + @classmethod (Pydantic v2 pattern)
- @lru_cache for singleton pattern
- PEP 604 union syntax (X | None)
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from src.core.constants import (
    DEFAULT_ACQUIRE_URL,
    DEFAULT_ARTIFACT_CONNECT_RETRIES,
    DEFAULT_ARTIFACT_TIMEOUT_SECONDS,
    DEFAULT_ENVIRONMENT,
    DEFAULT_HOP_TIMEOUT_SECONDS,
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MODEL_BACKEND,
    DEFAULT_MODEL_DIR,
    DEFAULT_MODEL_FILE,
    DEFAULT_MODEL_VERSION,
    DEFAULT_ORCHESTRATOR_PORT,
    DEFAULT_PREDICT_PORT,
    DEFAULT_PREDICT_URL,
    MODEL_MOUNT_PATH,
    ORCHESTRATOR_SERVICE_NAME,
    PREDICT_SERVICE_NAME,
)


class _ServiceSettings(BaseSettings):
    """Settings shared by every process.

    Attributes:
        service_name: Service identifier for logging and /health.
        port: HTTP port (1-65535).
        host: Bind address.
        environment: Deployment environment.
        log_level: Logging verbosity.
        tracing_enabled: Install the OpenTelemetry middleware.
        otlp_endpoint: OTLP gRPC endpoint; console exporter when unset.
    """

    service_name: str = Field(
        default=PREDICT_SERVICE_NAME,
        description="Service name for identification",
    )
    port: int = Field(
        default=DEFAULT_PREDICT_PORT,
        ge=1,
        le=65535,
        description="HTTP server port",
    )
    host: str = Field(
        default=DEFAULT_HOST,
        description="HTTP server bind address",
    )
    environment: Literal["development", "staging", "production"] = Field(
        default=DEFAULT_ENVIRONMENT,
        description="Deployment environment",
    )
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    tracing_enabled: bool = Field(
        default=False,
        description="Enable OpenTelemetry request tracing",
    )
    otlp_endpoint: str | None = Field(
        default=None,
        description="OTLP exporter endpoint (e.g. http://jaeger:4317)",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level to uppercase.

        Args:
            v: Input log level string.

        Returns:
            Normalized uppercase log level.

        Raises:
            ValueError: If log level is not valid.
        """
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        normalized = v.upper()
        if normalized not in valid_levels:
            msg = f"log_level must be one of {valid_levels}, got '{v}'"
            raise ValueError(msg)
        return normalized


class PredictSettings(_ServiceSettings):
    """Settings for the predict (inference gateway) process.

    Example: PREDICT_PORT=3002, PREDICT_MODEL_BACKEND=linear

    Attributes:
        model_version: Version string reported by /ready.
        model_dir: Directory served under /model.
        model_file: Artifact file name inside model_dir.
        model_backend: Scoring backend used to open the artifact.
        model_artifact_url: Explicit artifact location (URL or path).
        artifact_timeout_seconds: Timeout for fetching the artifact.
        artifact_connect_retries: Connection attempts for the artifact fetch.
        autoload_model: Start loading the model during app startup.
    """

    model_version: str = Field(
        default=DEFAULT_MODEL_VERSION,
        description="Model version reported by the readiness endpoint",
    )
    model_dir: str = Field(
        default=DEFAULT_MODEL_DIR,
        description="Directory holding the model artifact",
    )
    model_file: str = Field(
        default=DEFAULT_MODEL_FILE,
        description="Model artifact file name",
    )
    model_backend: Literal["onnx", "linear"] = Field(
        default=DEFAULT_MODEL_BACKEND,
        description="Scoring backend for the artifact",
    )
    model_artifact_url: str | None = Field(
        default=None,
        description="Artifact URL or filesystem path; defaults to the local /model mount",
    )
    artifact_timeout_seconds: float = Field(
        default=DEFAULT_ARTIFACT_TIMEOUT_SECONDS,
        gt=0,
        description="Timeout for the artifact download",
    )
    artifact_connect_retries: int = Field(
        default=DEFAULT_ARTIFACT_CONNECT_RETRIES,
        ge=0,
        description="Connection attempts while the listener comes up",
    )
    autoload_model: bool = Field(
        default=True,
        description="Schedule the model load during startup",
    )

    model_config = {
        "env_prefix": "PREDICT_",
        "case_sensitive": False,
        "extra": "ignore",
        # model_* field names are ours, not pydantic's
        "protected_namespaces": (),
    }

    @property
    def artifact_location(self) -> str:
        """Resolved artifact location, served by this same process by default."""
        if self.model_artifact_url:
            return self.model_artifact_url
        return f"http://127.0.0.1:{self.port}{MODEL_MOUNT_PATH}/{self.model_file}"


class OrchestratorSettings(_ServiceSettings):
    """Settings for the orchestrator (saga) process.

    Example: ORCHESTRATOR_ACQUIRE_URL=http://acquire:3001

    Attributes:
        acquire_url: Base URL of the acquisition service.
        predict_url: Base URL of the predict service.
        hop_timeout_seconds: Timeout applied to each saga hop.
    """

    service_name: str = Field(
        default=ORCHESTRATOR_SERVICE_NAME,
        description="Service name for identification",
    )
    port: int = Field(
        default=DEFAULT_ORCHESTRATOR_PORT,
        ge=1,
        le=65535,
        description="HTTP server port",
    )
    acquire_url: str = Field(
        default=DEFAULT_ACQUIRE_URL,
        description="Acquire service base URL",
    )
    predict_url: str = Field(
        default=DEFAULT_PREDICT_URL,
        description="Predict service base URL",
    )
    hop_timeout_seconds: float = Field(
        default=DEFAULT_HOP_TIMEOUT_SECONDS,
        gt=0,
        description="Per-hop timeout for saga calls",
    )

    model_config = {
        "env_prefix": "ORCHESTRATOR_",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> PredictSettings:
    """Get singleton PredictSettings instance.

    Returns:
        Cached PredictSettings instance.
    """
    return PredictSettings()


@lru_cache
def get_orchestrator_settings() -> OrchestratorSettings:
    """Get singleton OrchestratorSettings instance.

    Returns:
        Cached OrchestratorSettings instance.
    """
    return OrchestratorSettings()
