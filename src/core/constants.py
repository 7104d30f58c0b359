"""Service defaults for the predict and orchestrator processes.

This module centralizes default values so configuration, routes and tests
agree on one source of truth.

Usage:
    from src.core.constants import DEFAULT_MODEL_VERSION, PREDICT_SERVICE_NAME

Note: These are defaults. They can be overridden via environment variables:
    - PREDICT_* → PredictSettings (see src/core/config.py)
    - ORCHESTRATOR_* → OrchestratorSettings
"""

# =============================================================================
# Service Identity
# =============================================================================

PREDICT_SERVICE_NAME = "predict"
ORCHESTRATOR_SERVICE_NAME = "orchestrator"
SERVICE_VERSION = "0.1.0"

DEFAULT_HOST = "0.0.0.0"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_ENVIRONMENT = "development"

# =============================================================================
# Predict Service Defaults
# =============================================================================

DEFAULT_PREDICT_PORT = 3002
DEFAULT_MODEL_VERSION = "v1.0"

# Directory served under MODEL_MOUNT_PATH; relative to the working directory
DEFAULT_MODEL_DIR = "model"
DEFAULT_MODEL_FILE = "model.onnx"
DEFAULT_MODEL_BACKEND = "onnx"
MODEL_MOUNT_PATH = "/model"

DEFAULT_ARTIFACT_TIMEOUT_SECONDS = 30.0
# Connection attempts only; covers the window before the listener is bound
DEFAULT_ARTIFACT_CONNECT_RETRIES = 3

# =============================================================================
# Orchestrator Defaults
# =============================================================================

DEFAULT_ORCHESTRATOR_PORT = 8080
DEFAULT_ACQUIRE_URL = "http://acquire:3001"
DEFAULT_PREDICT_URL = "http://predict:3002"
DEFAULT_HOP_TIMEOUT_SECONDS = 10.0

# Value of meta.source on predict calls issued by the saga
SAGA_SOURCE = "orchestrator"
CORRELATION_HEADER = "X-Correlation-ID"
