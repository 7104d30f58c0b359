"""Prediction API route.

POST /predict validates in a fixed order and maps ModelHost outcomes to
responses:

    503 not ready -> 400 validation -> 500 inference failure -> 201 success

The readiness check comes first and short-circuits every other check. The
body is read as raw JSON rather than a pydantic body parameter so the
ordered messages are produced instead of a generic 422.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Request, status

from src.core.exceptions import NotReadyError
from src.core.logging import correlation_scope, get_logger
from src.models.responses import ErrorResponse, PredictionResult
from src.services.validation import validate_prediction_payload


if TYPE_CHECKING:
    from src.services.model_host import ModelHost


router = APIRouter(tags=["predict"])
logger = get_logger(__name__)


# =============================================================================
# Helper Functions
# =============================================================================


def _get_model_host(request: Request) -> ModelHost:
    """Get the ModelHost from app state, or report not ready."""
    model_host: ModelHost | None = getattr(request.app.state, "model_host", None)
    if model_host is None:
        raise NotReadyError()
    return model_host


async def _read_json(request: Request) -> Any:
    """Decode the body; malformed JSON is treated as an empty object."""
    try:
        return await request.json()
    except ValueError:
        # JSONDecodeError, UnicodeDecodeError and oversized integer literals
        return {}


# =============================================================================
# Endpoints
# =============================================================================


@router.post(
    "/predict",
    response_model=PredictionResult,
    status_code=status.HTTP_201_CREATED,
    summary="Score one feature vector",
    responses={
        400: {"description": "Validation error", "model": ErrorResponse},
        500: {"description": "Inference failed", "model": ErrorResponse},
        503: {"description": "Model not ready", "model": ErrorResponse},
    },
)
async def predict(request: Request) -> PredictionResult:
    """Validate a prediction request and score it.

    Args:
        request: FastAPI request carrying {features, meta}.

    Returns:
        PredictionResult with the clamped prediction and latency.

    Raises:
        NotReadyError: Model is loading or failed (503).
        ValidationError: Request failed an ordered check (400).
        InferenceExecutionError: Scoring failed (500).
    """
    started = time.perf_counter()

    model_host = _get_model_host(request)
    input_dim = model_host.input_dim
    if not model_host.is_ready() or input_dim is None:
        raise NotReadyError(model_version=model_host.model_version)

    payload = await _read_json(request)
    prediction_request = validate_prediction_payload(payload, input_dim)
    meta = prediction_request.meta

    with correlation_scope(meta.correlation_id):
        prediction = await model_host.infer(prediction_request.features)
        latency_ms = int((time.perf_counter() - started) * 1000)

        logger.info(
            "Prediction served",
            data_id=meta.data_id,
            source=meta.source,
            prediction=prediction,
            latency_ms=latency_ms,
        )

    return PredictionResult(prediction=prediction, latency_ms=latency_ms)
