"""Two-hop run saga: acquire a feature record, then score it.

Steps run strictly in order with no fan-out and no retry. The first hop
failure aborts the run; nothing is compensated because neither hop leaves
state this service owns. Every failure variant leaves the saga as a single
UpstreamError, which the HTTP layer reports as 502 while the hop, reason and
detail stay in the logs.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from src.core.constants import CORRELATION_HEADER, SAGA_SOURCE
from src.core.exceptions import UpstreamError
from src.core.logging import correlation_scope, get_logger
from src.models.requests import FeatureRecord
from src.models.responses import SagaResult
from src.observability.tracing import get_current_trace_id
from src.orchestration.clients import (
    HOP_ACQUIRE,
    HOP_PREDICT,
    REASON_PAYLOAD,
    AcquireClient,
    HopFailure,
    HopResult,
    PredictClient,
)
from src.services.validation import is_number


logger = get_logger(__name__)


# =============================================================================
# Data Structures
# =============================================================================


@dataclass
class SagaState:
    """Values carried between the steps of one run.

    Attributes:
        correlation_id: Identifier bound to logs and forwarded to hops.
        record: Feature record produced by the acquire hop.
        prediction: Decoded body of the predict hop.
    """

    correlation_id: str
    record: FeatureRecord | None = None
    prediction: dict[str, Any] | None = None

    @property
    def headers(self) -> dict[str, str]:
        return {CORRELATION_HEADER: self.correlation_id}


@dataclass(frozen=True)
class SagaStep:
    """A step in the saga.

    Attributes:
        name: Hop name ("acquire", "predict").
        invoke: Async function that runs the hop against the shared state.
    """

    name: str
    invoke: Callable[[SagaState], Awaitable[HopResult]]


# =============================================================================
# RunSaga Implementation
# =============================================================================


class RunSaga:
    """Sequences the acquire and predict hops for one /run call.

    Holds no per-run state; concurrent runs are independent.

    Example:
        saga = RunSaga(acquire=AcquireClient(...), predict=PredictClient(...))
        result = await saga.execute()
    """

    def __init__(self, acquire: AcquireClient, predict: PredictClient) -> None:
        self._acquire = acquire
        self._predict = predict
        self.steps: tuple[SagaStep, ...] = (
            SagaStep(name=HOP_ACQUIRE, invoke=self._acquire_step),
            SagaStep(name=HOP_PREDICT, invoke=self._predict_step),
        )

    async def execute(self, correlation_id: str | None = None) -> SagaResult:
        """Run both hops and aggregate the result.

        Args:
            correlation_id: Caller-supplied identifier; generated when absent.

        Returns:
            SagaResult with dataId, prediction and pass-through fields.

        Raises:
            UpstreamError: If any hop fails.
        """
        state = SagaState(correlation_id=correlation_id or uuid.uuid4().hex)

        with correlation_scope(state.correlation_id):
            started = time.perf_counter()
            logger.info("Saga started", trace_id=get_current_trace_id())

            for step in self.steps:
                result = await step.invoke(state)
                if isinstance(result, HopFailure):
                    raise UpstreamError(
                        f"{result.hop} hop failed ({result.reason}): {result.detail}",
                        hop=result.hop,
                        reason=result.reason,
                        status_code=result.status_code,
                    )

            saga_result = self._aggregate(state)
            logger.info(
                "Saga completed",
                data_id=saga_result.data_id,
                prediction=saga_result.prediction,
                elapsed_ms=int((time.perf_counter() - started) * 1000),
            )
            return saga_result

    # =========================================================================
    # Steps
    # =========================================================================

    async def _acquire_step(self, state: SagaState) -> HopResult:
        result = await self._acquire.fetch_record(headers=state.headers)
        if isinstance(result, HopFailure):
            return result

        try:
            state.record = FeatureRecord.model_validate(result.payload)
        except PydanticValidationError as e:
            return HopFailure(
                HOP_ACQUIRE,
                REASON_PAYLOAD,
                f"Malformed feature record: {e.errors(include_url=False)}",
                status_code=result.status_code,
            )
        return result

    async def _predict_step(self, state: SagaState) -> HopResult:
        record = state.record
        if record is None:
            return HopFailure(HOP_PREDICT, REASON_PAYLOAD, "No feature record to score")

        # featureCount is always derived from the vector actually forwarded
        meta = {
            "featureCount": len(record.features),
            "dataId": record.data_id,
            "source": SAGA_SOURCE,
            "correlationId": state.correlation_id,
        }
        result = await self._predict.predict(record.features, meta, headers=state.headers)
        if isinstance(result, HopFailure):
            return result

        if not is_number(result.payload.get("prediction")):
            return HopFailure(
                HOP_PREDICT,
                REASON_PAYLOAD,
                "Predict reply has no numeric prediction",
                status_code=result.status_code,
            )
        state.prediction = result.payload
        return result

    # =========================================================================
    # Aggregation
    # =========================================================================

    @staticmethod
    def _aggregate(state: SagaState) -> SagaResult:
        record, prediction = state.record, state.prediction
        if record is None or prediction is None:
            raise UpstreamError("Saga finished without both hop results")
        return SagaResult(
            data_id=record.data_id,
            prediction_id=prediction.get("predictionId"),
            prediction=prediction["prediction"],
            timestamp=prediction.get("timestamp"),
        )
