"""Orchestration API route.

POST /run executes one stateless acquire -> predict saga. Any hop failure
is raised as UpstreamError and rendered as a generic 502 by the error
handlers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, status

from src.core.constants import CORRELATION_HEADER
from src.models.responses import ErrorResponse, SagaResult


if TYPE_CHECKING:
    from src.orchestration.saga import RunSaga


router = APIRouter(tags=["orchestration"])


def _get_saga(request: Request) -> RunSaga:
    """Get the saga from app state or raise 503."""
    saga: RunSaga | None = getattr(request.app.state, "saga", None)
    if saga is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Saga not initialized",
        )
    return saga


@router.post(
    "/run",
    response_model=SagaResult,
    status_code=status.HTTP_200_OK,
    summary="Acquire a feature record and score it",
    responses={502: {"description": "A saga hop failed", "model": ErrorResponse}},
)
async def run(request: Request) -> SagaResult:
    """Run the acquire -> predict saga once.

    Args:
        request: FastAPI request; an X-Correlation-ID header is reused.

    Returns:
        SagaResult {dataId, predictionId, prediction, timestamp}.

    Raises:
        UpstreamError: If either hop fails (502).
    """
    saga = _get_saga(request)
    return await saga.execute(correlation_id=request.headers.get(CORRELATION_HEADER))
