"""Health check API routes.

Provides liveness (/health) for both services and readiness (/ready) for
the predict service.

/ready reports FAILED exactly like LOADING: a caller cannot tell "still
loading" from "never will load" from this endpoint alone.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from src.core.constants import DEFAULT_MODEL_VERSION, SERVICE_VERSION
from src.models.responses import HealthResponse, ReadinessResponse


if TYPE_CHECKING:
    from src.services.model_host import ModelHost


# =============================================================================
# Constants
# =============================================================================

STATUS_OK = "ok"
MSG_NOT_READY = "Model is not ready"


# =============================================================================
# Router
# =============================================================================

router = APIRouter(tags=["health"])


# =============================================================================
# Endpoints
# =============================================================================


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
    description="Returns 200 while the process is running, whatever the model state.",
)
async def health_check(request: Request) -> HealthResponse:
    """Liveness probe endpoint.

    Args:
        request: FastAPI request to read the service name from app state.

    Returns:
        HealthResponse with status 'ok'.
    """
    service_name: str = getattr(request.app.state, "service_name", None) or request.app.title
    return HealthResponse(
        status=STATUS_OK,
        service=service_name,
        version=SERVICE_VERSION,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={
        200: {"description": "Model is ready", "model": ReadinessResponse},
        503: {"description": "Model is loading or failed", "model": ReadinessResponse},
    },
    summary="Readiness check",
    description="Returns 200 once the model is loaded and warmed up.",
)
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness probe endpoint.

    Args:
        request: FastAPI request to access app state.

    Returns:
        JSONResponse with readiness status and model version.
    """
    model_host: ModelHost | None = getattr(request.app.state, "model_host", None)
    model_version = model_host.model_version if model_host else DEFAULT_MODEL_VERSION

    if model_host is None or not model_host.is_ready():
        response = ReadinessResponse(
            ready=False,
            model_version=model_version,
            message=MSG_NOT_READY,
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response.model_dump(by_alias=True, exclude_none=True),
        )

    response = ReadinessResponse(ready=True, model_version=model_version)
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=response.model_dump(by_alias=True, exclude_none=True),
    )
