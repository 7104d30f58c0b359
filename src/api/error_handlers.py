"""Error handlers for FastAPI exception handling.

Every failure body is flat, matching the services' HTTP contract:

    {"error": "Human-readable message", "code": "ERROR_CODE"}

Not-ready responses add "ready": false and a Retry-After header. Internal
(500) and upstream (502) failures return a generic message; the cause is
logged here and never sent to the caller.
"""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.core.exceptions import (
    ErrorCode,
    FatalLoadError,
    ForecastServiceError,
    InternalError,
    NotReadyError,
    RetriableError,
    UpstreamError,
    ValidationError,
)
from src.core.logging import get_logger
from src.models.responses import ErrorResponse


logger = get_logger(__name__)

# =============================================================================
# Constants
# =============================================================================

MSG_INTERNAL = "Internal error"
MSG_UPSTREAM = "Orchestration flow failed"


# =============================================================================
# Status Code Mapping
# =============================================================================


def get_status_code_for_error(error: Exception) -> int:
    """Determine HTTP status code based on exception type.

    Args:
        error: The exception to get status code for.

    Returns:
        Appropriate HTTP status code.
    """
    if isinstance(error, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, NotReadyError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if isinstance(error, UpstreamError):
        return status.HTTP_502_BAD_GATEWAY
    # A fatal load surfaces to callers only as not-ready
    if isinstance(error, FatalLoadError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if isinstance(error, RetriableError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR


# =============================================================================
# Error Response Builder
# =============================================================================


def build_error_response(
    message: str,
    code: str | ErrorCode | None = None,
    ready: bool | None = None,
) -> dict[str, object]:
    """Build a flat error body, dropping unset fields.

    Args:
        message: Message for the caller.
        code: Machine-readable code.
        ready: Readiness flag for not-ready responses.

    Returns:
        JSON-serializable error body.
    """
    if isinstance(code, ErrorCode):
        code = code.value
    return ErrorResponse(error=message, code=code, ready=ready).model_dump(
        exclude_none=True
    )


def _retry_after_seconds(error: RetriableError) -> str:
    return str(max(error.retry_after_ms // 1000, 1))


# =============================================================================
# Exception Handlers
# =============================================================================


async def not_ready_error_handler(
    _request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle NotReadyError with 503, ready=false and Retry-After."""
    if not isinstance(exc, NotReadyError):
        return generic_error_handler(_request, exc)

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=build_error_response(exc.message, exc.error_code, ready=False),
        headers={"Retry-After": _retry_after_seconds(exc)},
    )


async def validation_error_handler(
    _request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle ValidationError with 400 and the specific message."""
    if not isinstance(exc, ValidationError):
        return generic_error_handler(_request, exc)

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=build_error_response(exc.message, exc.error_code),
    )


async def internal_error_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle InternalError with a generic 500; details go to the log."""
    if not isinstance(exc, InternalError):
        return generic_error_handler(request, exc)

    logger.error(
        "Request failed after validation",
        path=request.url.path,
        error=exc.message,
        error_code=exc.error_code,
        stage=getattr(exc, "stage", None),
        cause=repr(exc.__cause__) if exc.__cause__ else None,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=build_error_response(MSG_INTERNAL, exc.error_code),
    )


async def upstream_error_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle UpstreamError with a generic 502; details go to the log."""
    if not isinstance(exc, UpstreamError):
        return generic_error_handler(request, exc)

    logger.error(
        "Saga hop failed",
        path=request.url.path,
        hop=exc.hop,
        reason=exc.reason,
        upstream_status=exc.status_code,
        error=exc.message,
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=build_error_response(MSG_UPSTREAM, exc.error_code),
    )


async def forecast_service_error_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle any other ForecastServiceError by its mapped status."""
    if not isinstance(exc, ForecastServiceError):
        return generic_error_handler(request, exc)

    if isinstance(exc, FatalLoadError):
        logger.error(
            "Model load error reached a request",
            path=request.url.path,
            error=exc.message,
            artifact=exc.artifact_location,
        )
        return await not_ready_error_handler(request, NotReadyError())

    status_code = get_status_code_for_error(exc)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            "Unhandled service error",
            path=request.url.path,
            error=exc.message,
            error_code=exc.error_code,
        )
        message = MSG_INTERNAL
    else:
        message = exc.message

    return JSONResponse(
        status_code=status_code,
        content=build_error_response(message, exc.error_code),
    )


def generic_error_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle unexpected exceptions with a generic 500."""
    logger.error(
        "Unexpected error",
        path=request.url.path,
        error=repr(exc),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=build_error_response(MSG_INTERNAL, ErrorCode.INTERNAL_ERROR),
    )


# =============================================================================
# Handler Registration
# =============================================================================


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(NotReadyError, not_ready_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(InternalError, internal_error_handler)
    app.add_exception_handler(UpstreamError, upstream_error_handler)
    app.add_exception_handler(ForecastServiceError, forecast_service_error_handler)

    # Catch-all for unexpected exceptions
    app.add_exception_handler(Exception, generic_error_handler)
