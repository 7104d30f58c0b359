"""FastAPI application entrypoint for the orchestrator service.

Owns one shared httpx.AsyncClient for both saga hops; it is opened in the
lifespan and closed on shutdown.

Run with: uvicorn src.orchestrator_main:app --port 8080
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from src.api.error_handlers import register_exception_handlers
from src.api.routes.health import router as health_router
from src.api.routes.run import router as run_router
from src.core.config import OrchestratorSettings, get_orchestrator_settings
from src.core.constants import SERVICE_VERSION
from src.core.logging import configure_logging, get_logger
from src.observability.tracing import TracingMiddleware, setup_tracing, shutdown_tracing
from src.orchestration.clients import AcquireClient, PredictClient
from src.orchestration.saga import RunSaga


APP_NAME = "orchestrator"
APP_DESCRIPTION = "Acquire -> predict run saga"
APP_VERSION = SERVICE_VERSION


def build_saga(settings: OrchestratorSettings, client: httpx.AsyncClient) -> RunSaga:
    """Wire the hop clients for a saga from settings."""
    return RunSaga(
        acquire=AcquireClient(
            settings.acquire_url, client, timeout=settings.hop_timeout_seconds
        ),
        predict=PredictClient(
            settings.predict_url, client, timeout=settings.hop_timeout_seconds
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - open and close the shared HTTP client."""
    settings: OrchestratorSettings = app.state.settings

    configure_logging(level=settings.log_level, service=settings.service_name)
    logger = get_logger(__name__)

    if settings.tracing_enabled:
        setup_tracing(settings.service_name, settings.otlp_endpoint)

    logger.info(
        "Application starting",
        version=APP_VERSION,
        environment=settings.environment,
        port=settings.port,
        acquire_url=settings.acquire_url,
        predict_url=settings.predict_url,
        hop_timeout_seconds=settings.hop_timeout_seconds,
    )

    client: httpx.AsyncClient | None = None
    if getattr(app.state, "saga", None) is None:
        client = httpx.AsyncClient(timeout=settings.hop_timeout_seconds)
        app.state.saga = build_saga(settings, client)

    app.state.initialized = True

    yield

    logger.info("Application shutting down")
    if client is not None:
        await client.aclose()
        app.state.saga = None
    if settings.tracing_enabled:
        shutdown_tracing()
    app.state.initialized = False


def create_app(
    settings: OrchestratorSettings | None = None,
    saga: RunSaga | None = None,
) -> FastAPI:
    """Build the orchestrator application.

    Args:
        settings: Settings to use; the cached environment settings otherwise.
        saga: Pre-built saga (tests); built in the lifespan otherwise.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or get_orchestrator_settings()

    app = FastAPI(
        title=APP_NAME,
        description=APP_DESCRIPTION,
        version=APP_VERSION,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url="/redoc" if settings.environment != "production" else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.service_name = settings.service_name
    app.state.saga = saga

    app.include_router(health_router)
    app.include_router(run_router)
    register_exception_handlers(app)

    if settings.tracing_enabled:
        app.add_middleware(TracingMiddleware, exclude_paths=["/health"])

    return app


app = create_app()
