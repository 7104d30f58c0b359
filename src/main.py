"""FastAPI application entrypoint for the predict service.

Patterns applied:
- Application factory so tests can inject settings and a ModelHost
- asynccontextmanager lifespan; configure_logging() called ONCE at startup
- Model load scheduled as a background task: the server accepts
  connections (and serves /model) before the model is ready
- Docs disabled in production

Run with: uvicorn src.main:app --port 3002
"""

import asyncio
import contextlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from src.api.error_handlers import register_exception_handlers
from src.api.routes.health import router as health_router
from src.api.routes.predict import router as predict_router
from src.core.config import PredictSettings, get_settings
from src.core.constants import MODEL_MOUNT_PATH, SERVICE_VERSION
from src.core.logging import configure_logging, get_logger
from src.observability.tracing import TracingMiddleware, setup_tracing, shutdown_tracing
from src.providers.factory import BackendFactory
from src.services.model_host import ModelHost, ModelState


# =============================================================================
# Application Metadata
# =============================================================================
APP_NAME = "predict"
APP_DESCRIPTION = "Energy demand inference gateway"
APP_VERSION = SERVICE_VERSION

PROBE_PATHS = ["/health", "/ready"]


# =============================================================================
# Lifespan Context Manager
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown events.

    Args:
        app: FastAPI application instance.

    Yields:
        None after startup, before shutdown.
    """
    # =========================================================================
    # STARTUP
    # =========================================================================
    settings: PredictSettings = app.state.settings
    model_host: ModelHost = app.state.model_host

    configure_logging(level=settings.log_level, service=settings.service_name)
    logger = get_logger(__name__)

    if settings.tracing_enabled:
        setup_tracing(settings.service_name, settings.otlp_endpoint)

    logger.info(
        "Application starting",
        version=APP_VERSION,
        environment=settings.environment,
        port=settings.port,
        model_version=model_host.model_version,
    )

    app.state.load_task = None
    if settings.autoload_model and model_host.state is ModelState.LOADING:
        app.state.load_task = asyncio.create_task(
            model_host.load(
                settings.artifact_location,
                timeout=settings.artifact_timeout_seconds,
                connect_retries=settings.artifact_connect_retries,
            ),
            name="model-load",
        )

    app.state.initialized = True

    yield

    # =========================================================================
    # SHUTDOWN
    # =========================================================================
    logger.info("Application shutting down", model_state=model_host.state.value)

    load_task: asyncio.Task[ModelState] | None = app.state.load_task
    if load_task is not None and not load_task.done():
        load_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await load_task

    if settings.tracing_enabled:
        shutdown_tracing()
    app.state.initialized = False


# =============================================================================
# Application Factory
# =============================================================================
def create_app(
    settings: PredictSettings | None = None,
    model_host: ModelHost | None = None,
) -> FastAPI:
    """Build the predict service application.

    Args:
        settings: Settings to use; the cached environment settings otherwise.
        model_host: Pre-built host (tests); built from settings otherwise.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or get_settings()
    if model_host is None:
        model_host = ModelHost(
            BackendFactory.create_backend(settings.model_backend),
            model_version=settings.model_version,
        )

    app = FastAPI(
        title=APP_NAME,
        description=APP_DESCRIPTION,
        version=APP_VERSION,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url="/redoc" if settings.environment != "production" else None,
        lifespan=lifespan,
    )

    # One ModelHost per process, shared by reference with the routes
    app.state.settings = settings
    app.state.model_host = model_host
    app.state.service_name = settings.service_name

    app.include_router(health_router)
    app.include_router(predict_router)

    # The default artifact location points back at this mount
    if Path(settings.model_dir).is_dir():
        app.mount(
            MODEL_MOUNT_PATH,
            StaticFiles(directory=settings.model_dir),
            name="model",
        )

    register_exception_handlers(app)

    if settings.tracing_enabled:
        app.add_middleware(TracingMiddleware, exclude_paths=PROBE_PATHS)

    return app


# =============================================================================
# FastAPI Application Instance
# =============================================================================
app = create_app()
