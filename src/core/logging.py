"""Structured logging module for the forecast services.

Provides JSON-formatted structured logging using structlog.

Patterns applied:
- Singleton _configured flag prevents reconfiguration
- configure_logging() called ONCE in each app lifespan
- JSON output via JSONRenderer
- Correlation ID support via contextvars, scoped per request / saga run
"""

import contextvars
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TextIO

import structlog
from structlog.types import EventDict


# =============================================================================
# Singleton Configuration State
# =============================================================================
_configured: bool = False
_service_name: str | None = None


# =============================================================================
# Correlation ID Context (for request tracing)
# =============================================================================
_correlation_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)


def set_correlation_id(correlation_id: str | None) -> contextvars.Token[str | None]:
    """Set correlation ID for current async context.

    Args:
        correlation_id: Request identifier for tracing, or None to clear.

    Returns:
        Token that restores the previous value when passed to reset.
    """
    return _correlation_id_var.set(correlation_id)


def get_correlation_id() -> str | None:
    """Get current correlation ID.

    Returns:
        Correlation ID if set, None otherwise.
    """
    return _correlation_id_var.get()


@contextmanager
def correlation_scope(correlation_id: Any) -> Iterator[str | None]:
    """Bind a correlation ID for the duration of a block.

    Non-string identifiers (a caller may send numbers) are stringified;
    None leaves the logging context without a correlation ID.

    Args:
        correlation_id: Identifier to bind.

    Yields:
        The bound identifier as a string, or None.
    """
    value = None if correlation_id is None else str(correlation_id)
    token = set_correlation_id(value)
    try:
        yield value
    finally:
        _correlation_id_var.reset(token)


# =============================================================================
# Custom Processors
# =============================================================================
def add_correlation_id(
    _logger: object, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Add correlation ID to log event if set."""
    correlation_id = get_correlation_id()
    if correlation_id is not None:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def add_service_name(
    _logger: object, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Stamp events with the configured service name."""
    if _service_name is not None:
        event_dict.setdefault("service", _service_name)
    return event_dict


def _level_to_int(level: str) -> int:
    """Convert log level string to integer.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Returns:
        Integer log level for structlog filtering.
    """
    levels = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    return levels.get(level.upper(), 20)


# =============================================================================
# Singleton Configuration
# =============================================================================
def configure_logging(
    level: str = "INFO",
    service: str | None = None,
    stream: TextIO | None = None,
    force: bool = False,
) -> None:
    """Configure structlog ONCE at application startup.

    Subsequent calls are no-ops unless force=True (for testing).

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service: Service name added to every event.
        stream: Output stream. Defaults to sys.stdout.
        force: Force reconfiguration (for testing only).
    """
    global _configured, _service_name

    if _configured and not force:
        return

    _service_name = service

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
        add_service_name,
        add_correlation_id,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(default=str),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_level_to_int(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stdout),
        cache_logger_on_first_use=False,
    )

    _configured = True


def reset_logging() -> None:
    """Reset configuration state for test isolation."""
    global _configured, _service_name
    _configured = False
    _service_name = None


def get_logger(name: str) -> Any:
    """Get a logger by name.

    The returned proxy resolves the structlog configuration on every call,
    so module-level loggers created at import time pick up the settings
    applied later by configure_logging() in the app lifespan.

    Args:
        name: Logger name (typically __name__ of the module).

    Returns:
        Lazy structlog logger with the name bound as logger_name.
    """
    return structlog.get_logger(logger_name=name)
