"""
Observability package: OpenTelemetry tracing for the forecast services.
"""

from src.observability.tracing import (
    TracingMiddleware,
    extract_trace_context,
    get_current_trace_id,
    get_tracer,
    hop_span,
    inject_trace_context,
    setup_tracing,
    shutdown_tracing,
)

__all__ = [
    "TracingMiddleware",
    "extract_trace_context",
    "get_current_trace_id",
    "get_tracer",
    "hop_span",
    "inject_trace_context",
    "setup_tracing",
    "shutdown_tracing",
]
