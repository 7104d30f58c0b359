"""OpenTelemetry tracing for the forecast services.

Server spans are created by TracingMiddleware when tracing is enabled;
saga hop clients open client spans and inject the trace context into
outbound headers so the predict service continues the same trace.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Callable, Optional

from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.propagate import extract, inject
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.trace import Span, SpanKind, Tracer

# Global tracer provider reference
_tracer_provider: Optional[TracerProvider] = None


def setup_tracing(
    service_name: str,
    otlp_endpoint: Optional[str] = None,
) -> TracerProvider:
    """
    Configure the global OpenTelemetry TracerProvider.

    Args:
        service_name: Name of the service for resource identification
        otlp_endpoint: OTLP gRPC endpoint; spans go to the console when unset

    Returns:
        Configured TracerProvider
    """
    global _tracer_provider

    resource = Resource.create({SERVICE_NAME: service_name})
    provider = TracerProvider(resource=resource)

    if otlp_endpoint:
        exporter = OTLPSpanExporter(endpoint=otlp_endpoint)
    else:
        exporter = ConsoleSpanExporter()

    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    _tracer_provider = provider

    return provider


def shutdown_tracing() -> None:
    """Flush and stop the provider installed by setup_tracing()."""
    global _tracer_provider
    if _tracer_provider is not None:
        _tracer_provider.shutdown()
        _tracer_provider = None


def get_tracer(name: str = __name__) -> Tracer:
    """Get a named tracer instance."""
    return trace.get_tracer(name)


def get_current_trace_id() -> Optional[str]:
    """Get the current trace ID as hex string."""
    span_context = trace.get_current_span().get_span_context()
    if span_context.trace_id == 0:
        return None
    return format(span_context.trace_id, "032x")


def inject_trace_context(headers: Optional[dict[str, str]] = None) -> dict[str, str]:
    """Inject trace context into headers for outbound requests."""
    carrier = headers if headers is not None else {}
    inject(carrier)
    return carrier


def extract_trace_context(headers: dict[str, Any]) -> Context:
    """Extract trace context from incoming headers."""
    return extract(headers)


@contextmanager
def hop_span(hop: str, url: str) -> Iterator[Span]:
    """Client span around one saga hop."""
    tracer = get_tracer("forecast.saga")
    with tracer.start_as_current_span(f"saga.{hop}", kind=SpanKind.CLIENT) as span:
        span.set_attribute("saga.hop", hop)
        span.set_attribute("http.url", url)
        yield span


def _headers_to_dict(headers: list[tuple[bytes, bytes]]) -> dict[str, str]:
    """Convert ASGI headers to dict for propagation."""
    return {
        key.decode("latin-1").lower(): value.decode("latin-1")
        for key, value in headers
    }


class TracingMiddleware:
    """
    ASGI middleware creating a server span per HTTP request.

    Probe endpoints are usually listed in exclude_paths so they do not
    flood the trace backend.
    """

    def __init__(
        self,
        app: Callable[..., Any],
        exclude_paths: Optional[list[str]] = None,
        tracer_name: str = "forecast.http",
    ) -> None:
        self.app = app
        self.exclude_paths = exclude_paths or []
        self.tracer = get_tracer(tracer_name)

    async def __call__(
        self,
        scope: dict[str, Any],
        receive: Callable[..., Any],
        send: Callable[..., Any],
    ) -> None:
        if scope["type"] != "http" or scope.get("path", "/") in self.exclude_paths:
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "GET")
        path = scope.get("path", "/")
        parent_context = extract_trace_context(_headers_to_dict(scope.get("headers", [])))
        status_code = 500

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
            await send(message)

        with self.tracer.start_as_current_span(
            f"{method} {path}",
            context=parent_context,
            kind=SpanKind.SERVER,
        ) as span:
            span.set_attribute("http.method", method)
            span.set_attribute("http.route", path)

            try:
                await self.app(scope, receive, send_wrapper)
                span.set_attribute("http.status_code", status_code)
            except Exception as e:
                span.set_attribute("http.status_code", 500)
                span.record_exception(e)
                raise
