"""Distributed tracing using OpenTelemetry with pluggable exporters.

Tracing is off by default. When enabled (``TRACING_ENABLED=true``) spans are
either written through Loguru (``console``) or shipped to an OTLP collector
(``otlp``). FastAPI requests and SQLAlchemy statements are instrumented
automatically; service code can add spans with ``trace_operation``.
"""

from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Final

from loguru import logger
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SpanExporter,
    SpanExportResult,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

from src.core.context import RequestContext

if TYPE_CHECKING:
    from collections.abc import Generator, Sequence

    from fastapi import FastAPI

    from src.core.config import Settings

SERVICE_NAME_KEY: Final[str] = "service.name"
SERVICE_VERSION_KEY: Final[str] = "service.version"
ENVIRONMENT_KEY: Final[str] = "deployment.environment"
DEFAULT_OTLP_ENDPOINT: Final[str] = "http://localhost:4317"
EXCLUDED_URLS: Final[str] = "/health,/docs,/redoc,/openapi.json"


class LoguruSpanExporter(SpanExporter):
    """Span exporter that writes finished spans through the Loguru logger."""

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        """Log one debug line per finished span."""
        for span in spans:
            span_context = span.get_span_context()
            if not span_context:
                continue

            # Skip noisy driver-level spans
            if span.name in ("connect", "http send", "http receive"):
                continue

            attributes = dict(span.attributes or {})
            duration_ms = None
            if span.end_time and span.start_time:
                duration_ms = (span.end_time - span.start_time) // 1_000_000

            logger.bind(
                trace_id=f"0x{span_context.trace_id:032x}",
                span_id=f"0x{span_context.span_id:016x}",
                correlation_id=attributes.get(
                    "correlation_id", RequestContext.get_correlation_id()
                ),
                span_name=span.name,
                span_kind=span.kind.name,
                duration_ms=duration_ms,
                status=span.status.status_code.name,
            ).debug("Trace span completed: {}", span.name)

        return SpanExportResult.SUCCESS


def get_span_exporter(settings: Settings) -> SpanExporter | None:
    """Get the span exporter selected by ``TRACING_EXPORTER``.

    Args:
        settings: Application settings.

    Returns:
        SpanExporter | None: Configured exporter or None if disabled.
    """
    tracing = settings.tracing_config

    if tracing.exporter == "console":
        logger.info("Using Loguru span exporter")
        return LoguruSpanExporter()

    if tracing.exporter == "otlp":
        endpoint = tracing.endpoint or DEFAULT_OTLP_ENDPOINT
        logger.info("Using OTLP exporter at {}", endpoint)
        return OTLPSpanExporter(endpoint=endpoint, insecure=not settings.is_production)

    logger.info("Tracing exporter disabled")
    return None


@lru_cache(maxsize=1)
def get_tracer(name: str) -> trace.Tracer:
    """Get a tracer instance for the given component."""
    return trace.get_tracer(name)


def setup_tracing(settings: Settings) -> None:
    """Configure the global OpenTelemetry tracer provider.

    Args:
        settings: Application settings.
    """
    tracing = settings.tracing_config
    if not tracing.enabled:
        logger.debug("Tracing disabled by configuration")
        return

    resource = Resource.create(
        {
            SERVICE_NAME_KEY: settings.app_name,
            SERVICE_VERSION_KEY: settings.app_version,
            ENVIRONMENT_KEY: settings.app_env,
        }
    )
    tracer_provider = TracerProvider(
        resource=resource,
        sampler=TraceIdRatioBased(tracing.sample_rate),
    )

    exporter = get_span_exporter(settings)
    if exporter:
        tracer_provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(tracer_provider)

    logger.info(
        "Tracing configured",
        exporter_type=tracing.exporter,
        sample_rate=tracing.sample_rate,
    )


def instrument_app(app: FastAPI, settings: Settings) -> None:
    """Instrument the FastAPI application and SQLAlchemy for tracing.

    Args:
        app: FastAPI application to instrument.
        settings: Application settings.
    """
    if not settings.tracing_config.enabled:
        return

    FastAPIInstrumentor.instrument_app(
        app,
        excluded_urls=EXCLUDED_URLS,
        server_request_hook=add_correlation_id_to_span,
    )
    SQLAlchemyInstrumentor().instrument(enable_commenter=False)

    logger.info("Application instrumented for tracing")


def add_correlation_id_to_span(span: trace.Span, scope: dict[str, Any]) -> None:
    """Attach the correlation and request ids to the server span.

    Used as the ``server_request_hook`` of the FastAPI instrumentation.
    """
    if correlation_id := RequestContext.get_correlation_id():
        span.set_attribute("correlation_id", correlation_id)

    headers = dict(scope.get("headers", []))
    if request_id := headers.get(b"x-request-id", b"").decode("utf-8"):
        span.set_attribute("request_id", request_id)


@contextmanager
def trace_operation(
    name: str, **attributes: str | int | float | bool
) -> Generator[trace.Span]:
    """Context manager for tracing a custom operation.

    Args:
        name: Operation name for the span.
        **attributes: Initial attributes for the span.

    Yields:
        trace.Span: The created span for the operation.

    Example:
        >>> with trace_operation("task_list.cache_lookup", user_id=str(user_id)):
        >>>     cached = await cache.get(key)
    """
    tracer = get_tracer(__name__)
    span = tracer.start_span(name)

    for key, value in attributes.items():
        span.set_attribute(key, str(value))

    if correlation_id := RequestContext.get_correlation_id():
        span.set_attribute("correlation_id", correlation_id)

    with trace.use_span(span, end_on_exit=True):
        yield span
