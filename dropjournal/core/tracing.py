"""
OpenTelemetry tracing configuration.

Tracing is opt-in. When enabled, the FastAPI app and outbound httpx calls
(question sheet lookups) are instrumented, and the sequencer and analysis
pipeline open their own spans through get_tracer().

Environment Variables:
    OTEL_ENABLED: Set to "true" to enable tracing (default: false)
    OTEL_SERVICE_NAME: Override service name (default: drop-journal-service)
    OTEL_EXPORTER_OTLP_ENDPOINT: OTLP endpoint for production (optional)
"""

import logging
import os
from typing import Optional

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.trace import Tracer
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

logger = logging.getLogger("DropJournal.Tracing")

DEFAULT_SERVICE_NAME = "drop-journal-service"

_tracer_provider: Optional[TracerProvider] = None
_is_initialized = False


def is_tracing_enabled() -> bool:
    """True if OTEL_ENABLED is set to "true" (case-insensitive)."""
    return os.getenv("OTEL_ENABLED", "false").lower() == "true"


def setup_tracing(service_name: Optional[str] = None) -> Optional[TracerProvider]:
    """
    Initialize OpenTelemetry with a TracerProvider and a batch span processor.

    Returns the configured provider, or None if tracing is disabled.
    """
    global _tracer_provider, _is_initialized

    if _is_initialized:
        return _tracer_provider

    if not is_tracing_enabled():
        logger.info("OpenTelemetry tracing is disabled (set OTEL_ENABLED=true to enable)")
        _is_initialized = True
        return None

    effective_service_name = (
        service_name
        or os.getenv("OTEL_SERVICE_NAME")
        or DEFAULT_SERVICE_NAME
    )

    resource = Resource.create({SERVICE_NAME: effective_service_name})
    _tracer_provider = TracerProvider(resource=resource)

    otlp_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if otlp_endpoint:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        exporter = OTLPSpanExporter(endpoint=otlp_endpoint)
        logger.info(f"Using OTLP exporter with endpoint: {otlp_endpoint}")
    else:
        exporter = ConsoleSpanExporter()
        logger.info("Using Console exporter for trace output")

    _tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(_tracer_provider)

    _is_initialized = True
    logger.info(f"OpenTelemetry tracing initialized for service: {effective_service_name}")
    return _tracer_provider


def get_tracer(name: str) -> Tracer:
    """Get a tracer; a no-op tracer when tracing is disabled."""
    return trace.get_tracer(name)


def instrument_app(app) -> None:
    """Instrument a FastAPI application and the httpx client library."""
    if not is_tracing_enabled():
        logger.debug("Tracing disabled, skipping instrumentation")
        return

    FastAPIInstrumentor.instrument_app(app)
    HTTPXClientInstrumentor().instrument()
    logger.info("FastAPI and httpx instrumentation enabled")


def shutdown_tracing() -> None:
    """Flush remaining spans and shut the provider down."""
    global _tracer_provider, _is_initialized

    if _tracer_provider is not None:
        _tracer_provider.shutdown()
        logger.info("OpenTelemetry tracing shut down")

    _tracer_provider = None
    _is_initialized = False
