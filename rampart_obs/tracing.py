"""
Distributed Tracing Setup (OpenTelemetry).

Exports enforcement stage spans over OTLP. The FastAPI app is instrumented
when one is passed in.
"""

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from rampart_config.settings import Settings
from rampart_obs.logging import get_logger

logger = get_logger(__name__)


def setup_tracing(settings: Settings, app=None) -> None:
    """
    Setup OpenTelemetry distributed tracing.

    Instruments: the given FastAPI app (if any)
    Exports: OTLP (Jaeger/Tempo/Collector)
    """
    if not settings.OTEL_TRACES_ENABLED:
        logger.info("tracing_disabled")
        return

    resource = Resource.create(
        {
            "service.name": settings.OTEL_SERVICE_NAME,
            "service.version": "0.1.0",
            "deployment.environment": settings.ENVIRONMENT,
        }
    )

    provider = TracerProvider(resource=resource)
    otlp_exporter = OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT)
    provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
    trace.set_tracer_provider(provider)

    if app is not None:
        FastAPIInstrumentor.instrument_app(app)

    logger.info(
        "tracing_enabled",
        service=settings.OTEL_SERVICE_NAME,
        endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT,
    )


def get_tracer(name: str) -> trace.Tracer:
    """Get tracer (no-op until setup_tracing installs a provider)."""
    return trace.get_tracer(name)
