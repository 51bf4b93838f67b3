import os
import logging

from opentelemetry import trace as trace_api
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

logger = logging.getLogger(__name__)

SERVICE_NAME = "flightsearch"

_configured = False


def setup_tracing() -> bool:
    """Set up OpenTelemetry tracing with an OTLP/HTTP exporter.

    Tracing is only enabled when OTEL_EXPORTER_OTLP_ENDPOINT is set; otherwise
    the OpenTelemetry API falls back to its no-op tracer.
    """
    global _configured
    if _configured:
        return True

    if not os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT"):
        logger.debug("OTEL_EXPORTER_OTLP_ENDPOINT not set, tracing disabled")
        return False

    try:
        tracer_provider = TracerProvider(
            resource=Resource.create({"service.name": SERVICE_NAME})
        )
        tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter()))
        trace_api.set_tracer_provider(tracer_provider=tracer_provider)
        _configured = True

        logger.info("OpenTelemetry tracing set up successfully")
        return True

    except Exception as e:
        logger.error(f"Failed to set up tracing: {e}")
        return False


def get_tracer(name: str = __name__):
    """Get a tracer instance for manual instrumentation."""
    return trace_api.get_tracer(name)
