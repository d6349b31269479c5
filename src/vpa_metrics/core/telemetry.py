# src/vpa_metrics/core/telemetry.py
"""Initializes OpenTelemetry tracing for the recommender metrics loop."""

import logging
from typing import Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from .config import config

logger = logging.getLogger(__name__)


def initialize_telemetry(endpoint: Optional[str] = None) -> bool:
    """
    Configures the TracerProvider to export spans via OTLP/HTTP.

    Returns False without touching the global provider when no endpoint is
    configured, in which case spans go to the API's no-op tracer.
    """
    endpoint = endpoint or config.OTEL_EXPORTER_OTLP_ENDPOINT
    if not endpoint:
        logger.debug("No OTLP endpoint configured; tracing disabled.")
        return False

    resource = Resource(attributes={SERVICE_NAME: "vpa-recommender-metrics"})
    tracer_provider = TracerProvider(resource=resource)
    span_exporter = OTLPSpanExporter(endpoint=f"{endpoint.rstrip('/')}/v1/traces")
    tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))
    trace.set_tracer_provider(tracer_provider)
    logger.info(f"OpenTelemetry initialized. Exporting to: {endpoint}")
    return True


tracer = trace.get_tracer("vpa_metrics.tracer")
