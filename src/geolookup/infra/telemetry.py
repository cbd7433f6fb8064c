"""OpenTelemetry bootstrap — tracing initialisation and helpers.

Configures a ``TracerProvider`` with an OTLP HTTP exporter when tracing is
enabled via ``TracingConfig``.  When disabled the module is a graceful no-op
(local dev without a collector) and ``tracer`` hands out non-recording spans.

``init_telemetry`` runs from ``get_app`` because the FastAPI
instrumentation installs middleware, which Starlette refuses once the
app has started.

Usage::

    from geolookup.infra.telemetry import SPAN_GEOIP_LOOKUP, tracer

    with tracer.start_as_current_span(SPAN_GEOIP_LOOKUP) as span:
        ...
"""

from __future__ import annotations

import base64
import logging

from opentelemetry import trace
from opentelemetry.trace import format_trace_id

from geolookup.configs.system import TracingConfig

logger = logging.getLogger(__name__)

tracer = trace.get_tracer("geolookup")

# ---------------------------------------------------------------------------
# Span names and attribute keys
# ---------------------------------------------------------------------------

SPAN_GEOIP_LOOKUP = "geoip.lookup"

ATTR_GEOIP_IP = "geoip.ip"
ATTR_GEOIP_COUNTRY = "geoip.country_code"
ATTR_GEOIP_ASN_FOUND = "geoip.asn_found"
ATTR_GEOIP_ERROR = "geoip.error"


def init_telemetry(
    app: object | None = None,
    settings: TracingConfig | None = None,
) -> bool:
    """Initialise the OTEL ``TracerProvider`` and FastAPI instrumentation.

    Parameters
    ----------
    app:
        The FastAPI application instance.  Passed to the FastAPI
        instrumentor so it can attach ASGI middleware.
    settings:
        Tracing configuration.  When ``None`` or ``enabled`` is
        ``False``, this function is a no-op.

    Returns ``True`` when tracing was switched on.
    """
    if settings is None or not settings.enabled:
        logger.info("OpenTelemetry tracing disabled.")
        return False

    if not settings.endpoint:
        logger.warning(
            "Tracing enabled but no endpoint configured — "
            "skipping OpenTelemetry setup."
        )
        return False

    from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
        OTLPSpanExporter,
    )
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

    resource = Resource.create({"service.name": settings.service_name})

    sampler = ParentBased(root=TraceIdRatioBased(settings.sample_rate))
    provider = TracerProvider(resource=resource, sampler=sampler)

    headers: dict[str, str] = {}
    if settings.username and settings.password:
        credentials = f"{settings.username}:{settings.password}"
        encoded = base64.b64encode(credentials.encode()).decode()
        headers["Authorization"] = f"Basic {encoded}"

    exporter = OTLPSpanExporter(endpoint=settings.endpoint, headers=headers)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    if app is not None:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        excluded = ",".join(settings.excluded_urls) if settings.excluded_urls else ""
        FastAPIInstrumentor.instrument_app(app, excluded_urls=excluded)

    logger.info(
        "OpenTelemetry tracing initialised (service=%s).", settings.service_name
    )
    return True


def get_current_trace_id() -> str | None:
    """Return the active OTEL trace ID as a 32-char hex string, or ``None``."""
    span = trace.get_current_span()
    ctx = span.get_span_context()
    if ctx is None or not ctx.is_valid:
        return None
    return format_trace_id(ctx.trace_id)
