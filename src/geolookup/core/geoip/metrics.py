"""Prometheus metrics for the geolookup service.

Business metrics that complement the auto-instrumented HTTP metrics
provided by ``prometheus-fastapi-instrumentator``.

All metrics use the ``geolookup_`` prefix.
"""

import logging

from fastapi import FastAPI
from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator

from geolookup.configs.system import TracingConfig

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Lookup metrics
# ---------------------------------------------------------------------------

LOOKUPS_TOTAL = Counter(
    "geolookup_lookups_total",
    "Total GeoIP lookups, by outcome",
    ["outcome"],  # "ok" | "invalid_ip" | "not_found" | "unavailable"
)

ASN_MISSES_TOTAL = Counter(
    "geolookup_asn_misses_total",
    "Lookups that found a location but no ASN record",
)

# ---------------------------------------------------------------------------
# Client IP resolution metrics
# ---------------------------------------------------------------------------

CLIENT_IP_SOURCE_TOTAL = Counter(
    "geolookup_client_ip_source_total",
    "Which header (or the peer address) supplied the client IP",
    ["source"],
)


def setup_metrics(app: FastAPI, settings: TracingConfig) -> None:
    """Attach HTTP instrumentation and the ``/metrics`` endpoint to *app*.

    Must run before the app starts serving; middleware cannot be added
    afterwards.
    """
    Instrumentator(
        should_instrument_requests_inprogress=True,
        excluded_handlers=settings.excluded_urls,
    ).instrument(app).expose(app, endpoint="/metrics")

    logger.info("Prometheus metrics initialised")
