"""GeoIP lifespan and per-request dependencies.

``build_geoip`` opens the databases once at startup and attaches a
``GeoIPService`` to ``app.state``.  When the files cannot be opened the
app still starts and ``get_geoip_service`` raises ``DatabaseUnavailable``
for each lookup request instead.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from geolookup.configs.config import AppConfig, get_app_config
from geolookup.infra.lifespan import get_app

from .base import DatabaseUnavailable
from .maxmind import MaxMindBackend
from .service import GeoIPService

logger = logging.getLogger(__name__)


async def build_geoip(
    app: Annotated[FastAPI, Depends(get_app)],
    config: Annotated[AppConfig, Depends(get_app_config)],
) -> AsyncGenerator[None, None]:
    """Open the GeoLite2 databases; leave ``None`` on failure."""
    geoip = config.geoip
    backend: MaxMindBackend | None = None
    try:
        backend = MaxMindBackend(
            geoip.city_db_path, geoip.asn_db_path, locales=geoip.locales
        )
        logger.info("GeoIP databases loaded from %s", geoip.data_dir)
    except Exception:
        logger.exception(
            "Failed to open GeoIP databases in %s -- lookups will return 503",
            geoip.data_dir,
        )

    app.state.geoip_service = GeoIPService(backend) if backend else None

    yield

    app.state.geoip_service = None
    if backend is not None:
        backend.close()


def get_geoip_service(request: Request) -> GeoIPService:
    """Return the shared ``GeoIPService`` from ``app.state``."""
    service: GeoIPService | None = getattr(request.app.state, "geoip_service", None)
    if service is None:
        raise DatabaseUnavailable("GeoIP databases are not loaded")
    return service


def get_optional_geoip_service(request: Request) -> GeoIPService | None:
    """Like ``get_geoip_service`` but yields ``None`` instead of raising."""
    return getattr(request.app.state, "geoip_service", None)
