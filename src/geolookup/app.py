"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from geolookup.api.exceptions import register_exception_handlers
from geolookup.api.geoip import router as geoip_router
from geolookup.configs.config import get_app_config
from geolookup.core.geoip import build_geoip
from geolookup.core.geoip.metrics import setup_metrics
from geolookup.infra.lifespan import inject
from geolookup.infra.logging import setup_logging
from geolookup.infra.telemetry import init_telemetry

logger = logging.getLogger(__name__)


@inject
async def lifespan(
    app: FastAPI,
    _geoip: Annotated[None, Depends(build_geoip)],
) -> AsyncGenerator[None, None]:
    """Application lifespan; the GeoIP readers are owned by ``build_geoip``."""
    logger.info("Starting geolookup application...")
    yield
    logger.info("Shutting down geolookup application...")


def get_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    config = get_app_config()
    setup_logging(config.logging)

    app = FastAPI(
        title="geolookup",
        description="IP geolocation and ASN lookups with proxy-aware client IP detection",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_allow_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    init_telemetry(app, config.tracing)
    setup_metrics(app, config.tracing)
    register_exception_handlers(app)

    # After /metrics: the router ends with a catch-all /{ip} route.
    app.include_router(geoip_router)

    return app


app = get_app()
