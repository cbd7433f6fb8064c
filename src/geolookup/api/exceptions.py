"""Global exception handlers for lookup failures."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from geolookup.core.geoip.base import (
    DatabaseUnavailable,
    GeoIPError,
    InvalidIPSyntax,
    LocationNotFound,
)
from geolookup.core.geoip.metrics import LOOKUPS_TOTAL
from geolookup.infra.telemetry import get_current_trace_id

from .models import ErrorResponse

_STATUS_BY_ERROR: dict[type[GeoIPError], int] = {
    InvalidIPSyntax: 400,
    LocationNotFound: 404,
    DatabaseUnavailable: 503,
}


def _error_response(status_code: int, exc: GeoIPError) -> JSONResponse:
    body = ErrorResponse(
        detail=str(exc), code=exc.code, trace_id=get_current_trace_id()
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers on ``app``.

    Runs from ``get_app``: Starlette snapshots the handler table when it
    builds the middleware stack at startup.
    """

    @app.exception_handler(DatabaseUnavailable)
    async def handle_database_unavailable(
        request: Request, exc: DatabaseUnavailable
    ) -> JSONResponse:
        LOOKUPS_TOTAL.labels(outcome="unavailable").inc()
        response = _error_response(503, exc)
        response.headers["Retry-After"] = "30"
        return response

    @app.exception_handler(GeoIPError)
    async def handle_geoip_error(request: Request, exc: GeoIPError) -> JSONResponse:
        return _error_response(_STATUS_BY_ERROR.get(type(exc), 500), exc)
