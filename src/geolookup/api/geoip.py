"""GeoIP API endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from geolookup.core.geoip import GeoIPError, GeoIPRecord, InvalidIPSyntax
from geolookup.infra.ip_utils import parse_ip

from .deps import AppConfigDep, ClientIPDep, GeoIPServiceDep, OptionalGeoIPServiceDep
from .models import (
    ErrorResponse,
    HealthResponse,
    MyIPResponse,
    client_debug_info,
    forward_auth_headers,
    whois_headers,
)

logger = logging.getLogger(__name__)

CLIENT_IP_UNRESOLVED = "CLIENT_IP_UNRESOLVED"

router = APIRouter(tags=["geoip"])


def _peer_address(request: Request) -> str:
    return request.client.host if request.client else ""


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(timestamp=datetime.now(timezone.utc))


@router.get(
    "/myip",
    response_model=MyIPResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}},
)
def my_ip(
    request: Request,
    client_ip: ClientIPDep,
    service: GeoIPServiceDep,
    config: AppConfigDep,
) -> MyIPResponse | JSONResponse:
    """Look up the caller's own address, as seen through the proxy chain."""
    peer = _peer_address(request)
    debug_enabled = config.api.debug_client_info

    if parse_ip(client_ip) is None:
        body = ErrorResponse(
            detail="Unable to determine client IP",
            code=CLIENT_IP_UNRESOLVED,
            debug=(
                client_debug_info(peer, request.headers, extracted_ip=client_ip)
                if debug_enabled
                else None
            ),
        )
        return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))

    record = service.lookup(client_ip)
    return MyIPResponse(
        **record.model_dump(),
        debug=client_debug_info(peer, request.headers) if debug_enabled else None,
    )


@router.get("/lookup")
def forward_auth(
    client_ip: ClientIPDep, service: OptionalGeoIPServiceDep
) -> Response:
    """Traefik ForwardAuth target.

    Always answers 200 so the proxied request proceeds; the ``X-GeoIP-*``
    headers are only present when the lookup succeeded.
    """
    response = Response(status_code=200)
    if service is None or parse_ip(client_ip) is None:
        return response

    try:
        record = service.lookup(client_ip)
    except GeoIPError as exc:
        logger.debug("ForwardAuth lookup skipped for %s: %s", client_ip, exc)
        return response

    response.headers.update(forward_auth_headers(record))
    return response


@router.get("/whois", status_code=204)
def whois(client_ip: ClientIPDep, service: OptionalGeoIPServiceDep) -> Response:
    """GeoIP data as response headers only, no body."""
    response = Response(status_code=204)
    if service is not None and parse_ip(client_ip) is not None:
        try:
            location, network = service.lookup_parts(client_ip)
        except GeoIPError as exc:
            logger.debug("Whois lookup skipped for %s: %s", client_ip, exc)
        else:
            response.headers.update(whois_headers(location, network))
    response.headers["X-Client-IP"] = client_ip
    return response


# Catch-all path parameter: must stay the last route on the router.
@router.get(
    "/{ip}",
    response_model=GeoIPRecord,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
def lookup_ip(ip: str, service: GeoIPServiceDep) -> GeoIPRecord:
    """Look up an arbitrary IPv4/IPv6 address."""
    if parse_ip(ip) is None:
        raise InvalidIPSyntax(ip)
    return service.lookup(ip)
