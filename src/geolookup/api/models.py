"""Pydantic models and header renderers for the GeoIP API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from geolookup.core.geoip.models import (
    GeoIPRecord,
    LocationRecord,
    NetworkOwnershipRecord,
)

# Proxy headers echoed back by /myip when debug info is enabled.
DEBUG_HEADER_NAMES = (
    "cf-connecting-ip",
    "true-client-ip",
    "x-real-ip",
    "x-forwarded-for",
    "forwarded",
    "cf-ipcountry",
)


def _header_safe(headers: dict[str, str]) -> dict[str, str]:
    # Starlette encodes header values as latin-1.
    return {
        name: value.encode("latin-1", "replace").decode("latin-1")
        for name, value in headers.items()
    }


class HealthResponse(BaseModel):
    status: str = "healthy"
    timestamp: datetime


class MyIPResponse(GeoIPRecord):
    """Lookup of the caller's own address."""

    debug: dict[str, Any] | None = Field(
        default=None, description="How the client IP was derived"
    )


class ErrorResponse(BaseModel):
    """Error body returned by every failing endpoint."""

    detail: str = Field(description="Human-readable error message")
    code: str = Field(description="Machine-readable error code")
    trace_id: str | None = Field(default=None, description="OTEL trace ID")
    debug: dict[str, Any] | None = None


def client_debug_info(
    peer_address: str, headers: Any, extracted_ip: str | None = None
) -> dict[str, Any]:
    """Describe how the client IP was derived, for /myip."""
    info: dict[str, Any] = {
        "remote_addr": peer_address,
        "headers": {
            name.replace("-", "_"): headers.get(name, "") for name in DEBUG_HEADER_NAMES
        },
    }
    if extracted_ip is not None:
        info["extracted_ip"] = extracted_ip
    return info


def forward_auth_headers(record: GeoIPRecord) -> dict[str, str]:
    """``X-GeoIP-*`` headers for the Traefik ForwardAuth endpoint."""
    headers = {
        "X-GeoIP-IP": record.ip,
        "X-GeoIP-Country": record.country_code,
        "X-GeoIP-Country-Name": record.country,
        "X-GeoIP-Region": record.region_code,
        "X-GeoIP-Region-Name": record.region,
        "X-GeoIP-City": record.city,
        "X-GeoIP-Postal-Code": record.postal_code,
        "X-GeoIP-Latitude": f"{record.latitude:.6f}",
        "X-GeoIP-Longitude": f"{record.longitude:.6f}",
        "X-GeoIP-Accuracy-Radius": str(record.accuracy_radius or 0),
        "X-GeoIP-Timezone": record.timezone,
    }
    if record.asn:
        headers["X-GeoIP-ASN"] = str(record.asn)
    if record.asn_org:
        headers["X-GeoIP-ASN-Org"] = record.asn_org
    if record.asn_network:
        headers["X-GeoIP-ASN-Network"] = record.asn_network
    # Downstream services see the resolved address.
    headers["X-Forwarded-For"] = record.ip
    return _header_safe(headers)


def whois_headers(
    location: LocationRecord | None, network: NetworkOwnershipRecord | None
) -> dict[str, str]:
    """Compact header set for the headers-only /whois endpoint.

    Location and ASN headers are rendered independently; an ASN record
    is reported even when its number is 0.
    """
    headers: dict[str, str] = {}
    if location is not None:
        headers.update(
            {
                "X-GeoIP-Country": location.country_code,
                "X-GeoIP-Country-Name": location.country,
                "X-GeoIP-City": location.city,
                "X-GeoIP-Postal": location.postal_code,
                "X-GeoIP-Timezone": location.timezone,
            }
        )
        if location.region or location.region_code:
            headers["X-GeoIP-Region"] = location.region
            headers["X-GeoIP-Region-Code"] = location.region_code
    if network is not None:
        headers["X-GeoIP-ASN"] = str(network.asn)
        headers["X-GeoIP-Organization"] = network.asn_org
    return _header_safe(headers)
