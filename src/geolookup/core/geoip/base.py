"""GeoIP lookup primitives: abstract reader backend and exceptions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class GeoIPError(Exception):
    """Base class for lookup failures surfaced to the HTTP layer."""

    code = "GEOIP_ERROR"


class InvalidIPSyntax(GeoIPError):
    """Raised when the lookup input is not a parseable IPv4/IPv6 address."""

    code = "INVALID_IP"

    def __init__(self, ip: str) -> None:
        super().__init__(f"Invalid IP address format: {ip!r}")
        self.ip = ip


class LocationNotFound(GeoIPError):
    """Raised when the City database holds no record for the address."""

    code = "LOCATION_NOT_FOUND"

    def __init__(self, ip: str) -> None:
        super().__init__(f"No location data for {ip}")
        self.ip = ip


class DatabaseUnavailable(GeoIPError):
    """Raised when the GeoIP databases were never opened (or failed to)."""

    code = "DATABASE_UNAVAILABLE"


# ---------------------------------------------------------------------------
# Abstract backend
# ---------------------------------------------------------------------------


class GeoIPBackend(ABC):
    """Interface over a pre-built geolocation database.

    Implementations must be safe for concurrent read-only use.  ``city``
    and ``asn`` return objects shaped like ``geoip2.models.City`` and
    ``geoip2.models.ASN`` and raise ``geoip2.errors.AddressNotFoundError``
    when the address has no record.  An ASN record's ``network`` (the
    matched prefix) may be ``None``.
    """

    @abstractmethod
    def city(self, ip: str) -> Any:
        """Return the location record for *ip*."""

    @abstractmethod
    def asn(self, ip: str) -> Any:
        """Return the network-ownership record for *ip*."""

    def close(self) -> None:
        """Release any resources held by the backend."""
