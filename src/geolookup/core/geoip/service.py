"""Lookup façade: merge the City and ASN answers for one address."""

from __future__ import annotations

import logging

import geoip2.errors

from geolookup.infra.ip_utils import parse_ip
from geolookup.infra.telemetry import (
    ATTR_GEOIP_ASN_FOUND,
    ATTR_GEOIP_COUNTRY,
    ATTR_GEOIP_ERROR,
    ATTR_GEOIP_IP,
    SPAN_GEOIP_LOOKUP,
    tracer,
)

from .base import GeoIPBackend, InvalidIPSyntax, LocationNotFound
from .metrics import ASN_MISSES_TOTAL, LOOKUPS_TOTAL
from .models import GeoIPRecord, LocationRecord, NetworkOwnershipRecord

logger = logging.getLogger(__name__)

# Errors the readers raise for an address they cannot answer for.
_LOOKUP_ERRORS = (geoip2.errors.GeoIP2Error, ValueError)


class GeoIPService:
    """Stateless façade over a ``GeoIPBackend``.

    For ``lookup`` only a missing location is fatal; a missing ASN record
    (unassigned ranges) or an unknown network prefix just leaves those
    fields empty.
    """

    def __init__(self, backend: GeoIPBackend) -> None:
        self._backend = backend

    def lookup(self, ip: str) -> GeoIPRecord:
        """Resolve *ip* to a merged ``GeoIPRecord``.

        Raises:
            InvalidIPSyntax: *ip* is not an IPv4/IPv6 address.
            LocationNotFound: the City database has no entry for *ip*.
        """
        with tracer.start_as_current_span(SPAN_GEOIP_LOOKUP) as span:
            span.set_attribute(ATTR_GEOIP_IP, ip)
            if parse_ip(ip) is None:
                LOOKUPS_TOTAL.labels(outcome="invalid_ip").inc()
                span.set_attribute(ATTR_GEOIP_ERROR, InvalidIPSyntax.code)
                raise InvalidIPSyntax(ip)

            location = self._lookup_location(ip)
            if location is None:
                LOOKUPS_TOTAL.labels(outcome="not_found").inc()
                span.set_attribute(ATTR_GEOIP_ERROR, LocationNotFound.code)
                raise LocationNotFound(ip)

            network = self._lookup_network(ip)
            span.set_attribute(ATTR_GEOIP_COUNTRY, location.country_code)
            span.set_attribute(ATTR_GEOIP_ASN_FOUND, network is not None)
            LOOKUPS_TOTAL.labels(outcome="ok").inc()
            return GeoIPRecord.merge(ip, location, network)

    def lookup_parts(
        self, ip: str
    ) -> tuple[LocationRecord | None, NetworkOwnershipRecord | None]:
        """Query the City and ASN databases independently.

        Either half is ``None`` when its database has no record, so a
        caller can still report the network owner of an unlocated address.

        Raises:
            InvalidIPSyntax: *ip* is not an IPv4/IPv6 address.
        """
        with tracer.start_as_current_span(SPAN_GEOIP_LOOKUP) as span:
            span.set_attribute(ATTR_GEOIP_IP, ip)
            if parse_ip(ip) is None:
                LOOKUPS_TOTAL.labels(outcome="invalid_ip").inc()
                span.set_attribute(ATTR_GEOIP_ERROR, InvalidIPSyntax.code)
                raise InvalidIPSyntax(ip)

            location = self._lookup_location(ip)
            network = self._lookup_network(ip)
            if location is None:
                LOOKUPS_TOTAL.labels(outcome="not_found").inc()
            else:
                span.set_attribute(ATTR_GEOIP_COUNTRY, location.country_code)
                LOOKUPS_TOTAL.labels(outcome="ok").inc()
            span.set_attribute(ATTR_GEOIP_ASN_FOUND, network is not None)
            return location, network

    def _lookup_location(self, ip: str) -> LocationRecord | None:
        try:
            record = self._backend.city(ip)
        except _LOOKUP_ERRORS as exc:
            logger.debug("City lookup failed for %s: %s", ip, exc)
            return None
        return LocationRecord.from_city(record)

    def _lookup_network(self, ip: str) -> NetworkOwnershipRecord | None:
        try:
            record = self._backend.asn(ip)
        except _LOOKUP_ERRORS as exc:
            logger.debug("ASN lookup failed for %s: %s", ip, exc)
            ASN_MISSES_TOTAL.inc()
            return None
        return NetworkOwnershipRecord.from_asn(record)
