"""Shared fixtures: an in-memory GeoIP backend shaped like geoip2 models."""

from __future__ import annotations

import ipaddress
from types import SimpleNamespace
from typing import Any

import geoip2.errors
import pytest

from geolookup.core.geoip import GeoIPBackend, GeoIPService


def make_city(
    *,
    country: str | None = "United States",
    country_code: str | None = "US",
    subdivisions: tuple[tuple[str | None, str | None], ...] = (("California", "CA"),),
    city: str | None = "Mountain View",
    postal: str | None = "94043",
    latitude: float | None = 37.751,
    longitude: float | None = -97.822,
    accuracy_radius: int | None = 1000,
    time_zone: str | None = "America/Chicago",
) -> SimpleNamespace:
    return SimpleNamespace(
        country=SimpleNamespace(name=country, iso_code=country_code),
        subdivisions=tuple(
            SimpleNamespace(name=name, iso_code=code) for name, code in subdivisions
        ),
        city=SimpleNamespace(name=city),
        postal=SimpleNamespace(code=postal),
        location=SimpleNamespace(
            latitude=latitude,
            longitude=longitude,
            accuracy_radius=accuracy_radius,
            time_zone=time_zone,
        ),
    )


def make_asn(
    number: int | None = 15169,
    org: str | None = "GOOGLE",
    network: str | None = None,
) -> SimpleNamespace:
    return SimpleNamespace(
        autonomous_system_number=number,
        autonomous_system_organization=org,
        network=ipaddress.ip_network(network) if network else None,
    )


class FakeBackend(GeoIPBackend):
    """Dictionary-backed ``GeoIPBackend``."""

    def __init__(
        self,
        cities: dict[str, Any] | None = None,
        asns: dict[str, Any] | None = None,
    ) -> None:
        self.cities = cities or {}
        self.asns = asns or {}
        self.closed = False

    def city(self, ip: str) -> Any:
        if ip not in self.cities:
            raise geoip2.errors.AddressNotFoundError(f"The address {ip} is not in the database.")
        return self.cities[ip]

    def asn(self, ip: str) -> Any:
        if ip not in self.asns:
            raise geoip2.errors.AddressNotFoundError(f"The address {ip} is not in the database.")
        return self.asns[ip]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend(
        cities={
            "8.8.8.8": make_city(),
            "2001:4860:4860::8888": make_city(),
            "203.0.113.7": make_city(
                country="Australia",
                country_code="AU",
                subdivisions=(),
                city=None,
                postal=None,
                accuracy_radius=None,
                time_zone="Australia/Sydney",
            ),
            "10.0.0.1": make_city(
                country=None,
                country_code=None,
                subdivisions=(),
                city=None,
                postal=None,
                latitude=None,
                longitude=None,
                accuracy_radius=None,
                time_zone=None,
            ),
        },
        asns={
            "8.8.8.8": make_asn(network="8.8.8.0/24"),
            "2001:4860:4860::8888": make_asn(network="2001:4860::/32"),
            # Routed but unlocated, with the reserved AS number 0.
            "192.0.2.77": make_asn(number=0, org="", network="192.0.2.0/24"),
        },
    )


@pytest.fixture
def service(backend: FakeBackend) -> GeoIPService:
    return GeoIPService(backend)
