"""Lookup result models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LocationRecord(BaseModel):
    """Geographic fields from the City database."""

    model_config = ConfigDict(frozen=True)

    country: str = ""
    country_code: str = ""
    region: str = ""
    region_code: str = ""
    city: str = ""
    postal_code: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    accuracy_radius: int | None = None
    timezone: str = ""

    @classmethod
    def from_city(cls, record: Any) -> "LocationRecord":
        """Flatten a ``geoip2.models.City``; missing values become defaults."""
        region = region_code = ""
        # First subdivision is the least specific one (state / province).
        if record.subdivisions:
            subdivision = record.subdivisions[0]
            region = subdivision.name or ""
            region_code = subdivision.iso_code or ""

        location = record.location
        return cls(
            country=record.country.name or "",
            country_code=record.country.iso_code or "",
            region=region,
            region_code=region_code,
            city=record.city.name or "",
            postal_code=record.postal.code or "",
            latitude=location.latitude or 0.0,
            longitude=location.longitude or 0.0,
            accuracy_radius=location.accuracy_radius or None,
            timezone=location.time_zone or "",
        )


class NetworkOwnershipRecord(BaseModel):
    """Autonomous system fields from the ASN database."""

    model_config = ConfigDict(frozen=True)

    asn: int = 0
    asn_org: str = ""
    asn_network: str | None = None

    @classmethod
    def from_asn(cls, record: Any) -> "NetworkOwnershipRecord":
        """Flatten a ``geoip2.models.ASN``; ``network`` becomes a CIDR string."""
        network = getattr(record, "network", None)
        return cls(
            asn=record.autonomous_system_number or 0,
            asn_org=record.autonomous_system_organization or "",
            asn_network=str(network) if network is not None else None,
        )


class GeoIPRecord(BaseModel):
    """Merged, flat lookup result as served by the API."""

    ip: str = Field(description="The address that was looked up")
    country: str = ""
    country_code: str = ""
    region: str = ""
    region_code: str = ""
    city: str = ""
    postal_code: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    accuracy_radius: int | None = None
    timezone: str = ""
    asn: int | None = None
    asn_org: str | None = None
    asn_network: str | None = None

    @classmethod
    def merge(
        cls,
        ip: str,
        location: LocationRecord,
        network: NetworkOwnershipRecord | None = None,
    ) -> "GeoIPRecord":
        fields: dict[str, Any] = location.model_dump()
        if network is not None:
            fields.update(
                asn=network.asn or None,
                asn_org=network.asn_org or None,
                asn_network=network.asn_network,
            )
        return cls(ip=ip, **fields)

    def to_json(self) -> dict[str, Any]:
        """Render with empty optional fields dropped."""
        return self.model_dump(exclude_none=True)
