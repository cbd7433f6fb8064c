"""GeoIP lookups against MaxMind GeoLite2 databases.

* ``GeoIPService`` — façade merging City and ASN answers into one
  ``GeoIPRecord``.
* ``GeoIPBackend`` — reader interface; ``MaxMindBackend`` is the
  ``geoip2`` implementation.
* ``build_geoip`` / ``get_geoip_service`` — lifespan and per-request
  FastAPI dependencies.
"""

from .base import (
    DatabaseUnavailable,
    GeoIPBackend,
    GeoIPError,
    InvalidIPSyntax,
    LocationNotFound,
)
from .deps import build_geoip, get_geoip_service, get_optional_geoip_service
from .maxmind import MaxMindBackend
from .models import GeoIPRecord, LocationRecord, NetworkOwnershipRecord
from .service import GeoIPService

__all__ = [
    "DatabaseUnavailable",
    "GeoIPBackend",
    "GeoIPError",
    "GeoIPRecord",
    "GeoIPService",
    "InvalidIPSyntax",
    "LocationNotFound",
    "LocationRecord",
    "MaxMindBackend",
    "NetworkOwnershipRecord",
    "build_geoip",
    "get_geoip_service",
    "get_optional_geoip_service",
]
