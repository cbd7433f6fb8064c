"""MaxMind GeoLite2 backend.

Opens the City and ASN databases with ``geoip2.database.Reader``.  The
ASN model already carries the matched network (``record.network``), so
no extra handle is needed for the prefix.  ``MODE_AUTO`` memory-maps the
files, which keeps lookups lock-free across request threads.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import geoip2.database

from .base import GeoIPBackend

logger = logging.getLogger(__name__)


class MaxMindBackend(GeoIPBackend):
    """``GeoIPBackend`` over GeoLite2 ``.mmdb`` files."""

    def __init__(
        self,
        city_db_path: Path,
        asn_db_path: Path,
        locales: list[str] | None = None,
    ) -> None:
        for path in (city_db_path, asn_db_path):
            if not path.exists():
                raise FileNotFoundError(f"GeoIP database not found: {path}")

        self._city = geoip2.database.Reader(str(city_db_path), locales=locales)
        try:
            self._asn = geoip2.database.Reader(str(asn_db_path), locales=locales)
        except Exception:
            self._city.close()
            raise

    def city(self, ip: str) -> Any:
        return self._city.city(ip)

    def asn(self, ip: str) -> Any:
        return self._asn.asn(ip)

    def close(self) -> None:
        self._city.close()
        self._asn.close()
        logger.info("GeoIP databases closed")
