"""Centralized FastAPI dependency type aliases.

Import these ``*Dep`` aliases in route modules instead of writing
``Annotated[T, Depends(get_xxx)]`` everywhere.  Each alias maps to one
``get_*`` factory that tests can replace through
``app.dependency_overrides[get_xxx]``.
"""

from typing import Annotated

from fastapi import Depends

from geolookup.configs.config import AppConfig, get_app_config
from geolookup.core.geoip import (
    GeoIPService,
    get_geoip_service,
    get_optional_geoip_service,
)
from geolookup.infra.client_ip import get_client_ip

AppConfigDep = Annotated[AppConfig, Depends(get_app_config)]
GeoIPServiceDep = Annotated[GeoIPService, Depends(get_geoip_service)]
ClientIPDep = Annotated[str, Depends(get_client_ip)]
OptionalGeoIPServiceDep = Annotated[
    GeoIPService | None, Depends(get_optional_geoip_service)
]
