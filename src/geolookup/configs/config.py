"""Configuration management using pydantic-settings.

Priority order (highest first):

1. Init kwargs (tests, embedding)
2. Environment variables (``GEOLOOKUP_`` prefix, ``__`` for nesting)
3. ``.env`` dotenv file
4. Static YAML (``configs/config.yaml``)
5. File secrets
6. Field defaults

``DATA_DIR`` is also honoured for the database directory so existing
container images that only set that variable keep working.
"""

import os
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from geolookup.infra.singleton import singleton

from .system import (
    APIConfig,
    GeoIPConfig,
    LoggingConfig,
    ServerConfig,
    TracingConfig,
)

# ---------------------------------------------------------------------------
# Path constants
# ---------------------------------------------------------------------------

CONFIG_PY_PATH = Path(__file__).resolve()
PROJECT_ROOT = CONFIG_PY_PATH.parent.parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "configs"

STATIC_CONFIG_FILE = CONFIG_DIR / "config.yaml"

DOTENV_FILE_PATH = PROJECT_ROOT / ".env"
ENV_DELIMITER = "__"
ENV_PREFIX = "GEOLOOKUP_"
LEGACY_DATA_DIR_ENV = "DATA_DIR"

DEFAULT_ENCODING = "utf-8"


class AppConfig(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=DOTENV_FILE_PATH,
        env_file_encoding=DEFAULT_ENCODING,
        env_nested_delimiter=ENV_DELIMITER,
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
        yaml_file=STATIC_CONFIG_FILE,
        yaml_file_encoding=DEFAULT_ENCODING,
    )

    geoip: GeoIPConfig = Field(
        default_factory=GeoIPConfig,
        description="GeoLite2 database locations",
    )

    api: APIConfig = Field(
        default_factory=APIConfig,
        description="API configuration settings",
    )

    server: ServerConfig = Field(
        default_factory=ServerConfig,
        description="HTTP server bind settings",
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )

    tracing: TracingConfig = Field(
        default_factory=TracingConfig,
        description="OpenTelemetry tracing settings",
    )

    @model_validator(mode="after")
    def _apply_legacy_data_dir(self) -> "AppConfig":
        legacy = os.environ.get(LEGACY_DATA_DIR_ENV)
        if legacy and "data_dir" not in self.geoip.model_fields_set:
            self.geoip.data_dir = Path(legacy)
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


@singleton
def get_app_config() -> AppConfig:
    """Get the process-wide application configuration."""
    return AppConfig()
