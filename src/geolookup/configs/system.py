from pathlib import Path

from pydantic import BaseModel, Field


class GeoIPConfig(BaseModel):
    """Location of the MaxMind databases."""

    data_dir: Path = Field(
        default=Path("./data"),
        description="Directory holding the GeoLite2 .mmdb files",
    )
    city_db_file: str = Field(
        default="GeoLite2-City.mmdb", description="City database file name"
    )
    asn_db_file: str = Field(
        default="GeoLite2-ASN.mmdb", description="ASN database file name"
    )
    locales: list[str] = Field(
        default_factory=lambda: ["en"],
        description="Preferred locales for place names",
    )

    @property
    def city_db_path(self) -> Path:
        return self.data_dir / self.city_db_file

    @property
    def asn_db_path(self) -> Path:
        return self.data_dir / self.asn_db_file


class APIConfig(BaseModel):
    """API configuration settings."""

    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["*"], description="Allowed CORS origins"
    )
    # Echo the peer address and proxy headers back from /myip.
    debug_client_info: bool = Field(
        default=True, description="Include proxy debug info in /myip"
    )


class ServerConfig(BaseModel):
    """Uvicorn bind address."""

    host: str = Field(default="0.0.0.0", description="API server host")
    port: int = Field(default=8080, description="API server port")


class LoggingConfig(BaseModel):
    """Root logger settings."""

    level: str = Field(default="INFO", description="Root log level")
    json_output: bool = Field(
        default=True, description="Emit JSON lines instead of coloured text"
    )
    access_log: bool = Field(
        default=True, description="Keep uvicorn's per-request access log"
    )
    library_level: str = Field(
        default="WARNING",
        description="Level for opentelemetry, geoip2 and other library loggers",
    )


class TracingConfig(BaseModel):
    """OpenTelemetry tracing settings."""

    enabled: bool = Field(default=False, description="Enable OTLP tracing")
    endpoint: str = Field(default="", description="OTLP HTTP traces endpoint")
    username: str = Field(default="", description="Basic auth user")
    password: str = Field(default="", description="Basic auth password")
    service_name: str = Field(default="geolookup", description="OTEL service name")
    sample_rate: float = Field(default=1.0, description="Root sampling ratio")
    excluded_urls: list[str] = Field(
        default_factory=lambda: ["/health", "/metrics"],
        description="Paths excluded from tracing and HTTP metrics",
    )
