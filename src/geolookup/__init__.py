"""IP geolocation service with proxy-aware client IP detection."""

__version__ = "0.1.0"
