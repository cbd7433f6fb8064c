"""Root logging for the geolookup service.

Every record goes through one stdout handler, rendered either as JSON
lines (``logging.json_output``, the default in containers) or as
uvicorn-style coloured text.  Records carry the active OTEL ``trace_id``
and ``span_id`` (empty strings outside a span) so a ``geoip.lookup`` span
can be joined with the log lines it produced.

uvicorn's own loggers are routed to the same handler.  The access log can
be switched off, since ForwardAuth deployments call ``/lookup`` once per
proxied request.  Third-party libraries log at ``logging.library_level``.
"""

from __future__ import annotations

import logging
import sys

from opentelemetry import trace

from geolookup.configs.system import LoggingConfig

_JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s"
_JSON_RENAMES = {"asctime": "timestamp", "levelname": "level", "name": "logger"}
_TEXT_FORMAT = "%(levelprefix)s %(asctime)s %(name)s  %(message)s"
_TEXT_DATEFMT = "%H:%M:%S"

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
_LIBRARY_LOGGERS = ("opentelemetry", "geoip2", "prometheus_fastapi_instrumentator")


class _TraceContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        ctx = trace.get_current_span().get_span_context()
        valid = ctx is not None and ctx.is_valid
        record.trace_id = format(ctx.trace_id, "032x") if valid else ""  # type: ignore[attr-defined]
        record.span_id = format(ctx.span_id, "016x") if valid else ""  # type: ignore[attr-defined]
        return True


def _formatter(config: LoggingConfig) -> logging.Formatter:
    if config.json_output:
        from pythonjsonlogger.json import JsonFormatter

        return JsonFormatter(
            fmt=_JSON_FORMAT,
            rename_fields=_JSON_RENAMES,
            defaults={"trace_id": "", "span_id": ""},
        )

    from uvicorn.logging import DefaultFormatter

    return DefaultFormatter(fmt=_TEXT_FORMAT, datefmt=_TEXT_DATEFMT, use_colors=True)


def setup_logging(config: LoggingConfig | None = None) -> logging.Handler:
    """Install the service handler on the root and uvicorn loggers.

    Safe to call more than once; the previous handler is replaced.
    Returns the installed handler.
    """
    config = config or LoggingConfig()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_TraceContextFilter())
    handler.setFormatter(_formatter(config))

    root = logging.getLogger()
    root.setLevel(config.level.upper())
    root.handlers = [handler]

    for name in _UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [handler]
        uvicorn_logger.propagate = False
    logging.getLogger("uvicorn.access").disabled = not config.access_log

    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(config.library_level.upper())

    return handler
