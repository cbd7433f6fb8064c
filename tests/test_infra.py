"""Tests for the lifespan bridge, logging bootstrap and singleton helper."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncGenerator
from typing import Annotated

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from geolookup.configs.system import LoggingConfig
from geolookup.infra.lifespan import get_app, inject
from geolookup.infra.logging import setup_logging
from geolookup.infra.singleton import singleton
from geolookup.infra.telemetry import tracer


def _reader_label() -> str:
    return "readers"


async def _open_readers(
    app: Annotated[FastAPI, Depends(get_app)],
    label: Annotated[str, Depends(_reader_label)],
) -> AsyncGenerator[str, None]:
    app.state.events.append(f"open {label}")
    yield label
    app.state.events.append(f"close {label}")


@inject
async def _lifespan(
    app: FastAPI, readers: Annotated[str, Depends(_open_readers)]
) -> AsyncGenerator[None, None]:
    app.state.events.append(f"started with {readers}")
    yield
    app.state.events.append("stopping")


def _app() -> FastAPI:
    app = FastAPI(lifespan=_lifespan)
    app.state.events = []
    return app


class TestInject:
    def test_dependencies_live_for_whole_lifespan(self):
        app = _app()

        with TestClient(app):
            assert app.state.events == ["open readers", "started with readers"]

        assert app.state.events[-2:] == ["stopping", "close readers"]

    def test_overrides_honoured(self):
        app = _app()
        app.dependency_overrides[_reader_label] = lambda: "fake"

        with TestClient(app):
            pass

        assert app.state.events == [
            "open fake",
            "started with fake",
            "stopping",
            "close fake",
        ]


@pytest.fixture
def restore_logging():
    names = ("", "uvicorn", "uvicorn.error", "uvicorn.access", "geoip2", "opentelemetry")
    saved = {
        name: (lg.level, list(lg.handlers), lg.propagate, lg.disabled)
        for name in names
        for lg in [logging.getLogger(name or None)]
    }
    yield
    for name, (level, handlers, propagate, disabled) in saved.items():
        lg = logging.getLogger(name or None)
        lg.setLevel(level)
        lg.handlers = handlers
        lg.propagate = propagate
        lg.disabled = disabled


class TestSetupLogging:
    def test_json_lines_carry_trace_ids(self, restore_logging, capsys):
        handler = setup_logging(LoggingConfig(level="INFO", json_output=True))

        with tracer.start_as_current_span("geoip.lookup"):
            logging.getLogger("geolookup.test").info("looked up %s", "8.8.8.8")
        handler.flush()

        line = capsys.readouterr().out.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["message"] == "looked up 8.8.8.8"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "geolookup.test"
        assert "trace_id" in payload

    def test_uvicorn_loggers_share_handler(self, restore_logging):
        handler = setup_logging(LoggingConfig(json_output=False))

        for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
            uvicorn_logger = logging.getLogger(name)
            assert uvicorn_logger.handlers == [handler]
            assert uvicorn_logger.propagate is False
        assert logging.getLogger().handlers == [handler]

    def test_access_log_can_be_disabled(self, restore_logging):
        setup_logging(LoggingConfig(access_log=False))
        assert logging.getLogger("uvicorn.access").disabled is True

        setup_logging(LoggingConfig(access_log=True))
        assert logging.getLogger("uvicorn.access").disabled is False

    def test_library_level(self, restore_logging):
        setup_logging(LoggingConfig(library_level="error"))
        assert logging.getLogger("geoip2").level == logging.ERROR


class TestSingleton:
    def test_factory_called_once_until_reset(self):
        calls: list[int] = []

        @singleton
        def build() -> object:
            calls.append(1)
            return object()

        first = build()
        assert build() is first
        assert len(calls) == 1

        build.reset()
        assert build() is not first
        assert len(calls) == 2
