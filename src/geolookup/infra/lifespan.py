"""Run ``Depends()`` parameters of the application lifespan.

The GeoIP readers are opened by an ordinary dependency generator
(``build_geoip``) so that startup, shutdown and test overrides go through
the same machinery as request handlers.  ``inject`` resolves those
dependencies against a synthetic ``GET /`` request built for the
lifespan, and keeps them open until the application stops.
"""

from contextlib import AsyncExitStack, asynccontextmanager
from functools import partial
from typing import Any, Callable

from fastapi import FastAPI, Request
from fastapi.dependencies.utils import get_dependant, solve_dependencies

# Scope keys through which FastAPI hands its exit stacks to
# generator dependencies; recent releases assert they are present.
_EXIT_STACK_SCOPE_KEYS = ("fastapi_inner_astack", "fastapi_function_astack")


def get_app(request: Request) -> FastAPI:
    """Lifespan dependency: the application being started."""
    return request.app


def startup_request(app: FastAPI, stack: AsyncExitStack) -> Request:
    """Build the request that lifespan dependencies are solved against.

    Generator dependencies are registered on *stack*, so their teardown
    runs when the lifespan exits rather than after a single request.
    """
    scope: dict[str, Any] = {
        "type": "http",
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": "/",
        "raw_path": b"/",
        "query_string": b"",
        "root_path": "",
        "headers": [],
        "client": None,
        "server": None,
        "state": app.state,
        "app": app,
    }
    for key in _EXIT_STACK_SCOPE_KEYS:
        scope[key] = stack
    return Request(scope)


def inject(lifespan: Callable[..., Any]) -> Callable[[FastAPI], Any]:
    """Wrap an async-generator lifespan whose parameters use ``Depends()``.

    ``app.dependency_overrides`` is honoured, so a test can replace the
    configuration or the readers before entering ``TestClient(app)``.
    """

    @asynccontextmanager
    async def wrapper(app: FastAPI):  # type: ignore[misc]
        dependant = get_dependant(path="/", call=partial(lifespan, app))

        async with AsyncExitStack() as stack:
            solved = await solve_dependencies(
                request=startup_request(app, stack),
                dependant=dependant,
                async_exit_stack=stack,
                embed_body_fields=False,
                dependency_overrides_provider=app,
            )
            if solved.errors:
                raise RuntimeError(f"Invalid lifespan dependencies: {solved.errors}")
            async with asynccontextmanager(lifespan)(app, **solved.values):
                yield

    return wrapper
