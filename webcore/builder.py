"""
webcore — Handler Builder & Dispatcher
=======================================

What:  Turns a set of declared Routes into one ASGI application.
How:   Routes are grouped by normalized path while the builder is open.
       build() compiles one endpoint per path, mounts them on a Starlette
       Router together with a catch-all 404, and returns an immutable
       Dispatcher. The builder refuses any use after that.

Request Pipeline (per compiled endpoint):
    ┌──────────────┐   ┌──────────────┐   ┌──────────────┐   ┌──────────┐
    │ Sink+Context │──▶│ Method check │──▶│  Middleware  │──▶│ Handler  │
    └──────────────┘   │  (405)       │   │  (in order)  │   └──────────┘
                       └──────────────┘   └──────────────┘
    Wrapped by:
    - recovery boundary: uncaught exception → 500 if no status was sent
    - access log: one line per request, always

Lifecycle:
    HandlerBuilder (open) ──build()──▶ Dispatcher (immutable, shared)
"""

import logging
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from starlette.requests import Request
from starlette.routing import Route as StarletteRoute
from starlette.routing import Router
from starlette.types import Receive, Scope, Send

from webcore.config import Settings, settings
from webcore.container import Container
from webcore.context import Context
from webcore.exceptions import BuilderAlreadyBuiltError, RouteConfigurationError
from webcore.routing import ContextHandler, Route, normalize_path
from webcore.sink import MeasuredResponseSink
from webcore.utils import byte_size_to_friendly_string, format_duration

logger = logging.getLogger(__name__)

# Receives exactly one line per completed request
access_logger = logging.getLogger("webcore.access")


class HandlerBuilder:
    """
    Collects routes and builds the Dispatcher that serves them.

    Not thread-safe. Use it from a single setup phase, then call build()
    exactly once.
    """

    def __init__(
        self,
        container: Container,
        logger: Optional[logging.Logger] = None,
        config: Optional[Settings] = None,
    ):
        self._container = container
        self._logger = logger or access_logger
        self._config = config or settings

        self._routes_by_path: Dict[str, List[Route]] = {}
        self._has_been_built = False

    def use(self, route: Route) -> None:
        """Add a route to the set this handler will expose."""
        self._assert_not_already_built()

        path = normalize_path(route.path)
        if not path.startswith("/"):
            raise RouteConfigurationError(
                f"route path must be non-empty and start with '/', got {route.path!r}",
                context={"method": route.method, "path": route.path},
            )

        routes = self._routes_by_path.setdefault(path, [])
        method = route.method.upper()
        if any(existing.method.upper() == method for existing in routes):
            raise RouteConfigurationError(
                f"method {route.method} is already registered for path {path}",
                context={"method": route.method, "path": path},
            )

        routes.append(route)

    def build(self) -> "Dispatcher":
        """Compile every registered path into an ASGI Dispatcher."""
        self._assert_not_already_built()
        self._has_been_built = True

        endpoints = []
        table = {}
        for path, routes in self._routes_by_path.items():
            handler = _build_handler_for_path(routes)
            endpoints.append(StarletteRoute(path, endpoint=self._adapt(handler)))
            table[path] = tuple(route.method for route in routes)

        fallback = self._adapt(_path_not_found)
        router = Router(routes=endpoints, redirect_slashes=False, default=fallback)

        logger.debug("Built dispatcher for %d path(s)", len(table))
        return Dispatcher(router, table)

    def _adapt(self, handler: ContextHandler) -> "RequestAdapter":
        return RequestAdapter(handler, self._container, self._logger, self._config)

    def _assert_not_already_built(self) -> None:
        if self._has_been_built:
            raise BuilderAlreadyBuiltError()


class Dispatcher:
    """
    The compiled, immutable ASGI entry point produced by HandlerBuilder.build().

    Safe to share across any number of concurrently handled requests.
    """

    def __init__(self, router: Router, table: Mapping[str, Tuple[str, ...]]):
        self._router = router
        self._table = MappingProxyType(dict(table))

    @property
    def routes(self) -> Mapping[str, Tuple[str, ...]]:
        """Read-only view of path → methods."""
        return self._table

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "websocket":
            await send({"type": "websocket.close", "code": 1000})
            return
        await self._router(scope, receive, send)


class RequestAdapter:
    """
    ASGI endpoint that runs one ContextHandler inside the recovery boundary.

    A class instance rather than a function so Starlette mounts it as a raw
    ASGI app that accepts every method; method checks happen in the
    compiled per-path handler.
    """

    def __init__(
        self,
        handler: ContextHandler,
        container: Container,
        access_log: logging.Logger,
        config: Settings,
    ):
        self._handler = handler
        self._container = container
        self._access_log = access_log
        self._config = config

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        sink = MeasuredResponseSink(send)
        request = Request(scope, receive)
        ctx = Context(sink, request, self._container, self._config)

        try:
            await self._handler(ctx)
        except Exception as exc:
            await _recover(ctx, exc)
        finally:
            self._access_log.info(
                "• %d %s %s %s",
                sink.status_code,
                format_duration(sink.duration),
                byte_size_to_friendly_string(sink.volume),
                request.url.path,
            )

        await sink.close()


async def _recover(ctx: Context, exc: Exception) -> None:
    if ctx.sink.has_written_headers:
        logger.error(
            "[%s] Fault after the response was committed on %s: %s",
            ctx.correlation_id,
            ctx.request.url.path,
            exc,
            exc_info=True,
        )
        return

    logger.error(
        "[%s] Unhandled fault on %s: %s",
        ctx.correlation_id,
        ctx.request.url.path,
        exc,
        exc_info=True,
    )
    await ctx.internal_server_error(exc)


def _build_handler_for_path(routes: List[Route]) -> ContextHandler:
    handler_by_method = {route.method.upper(): _build_handler_for_route(route) for route in routes}
    allowed_methods = [route.method for route in routes]

    async def handle(ctx: Context) -> None:
        if not await ctx.assert_method(*allowed_methods):
            return

        await handler_by_method[ctx.request.method.upper()](ctx)

    return handle


def _build_handler_for_route(route: Route) -> ContextHandler:
    async def handle(ctx: Context) -> None:
        for middleware in route.middleware:
            should_continue = await middleware.handle(ctx)
            if not should_continue:
                return

        await route.handle(ctx)

    return handle


async def _path_not_found(ctx: Context) -> None:
    await ctx.not_found("path", ctx.request.url.path)
