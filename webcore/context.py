"""
webcore — Request Context
==========================

What:  Everything a middleware or route handler needs for one request.
How:   Bundles the Starlette request, the measured response sink, a forked
       dependency container, a fresh correlation ID and a typed artifact
       store. The assertion helpers answer bad requests themselves and
       report back with a boolean (or None), so handlers read as a series
       of guard clauses:

           async def create_widget(ctx: Context) -> None:
               body = await ctx.from_json(CreateWidgetRequest)
               if body is None:
                   return
               resolved = await ctx.resolve(WidgetStore)
               if resolved is None:
                   return
               (store,) = resolved
               await ctx.respond_with_json(201, store.create(body))

Who:   Created by the Dispatcher for each request; never shared between
       requests or tasks.
"""

import logging
import uuid
from typing import Any, Dict, Generic, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError
from pydantic_core import to_json
from starlette.datastructures import MutableHeaders
from starlette.requests import Request

from webcore import problem
from webcore.config import Settings
from webcore.container import Container
from webcore.exceptions import InvalidFieldError, ResolutionError
from webcore.routing import Purifiable
from webcore.sink import MeasuredResponseSink

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

CORRELATION_ID_HEADER = "Correlation-ID"


class ArtifactKey(Generic[T]):
    """
    A named, typed slot in the per-request artifact store.

    Declare keys once at module level and share them between the
    middleware that sets a value and the handler that reads it:

        CURRENT_USER: ArtifactKey[User] = ArtifactKey("current-user")
    """

    def __init__(self, name: str, default: Optional[T] = None):
        self.name = name
        self.default = default

    def __repr__(self) -> str:
        return f"ArtifactKey({self.name!r})"


class Context:
    """The context of a single HTTP request. Not thread-safe."""

    def __init__(
        self,
        sink: MeasuredResponseSink,
        request: Request,
        container: Container,
        config: Settings,
    ):
        self._sink = sink
        self._request = request
        self._container = container.fork()
        self._config = config

        self._correlation_id = uuid.uuid4()
        self._artifacts: Dict[str, Any] = {}

        # Every response carries the ID, including implicit 200s from the sink
        self._sink.headers[CORRELATION_ID_HEADER] = str(self._correlation_id)

    # ── Accessors ─────────────────────────────────────────────────────────

    @property
    def correlation_id(self) -> uuid.UUID:
        return self._correlation_id

    @property
    def request(self) -> Request:
        return self._request

    @property
    def sink(self) -> MeasuredResponseSink:
        return self._sink

    @property
    def container(self) -> Container:
        """The per-request fork of the application container."""
        return self._container

    @property
    def config(self) -> Settings:
        return self._config

    @property
    def header(self) -> MutableHeaders:
        """Response headers. Changes after the status is written have no effect."""
        return self._sink.headers

    def get_artifact(self, key: ArtifactKey[T]) -> Optional[T]:
        return self._artifacts.get(key.name, key.default)

    def set_artifact(self, key: ArtifactKey[T], value: T) -> None:
        self._artifacts[key.name] = value

    def get_path_parameter(self, name: str) -> str:
        """A path segment captured by the route pattern, or '' if absent."""
        value = self._request.path_params.get(name)
        return "" if value is None else str(value)

    def get_query_parameter(self, name: str) -> str:
        """The first value of a query parameter, or '' if absent."""
        values = self._request.query_params.getlist(name)
        return values[0] if values else ""

    @property
    def content_length(self) -> int:
        """Declared Content-Length, or -1 when missing or unparsable."""
        raw = self._request.headers.get("content-length")
        if raw is None:
            return -1
        raw = raw.strip()
        if not (raw.isascii() and raw.isdigit()):
            return -1
        return int(raw)

    # ── Dependencies ──────────────────────────────────────────────────────

    async def resolve(self, *targets: Type[Any]) -> Optional[Tuple[Any, ...]]:
        """
        Resolve ``targets`` from the request's container.

        Returns the instances in order, or None after answering the request
        with a 500 when any target could not be resolved.
        """
        try:
            return self._container.resolve(*targets)
        except ResolutionError as exc:
            logger.error("[%s] Dependency resolution failed: %s", self._correlation_id, exc.message)
            await self.internal_server_error(exc)
            return None

    # ── Request Assertions ────────────────────────────────────────────────

    async def assert_content_type(self, *allowed_content_types: str) -> bool:
        """Case-insensitive check of the request Content-Type; 415 on mismatch."""
        content_type = self._request.headers.get("content-type", "")
        normalized = content_type.strip().upper()

        for allowed in allowed_content_types:
            if normalized == allowed.strip().upper():
                return True

        await self.respond_with_json(
            415, problem.unsupported_media_type(self._config, content_type, allowed_content_types)
        )
        return False

    async def assert_content_length(self, maximum: int) -> bool:
        """
        Require a declared Content-Length in (0, maximum].

        An over-limit length answers 413; a missing, unparsable or zero
        length answers 411.
        """
        content_length = self.content_length

        if content_length > maximum:
            await self.respond_with_json(
                413, problem.request_entity_too_large(self._config, content_length, maximum)
            )
            return False

        if content_length <= 0:
            await self.respond_with_json(411, problem.length_required(self._config))
            return False

        return True

    async def assert_method(self, *allowed_methods: str) -> bool:
        """Case-insensitive check of the request method; 405 on mismatch."""
        method = self._request.method
        upper = method.upper()

        for allowed in allowed_methods:
            if upper == allowed.upper():
                return True

        await self.respond_with_json(
            405, problem.method_not_allowed(self._config, method, allowed_methods)
        )
        return False

    async def from_json(self, model_type: Type[M]) -> Optional[M]:
        """
        Decode the JSON request body into ``model_type``.

        Checks Content-Type and Content-Length first, then decodes with
        pydantic and finally runs the model's ``purify()`` if it has one.
        Returns the model, or None once an error response has been sent.
        """
        if not await self.assert_content_type("application/json"):
            return None

        if not await self.assert_content_length(self._config.json_content_length_limit):
            return None

        body = await self._request.body()
        try:
            model = model_type.model_validate_json(body)
        except ValidationError as exc:
            await self.respond_with_json(400, problem.deserialization(self._config, exc))
            return None

        if isinstance(model, Purifiable):
            try:
                model.purify()
            except InvalidFieldError as exc:
                await self.respond_with_json(
                    422, problem.unprocessable_entity(self._config, exc.field, exc.message)
                )
                return None

        return model

    # ── Responses ─────────────────────────────────────────────────────────

    async def respond(self, code: int) -> None:
        """Write the status line, restoring the correlation ID if it was removed."""
        self._sink.headers[CORRELATION_ID_HEADER] = str(self._correlation_id)
        await self._sink.write_header(code)

    async def respond_with_json(self, code: int, model: Any) -> None:
        """
        Serialize ``model`` and send it with ``code``.

        If serialization fails the caller's code is replaced by 500 and a
        fixed problem body is sent instead, so status and body always agree.
        """
        try:
            raw = _serialize(model)
        except (TypeError, ValueError) as exc:
            logger.error("[%s] Response serialization failed: %s", self._correlation_id, exc)
            raw = problem.serialization_failure_body(self._config, exc)
            code = 500

        self._sink.headers["Content-Type"] = "application/json"
        self._sink.headers["Content-Length"] = str(len(raw))
        await self.respond(code)
        await self._sink.write(raw)

    async def not_found(self, subject_type: str, subject: str) -> None:
        await self.respond_with_json(404, problem.not_found(self._config, subject_type, subject))

    async def internal_server_error(self, err: Optional[BaseException] = None) -> None:
        await self.respond_with_json(500, problem.internal_server_error(self._config, err))


def _serialize(model: Any) -> bytes:
    if isinstance(model, BaseModel):
        return model.model_dump_json(by_alias=True).encode("utf-8")
    return to_json(model, by_alias=True)
