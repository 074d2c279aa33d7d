"""
webcore — Route and Middleware Contracts
=========================================

What:  The shapes application code hands to the HandlerBuilder.

Route Anatomy:
    Route(
        method="POST",
        path="/widgets",
        middleware=(Authenticate(), ),
        handle=create_widget,
    )

    Request → [middleware 1] → [middleware 2] → handle(ctx)

    A middleware that returns False ends the request right there; it is
    responsible for whatever response (if any) the client gets.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable, Protocol, Tuple, runtime_checkable

if TYPE_CHECKING:
    from webcore.context import Context

ContextHandler = Callable[["Context"], Awaitable[None]]


@runtime_checkable
class Middleware(Protocol):
    """A pre-handler step. Return True to continue, False to stop the chain."""

    async def handle(self, ctx: "Context") -> bool:
        ...


@runtime_checkable
class Purifiable(Protocol):
    """
    A request model that can check its own semantic validity.

    ``purify`` returns normally when the model is valid and raises
    ``InvalidFieldError`` naming the first offending field otherwise. This
    keeps validation of user input inside the model instead of the route.
    """

    def purify(self) -> None:
        ...


@dataclass(frozen=True)
class Route:
    """One declared endpoint. Several routes may share a path if their methods differ."""

    method: str
    path: str
    handle: ContextHandler
    middleware: Tuple[Middleware, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any sequence but store an immutable one
        object.__setattr__(self, "middleware", tuple(self.middleware))


def normalize_path(path: str) -> str:
    """Convert backslashes to forward slashes and strip surrounding whitespace."""
    return path.replace("\\", "/").strip()
