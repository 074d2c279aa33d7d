"""
webcore — Dependency Container
===============================

What:  A small type-keyed dependency container with three lifetimes.
How:   Factories are registered against a type and receive the container
       that is resolving, so they can resolve their own dependencies.

Lifetimes:
    SINGLETON  one instance per root container, shared by every fork
    SCOPED     one instance per fork (i.e. per request)
    TRANSIENT  a new instance on every resolve

The Dispatcher forks the root container for each request, so per-request
objects never leak between concurrently handled requests while singletons
stay shared.
"""

import enum
import logging
import threading
from typing import Any, Callable, Dict, Set, Tuple, Type

from webcore.exceptions import ResolutionError

logger = logging.getLogger(__name__)

Factory = Callable[["Container"], Any]


class Lifetime(enum.Enum):
    SINGLETON = "singleton"
    SCOPED = "scoped"
    TRANSIENT = "transient"


class Container:
    """Type-keyed dependency container supporting per-request forks."""

    def __init__(self) -> None:
        self._registry: Dict[type, Tuple[Factory, Lifetime]] = {}
        self._singletons: Dict[type, Any] = {}
        self._singleton_lock = threading.RLock()
        self._scoped: Dict[type, Any] = {}
        self._resolving: Set[type] = set()

    def register(
        self, dep_type: type, factory: Factory, lifetime: Lifetime = Lifetime.TRANSIENT
    ) -> None:
        """Register a factory for ``dep_type``. A later registration replaces an earlier one."""
        self._registry[dep_type] = (factory, lifetime)

    def register_instance(self, dep_type: type, instance: Any) -> None:
        """Register an already-built object as a singleton."""
        with self._singleton_lock:
            self._singletons[dep_type] = instance
        self._registry[dep_type] = (lambda _: instance, Lifetime.SINGLETON)

    def fork(self) -> "Container":
        """
        Create a child scope.

        The child shares the registry and the singleton cache with its
        parent but starts with an empty scoped cache.
        """
        child = Container.__new__(Container)
        child._registry = self._registry
        child._singletons = self._singletons
        child._singleton_lock = self._singleton_lock
        child._scoped = {}
        child._resolving = set()
        return child

    def resolve(self, *targets: Type[Any]) -> Tuple[Any, ...]:
        """
        Resolve each target type, in order.

        Raises:
            ResolutionError: a target is not registered, its factory
                failed, or the graph is circular.
        """
        return tuple(self._get(target) for target in targets)

    def resolve_one(self, target: Type[Any]) -> Any:
        return self._get(target)

    def _get(self, dep_type: type) -> Any:
        entry = self._registry.get(dep_type)
        if entry is None:
            raise ResolutionError(
                f"the type `{_name(dep_type)}` does not have a resolver in this container",
                target=dep_type,
            )

        factory, lifetime = entry
        if lifetime is Lifetime.SINGLETON:
            with self._singleton_lock:
                if dep_type not in self._singletons:
                    self._singletons[dep_type] = self._build(dep_type, factory)
                return self._singletons[dep_type]

        if lifetime is Lifetime.SCOPED:
            if dep_type not in self._scoped:
                self._scoped[dep_type] = self._build(dep_type, factory)
            return self._scoped[dep_type]

        return self._build(dep_type, factory)

    def _build(self, dep_type: type, factory: Factory) -> Any:
        if dep_type in self._resolving:
            raise ResolutionError(
                f"circular dependency detected while resolving `{_name(dep_type)}`",
                target=dep_type,
            )

        self._resolving.add(dep_type)
        try:
            return factory(self)
        except ResolutionError:
            raise
        except Exception as exc:
            logger.debug("Factory for %s failed: %s", _name(dep_type), exc)
            raise ResolutionError(
                f"the resolver for `{_name(dep_type)}` failed: {exc}",
                target=dep_type,
            ) from exc
        finally:
            self._resolving.discard(dep_type)


def _name(dep_type: Any) -> str:
    module = getattr(dep_type, "__module__", "")
    qualname = getattr(dep_type, "__qualname__", repr(dep_type))
    if module in ("", "builtins"):
        return qualname
    return f"{module}.{qualname}"
