"""
webcore — Exception Hierarchy
==============================

What:  Application-specific exceptions raised by the dispatch core.
How:   Each exception carries a message and an optional context dict, like
       every other error in the package. Request-shape problems never raise;
       they are answered in place by the Context assertion helpers. These
       exceptions cover the remaining cases.

Exception Hierarchy:
    WebCoreError (base)
    ├── ResolutionError           → 500 (dependency could not be resolved)
    ├── InvalidFieldError         → 422 (raised by a model's purify())
    ├── RouteConfigurationError   → fatal at setup time
    └── BuilderAlreadyBuiltError  → fatal at setup time
"""

from typing import Any, Dict, Optional


class WebCoreError(Exception):
    """
    Base exception for all webcore errors.

    Attributes:
        message:  Human-readable description
        context:  Additional debug info (logged, never sent to the client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ResolutionError(WebCoreError):
    """
    Raised by the container when a requested type cannot be built.

    When:  No factory is registered for the type, the factory itself
           failed, or the dependency graph is circular.
    HTTP:  500 Internal Server Error (via Context.resolve)
    """

    def __init__(
        self,
        message: str = "Dependency resolution failed",
        target: Optional[type] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if target is not None:
            ctx["target"] = getattr(target, "__qualname__", repr(target))
        super().__init__(message=message, context=ctx)
        self.target = target


class InvalidFieldError(WebCoreError):
    """
    Raised from a request model's ``purify()`` when a field holds a value
    that is well-formed JSON but semantically invalid.

    HTTP:  422 Unprocessable Entity

    Example:
        def purify(self) -> None:
            if self.name == "bad":
                raise InvalidFieldError("name", "cannot be the string 'bad'")
    """

    def __init__(
        self,
        field: str,
        message: str = "Invalid value",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class RouteConfigurationError(WebCoreError):
    """
    Raised by HandlerBuilder.use() for a route that can never be served
    correctly: an empty path, or a method already registered on that path.
    """

    def __init__(
        self,
        message: str = "Invalid route declaration",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class BuilderAlreadyBuiltError(WebCoreError):
    """
    Raised when a HandlerBuilder is used after build() was called.

    This is a setup bug, not a runtime condition. Nothing in the package
    catches it.
    """

    def __init__(
        self,
        message: str = "a HandlerBuilder can not be used after build has been called",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
