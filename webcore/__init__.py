"""
webcore — Request-Dispatch Core
================================

What:  Builds a single ASGI entry point from declared routes: method
       dispatch, middleware short-circuiting, fault recovery, uniform
       problem-details errors and one access-log line per request.

Layers:
    ┌─────────────────────────────────────┐
    │   HandlerBuilder → Dispatcher       │  ← routing, recovery, access log
    ├─────────────────────────────────────┤
    │   Context                           │  ← assertions, JSON in/out
    ├─────────────────────────────────────┤
    │   Problem  ·  MeasuredResponseSink  │  ← error bodies, instrumentation
    └─────────────────────────────────────┘
"""

from webcore.builder import Dispatcher, HandlerBuilder
from webcore.config import Settings
from webcore.container import Container, Lifetime
from webcore.context import ArtifactKey, Context
from webcore.exceptions import (
    BuilderAlreadyBuiltError,
    InvalidFieldError,
    ResolutionError,
    RouteConfigurationError,
    WebCoreError,
)
from webcore.problem import Problem
from webcore.routing import Middleware, Purifiable, Route
from webcore.sink import MeasuredResponseSink
from webcore.utils import byte_size_to_friendly_string

__version__ = "1.0.0"

__all__ = [
    "ArtifactKey",
    "BuilderAlreadyBuiltError",
    "Container",
    "Context",
    "Dispatcher",
    "HandlerBuilder",
    "InvalidFieldError",
    "Lifetime",
    "MeasuredResponseSink",
    "Middleware",
    "Problem",
    "Purifiable",
    "ResolutionError",
    "Route",
    "RouteConfigurationError",
    "Settings",
    "WebCoreError",
    "byte_size_to_friendly_string",
]
