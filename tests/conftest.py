"""
webcore — Test Configuration (conftest.py)
===========================================

What:  Shared pytest fixtures for the entire test suite.
How:   Unit tests drive Context and the sink directly with a hand-built ASGI
       scope and a recording ``send``; end-to-end tests send real requests
       through the Dispatcher with an HTTPX AsyncClient over ASGITransport.

Fixture Hierarchy:
    ├── config / production_config: Settings with debugging on / off
    ├── container: Container with a singleton Greeter registered
    ├── recorder: RecordingSend collecting ASGI messages
    ├── make_context: factory building a Context for a fake request
    └── (test_builder.py) client: AsyncClient bound to a built Dispatcher
"""

from typing import Any, Optional

import pytest

from tests.helpers import Greeter, RecordingSend, make_request
from webcore.config import Settings
from webcore.container import Container, Lifetime
from webcore.context import Context
from webcore.sink import MeasuredResponseSink


@pytest.fixture
def config():
    """Settings as used in most tests: debugging on, a recognisable prefix."""
    return Settings(
        problem_type_prefix="https://testi.ng",
        debugging_enabled=True,
        json_content_length_limit=1 << 20,
    )


@pytest.fixture
def production_config():
    """Settings with debugging off, so no raw error text may leak."""
    return Settings(
        problem_type_prefix="https://testi.ng",
        debugging_enabled=False,
        json_content_length_limit=1 << 20,
    )


@pytest.fixture
def container():
    c = Container()
    c.register(Greeter, lambda _: Greeter(), Lifetime.SINGLETON)
    return c


@pytest.fixture
def recorder():
    return RecordingSend()


@pytest.fixture
def make_context(container, config, recorder):
    """
    Factory for a Context around a fake request.

    Usage:
        ctx = make_context(method="POST", headers={...}, body=b"...")
        await ctx.respond(200)
        assert recorder.status == 200
    """

    def _make(settings: Optional[Settings] = None, **request_kwargs: Any) -> Context:
        sink = MeasuredResponseSink(recorder)
        return Context(sink, make_request(**request_kwargs), container, settings or config)

    return _make
