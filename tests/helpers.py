"""Test doubles shared by the unit and end-to-end tests."""

import json
from typing import Any, Dict, List, Optional

from starlette.requests import Request


class Greeter:
    def greeting(self) -> str:
        return "Hello, World!"


class RecordingSend:
    """An ASGI ``send`` that keeps every message for later inspection."""

    def __init__(self):
        self.messages: List[Dict[str, Any]] = []

    async def __call__(self, message: Dict[str, Any]) -> None:
        self.messages.append(message)

    @property
    def starts(self) -> List[Dict[str, Any]]:
        return [m for m in self.messages if m["type"] == "http.response.start"]

    @property
    def status(self) -> Optional[int]:
        return self.starts[0]["status"] if self.starts else None

    @property
    def headers(self) -> Dict[str, str]:
        if not self.starts:
            return {}
        return {k.decode("latin-1"): v.decode("latin-1") for k, v in self.starts[0]["headers"]}

    @property
    def body(self) -> bytes:
        return b"".join(m["body"] for m in self.messages if m["type"] == "http.response.body")

    def json(self) -> Any:
        return json.loads(self.body)


def make_request(
    method: str = "GET",
    path: str = "/",
    headers: Optional[Dict[str, str]] = None,
    body: bytes = b"",
    query_string: bytes = b"",
    path_params: Optional[Dict[str, Any]] = None,
) -> Request:
    """Build a Starlette Request without a server."""
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "query_string": query_string,
        "headers": [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in (headers or {}).items()],
        "path_params": path_params or {},
        "server": ("testserver", 80),
        "client": ("testclient", 50000),
    }

    async def receive() -> Dict[str, Any]:
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(scope, receive)


