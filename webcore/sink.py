"""
webcore — Measured Response Sink
=================================

What:  Wraps an ASGI ``send`` callable and records what was sent.
How:   Status line and headers go out in one ``http.response.start``
       message, body chunks in ``http.response.body`` messages. The sink
       remembers the status code, counts body bytes and times the request
       from the moment it was created.
Who:   Created once per request by the Dispatcher; read by the access log
       and the recovery boundary.

Not safe for concurrent use. One sink belongs to exactly one request.
"""

import time

from starlette.datastructures import MutableHeaders
from starlette.types import Send

# Durations below this are reported as zero
DURATION_FLOOR = 0.005


class MeasuredResponseSink:
    """
    Response writer with write-once header semantics.

    Headers can be modified freely until ``write_header`` is called; after
    that the status line has been committed and further calls are ignored,
    matching what a transport can actually do.
    """

    def __init__(self, send: Send):
        self._send = send
        self._start_time = time.perf_counter()
        self._status_code = 0
        self._volume = 0
        self._has_written_headers = False
        self._closed = False
        self.headers = MutableHeaders()

    async def write_header(self, status_code: int) -> None:
        """Record and send the status line, but only the first time."""
        if self._has_written_headers:
            return

        self._status_code = status_code
        self._has_written_headers = True
        await self._send(
            {
                "type": "http.response.start",
                "status": status_code,
                "headers": list(self.headers.raw),
            }
        )

    async def write(self, data: bytes) -> int:
        """
        Send a body chunk and count its bytes.

        A write before any header implicitly commits a 200 status.
        """
        if not self._has_written_headers:
            await self.write_header(200)

        await self._send(
            {"type": "http.response.body", "body": data, "more_body": True}
        )
        self._volume += len(data)
        return len(data)

    async def close(self) -> None:
        """Terminate the response body. Safe to call more than once."""
        if self._closed:
            return

        if not self._has_written_headers:
            await self.write_header(200)

        self._closed = True
        await self._send({"type": "http.response.body", "body": b"", "more_body": False})

    @property
    def status_code(self) -> int:
        """The status that was written, or 200 if none was set explicitly."""
        return self._status_code or 200

    @property
    def has_written_headers(self) -> bool:
        return self._has_written_headers

    @property
    def volume(self) -> int:
        """Body bytes sent so far."""
        return self._volume

    @property
    def duration(self) -> float:
        """Seconds since the sink was created, floored to 0 below 5ms."""
        elapsed = time.perf_counter() - self._start_time
        if elapsed < DURATION_FLOOR:
            return 0.0
        return elapsed
