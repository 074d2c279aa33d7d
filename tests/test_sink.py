"""Tests for MeasuredResponseSink: write-once headers, volume and timing."""

import time

import pytest

from webcore.sink import MeasuredResponseSink


class TestMeasuredResponseSink:

    @pytest.fixture(autouse=True)
    def _sink(self, recorder):
        """Create a fresh sink over a recording send for each test."""
        self.send = recorder
        self.sink = MeasuredResponseSink(recorder)

    @pytest.mark.asyncio
    async def test_headers_are_sent_with_status(self):
        """Headers set before write_header travel in the start message."""
        self.sink.headers["X-Test-Header"] = "test-value"

        await self.sink.write_header(201)

        assert self.send.status == 201
        assert self.send.headers["x-test-header"] == "test-value"

    @pytest.mark.asyncio
    async def test_sent_headers_are_not_changed_afterwards(self):
        self.sink.headers["X-Test-Header"] = "test-value"
        await self.sink.write_header(200)

        self.sink.headers["X-Late"] = "ignored"

        assert "x-late" not in self.send.headers

    @pytest.mark.asyncio
    async def test_write_records_volume(self):
        await self.sink.write_header(200)
        written = await self.sink.write(b"Hello, World!")

        assert written == 13
        assert self.sink.volume == 13
        assert self.send.body == b"Hello, World!"

    @pytest.mark.asyncio
    async def test_status_is_only_set_once(self):
        await self.sink.write_header(400)
        await self.sink.write_header(403)

        assert len(self.send.starts) == 1
        assert self.send.status == 400
        assert self.sink.status_code == 400

    def test_status_defaults_to_200(self):
        assert self.sink.status_code == 200

    def test_has_not_written_headers_initially(self):
        assert self.sink.has_written_headers is False

    @pytest.mark.asyncio
    async def test_has_written_headers_after_write_header(self):
        await self.sink.write_header(201)
        assert self.sink.has_written_headers is True

    @pytest.mark.asyncio
    async def test_write_without_header_commits_200(self):
        await self.sink.write(b"abc")

        assert self.send.status == 200
        assert self.sink.has_written_headers is True

    @pytest.mark.asyncio
    async def test_close_terminates_body_once(self):
        await self.sink.write_header(204)
        await self.sink.close()
        await self.sink.close()

        final = [m for m in self.send.messages if m["type"] == "http.response.body"]
        assert len(final) == 1
        assert final[0]["more_body"] is False

    @pytest.mark.asyncio
    async def test_close_without_response_sends_200(self):
        await self.sink.close()
        assert self.send.status == 200

    def test_short_duration_is_floored_to_zero(self):
        assert self.sink.duration == 0.0

    def test_duration_measures_elapsed_time(self):
        time.sleep(0.05)
        assert 0.045 <= self.sink.duration < 1.0
