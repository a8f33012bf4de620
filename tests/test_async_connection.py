"""
Tests for the Async Connection

Run with: python -m pytest tests/test_async_connection.py -v
"""

import asyncio

import pytest

from mcbin.network.async_connection import AsyncConnection
from mcbin.protocol.errors import (
    CasConflictError,
    ConnectionUnusableError,
    NonNumericValueError,
    NotFoundError,
    ShortReadError,
    UnsupportedAuthMechanismError,
)
from tests.fake_server import OP_AUTH_START, response_frame


@pytest.mark.asyncio
@pytest.mark.integration
class TestAsyncScenarios:
    """The same scenarios as the blocking client, driven from asyncio."""

    async def test_set_then_get(self, async_conn: AsyncConnection):
        await async_conn.set("foo", "bar", 0, 0, 0)
        value, cas = await async_conn.get("foo")

        assert value == b"bar"
        assert cas != 0

    async def test_get_missing(self, async_conn: AsyncConnection):
        with pytest.raises(NotFoundError):
            await async_conn.get("missing")

    async def test_cas_mismatch(self, async_conn: AsyncConnection):
        cas = await async_conn.set("foo", "v1")

        with pytest.raises(CasConflictError):
            await async_conn.set("foo", "v2", cas + 1)

        assert (await async_conn.get("foo"))[0] == b"v1"

    async def test_counters(self, async_conn: AsyncConnection):
        assert (await async_conn.increment("counter", 5, 100, 0))[0] == 100
        assert (await async_conn.increment("counter", 5, 100, 0))[0] == 105
        assert (await async_conn.decrement("counter", 10))[0] == 95

    async def test_increment_non_numeric(self, async_conn: AsyncConnection):
        await async_conn.set("name", "alice")

        with pytest.raises(NonNumericValueError):
            await async_conn.increment("name")

    async def test_other_commands(self, async_conn: AsyncConnection):
        await async_conn.add("k", "a")
        await async_conn.append("k", "b")
        await async_conn.prepend("k", "_")
        await async_conn.replace("k", "_ab!")
        assert (await async_conn.get("k"))[0] == b"_ab!"

        await async_conn.delete("k")
        await async_conn.noop()
        await async_conn.flush()
        assert await async_conn.version() == "1.6.21"

    async def test_concurrent_tasks(self, async_conn: AsyncConnection):
        """Tasks sharing a connection are serialized by the lock."""
        async def worker(n: int) -> bytes:
            await async_conn.set(f"task:{n}", str(n))
            return (await async_conn.get(f"task:{n}"))[0]

        results = await asyncio.gather(*(worker(n) for n in range(10)))

        assert results == [str(n).encode() for n in range(10)]

    async def test_authenticate(self, server_factory):
        srv = server_factory(mechanisms="PLAIN", require_auth=True)
        reader, writer = await asyncio.open_connection(srv.host, srv.port)

        async with AsyncConnection(reader, writer) as conn:
            await conn.authenticate("user", "secret")
            await conn.set("foo", "bar")

    async def test_authenticate_without_plain(self, server_factory):
        srv = server_factory(mechanisms="SCRAM-SHA-256")
        reader, writer = await asyncio.open_connection(srv.host, srv.port)

        async with AsyncConnection(reader, writer) as conn:
            with pytest.raises(UnsupportedAuthMechanismError):
                await conn.authenticate("user", "secret")

        assert srv.frames_for(OP_AUTH_START) == []


class _BufferWriter:
    """Minimal StreamWriter stand-in recording writes."""

    def __init__(self):
        self.data = bytearray()
        self.closed = False

    def write(self, data: bytes) -> None:
        self.data += data

    async def drain(self) -> None:
        return None

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        return None


@pytest.mark.asyncio
class TestAsyncShortReads:
    """Framing failures on asyncio streams."""

    async def test_short_read_marks_unusable(self):
        reader = asyncio.StreamReader()
        reader.feed_data(response_frame(0x0A)[:12])
        reader.feed_eof()
        conn = AsyncConnection(reader, _BufferWriter())

        with pytest.raises(ShortReadError) as exc_info:
            await conn.noop()
        assert exc_info.value.received == 12

        with pytest.raises(ConnectionUnusableError):
            await conn.noop()

    async def test_exactly_one_frame_consumed(self):
        reader = asyncio.StreamReader()
        reader.feed_data(response_frame(0x0B, value=b"1.0") + response_frame(0x0A))
        writer = _BufferWriter()
        conn = AsyncConnection(reader, writer)

        assert await conn.version() == "1.0"
        await conn.noop()
        assert len(writer.data) == 48

    async def test_version_with_non_ascii_bytes(self):
        reader = asyncio.StreamReader()
        reader.feed_data(response_frame(0x0B, value=b"1.6\xff"))
        conn = AsyncConnection(reader, _BufferWriter())

        assert await conn.version() == "1.6\ufffd"
        assert conn.usable
