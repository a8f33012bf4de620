"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import socket
import threading
from contextlib import closing
from typing import AsyncGenerator, Callable, Generator

import pytest
import pytest_asyncio

from mcbin.network.async_connection import AsyncConnection
from mcbin.network.connection import Connection
from tests.fake_server import FakeMemcacheServer, InMemoryStream


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# ============================================================================
# In-memory Stream Fixtures
# ============================================================================

@pytest.fixture
def stream() -> InMemoryStream:
    """A stream with no canned response; tests feed() what they need."""
    return InMemoryStream()


@pytest.fixture
def stream_conn(stream: InMemoryStream) -> Connection:
    """A Connection wired to the in-memory stream."""
    return Connection(stream)


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_loop() -> Generator[asyncio.AbstractEventLoop, None, None]:
    """
    An event loop running on a background thread.

    Hosting the fake server off the test thread lets blocking Connection
    tests and pytest-asyncio tests talk to the same server.
    """
    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()

    yield loop

    loop.call_soon_threadsafe(loop.stop)
    thread.join(timeout=5)
    loop.close()


@pytest.fixture
def server_factory(server_loop: asyncio.AbstractEventLoop) -> Generator[Callable[..., FakeMemcacheServer], None, None]:
    """
    Factory fixture to start fake servers with custom options.

    Usage:
        def test_something(server_factory):
            srv = server_factory(mechanisms="CRAM-MD5")
    """
    started = []

    def factory(**options) -> FakeMemcacheServer:
        srv = FakeMemcacheServer(host='127.0.0.1', port=find_free_port(), **options)
        asyncio.run_coroutine_threadsafe(srv.start(), server_loop).result(timeout=5)
        started.append(srv)
        return srv

    yield factory

    for srv in started:
        asyncio.run_coroutine_threadsafe(srv.stop(), server_loop).result(timeout=5)


@pytest.fixture
def server(server_factory) -> FakeMemcacheServer:
    """A running fake server with default options."""
    return server_factory()


# ============================================================================
# Client Fixtures
# ============================================================================

@pytest.fixture
def connect() -> Generator[Callable[[FakeMemcacheServer], Connection], None, None]:
    """Factory that opens blocking connections and closes them afterwards."""
    opened = []

    def factory(srv: FakeMemcacheServer) -> Connection:
        sock = socket.create_connection((srv.host, srv.port), timeout=5)
        conn = Connection.from_socket(sock)
        opened.append(conn)
        return conn

    yield factory

    for conn in opened:
        conn.close()


@pytest.fixture
def conn(server: FakeMemcacheServer, connect) -> Connection:
    """A blocking connection to the default fake server."""
    return connect(server)


@pytest_asyncio.fixture
async def async_conn(server: FakeMemcacheServer) -> AsyncGenerator[AsyncConnection, None]:
    """An asyncio connection to the default fake server."""
    reader, writer = await asyncio.open_connection(server.host, server.port)
    connection = AsyncConnection(reader, writer)

    yield connection

    await connection.close()


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
