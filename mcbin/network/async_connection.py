"""
Async Connection Module

The asyncio counterpart of Connection. Streams come from the caller, e.g.
asyncio.open_connection(); an asyncio.Lock spans write, drain and the
response reads so tasks sharing a connection take turns.
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from typing import Tuple

from ..config.settings import settings
from ..protocol import commands
from ..protocol.commands import Text
from ..protocol.errors import ConnectionUnusableError, ShortReadError, UnsupportedAuthMechanismError
from ..protocol.frame import Request, Response, decode_body, decode_header, encode_request
from ..protocol.header import HEADER_SIZE
from ..protocol.opcodes import Opcode, response_extras

logger = logging.getLogger(__name__)


class AsyncConnection:
    """
    Asyncio client connection for the binary protocol.

    Usage:
        reader, writer = await asyncio.open_connection(host, port)
        conn = AsyncConnection(reader, writer)
        await conn.set("foo", "bar")
        value, cas = await conn.get("foo")
        await conn.close()
    """

    def __init__(self, reader: StreamReader, writer: StreamWriter):
        self.reader = reader
        self.writer = writer
        self._lock = asyncio.Lock()
        self._buf = bytearray()
        self._usable = True

    @property
    def usable(self) -> bool:
        return self._usable

    async def execute(self, request: Request) -> Response:
        """Perform one complete exchange; see Connection.execute()."""
        shape = response_extras(request.opcode)

        async with self._lock:
            if not self._usable:
                raise ConnectionUnusableError("mc: connection is unusable after an earlier I/O failure")

            del self._buf[:]
            encode_request(request, self._buf)

            try:
                self.writer.write(bytes(self._buf))
                await self.writer.drain()

                header = decode_header(await self._read_exactly(HEADER_SIZE))
                body = await self._read_exactly(header.body_length) if header.body_length else b""
                response = decode_body(header, body, shape)
            except (Exception, asyncio.CancelledError) as exc:
                self._usable = False
                logger.error(f"Exchange for opcode 0x{request.opcode:02x} failed, connection unusable: {exc!r}")
                raise

        logger.debug(
            f"opcode=0x{request.opcode:02x} key={request.key!r} "
            f"status=0x{response.status:02x} cas={response.cas}"
        )
        return response.raise_for_status()

    async def _read_exactly(self, size: int) -> bytes:
        try:
            return await self.reader.readexactly(size)
        except asyncio.IncompleteReadError as exc:
            raise ShortReadError(size, len(exc.partial)) from exc

    async def get(self, key: Text) -> Tuple[bytes, int]:
        response = await self.execute(commands.get(key))
        return response.value, response.cas

    async def set(self, key: Text, value: Text, cas: int = 0, flags: int = None, expiration: int = None) -> int:
        return await self._store(Opcode.SET, key, value, cas, flags, expiration)

    async def add(self, key: Text, value: Text, flags: int = None, expiration: int = None) -> int:
        return await self._store(Opcode.ADD, key, value, 0, flags, expiration)

    async def replace(self, key: Text, value: Text, cas: int = 0, flags: int = None, expiration: int = None) -> int:
        return await self._store(Opcode.REPLACE, key, value, cas, flags, expiration)

    async def _store(self, opcode, key, value, cas, flags, expiration) -> int:
        request = commands.store(
            opcode,
            key,
            value,
            cas=cas,
            flags=flags if flags is not None else settings.DEFAULT_FLAGS,
            expiration=expiration if expiration is not None else settings.DEFAULT_EXPIRATION,
        )
        return (await self.execute(request)).cas

    async def append(self, key: Text, value: Text, cas: int = 0) -> int:
        return (await self.execute(commands.concat(Opcode.APPEND, key, value, cas))).cas

    async def prepend(self, key: Text, value: Text, cas: int = 0) -> int:
        return (await self.execute(commands.concat(Opcode.PREPEND, key, value, cas))).cas

    async def delete(self, key: Text, cas: int = 0) -> None:
        await self.execute(commands.delete(key, cas))

    async def increment(self, key: Text, delta: int = 1, initial: int = 0, expiration: int = 0) -> Tuple[int, int]:
        response = await self.execute(commands.counter(Opcode.INCREMENT, key, delta, initial, expiration))
        return commands.counter_value(response)

    async def decrement(self, key: Text, delta: int = 1, initial: int = 0, expiration: int = 0) -> Tuple[int, int]:
        response = await self.execute(commands.counter(Opcode.DECREMENT, key, delta, initial, expiration))
        return commands.counter_value(response)

    async def flush(self, expiration: int = None) -> None:
        await self.execute(commands.flush(expiration))

    async def noop(self) -> None:
        await self.execute(commands.noop())

    async def version(self) -> str:
        return (await self.execute(commands.version())).value.decode("ascii", errors="replace")

    async def authenticate(self, user: Text, password: Text) -> None:
        mechanisms = (await self.execute(commands.auth_list())).value
        if not commands.supports_plain(mechanisms):
            raise UnsupportedAuthMechanismError(mechanisms.decode("ascii", errors="replace"))

        await self.execute(commands.auth_plain(user, password))
        logger.debug(f"Authenticated as {user!r} with PLAIN")

    async def close(self) -> None:
        self._usable = False
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except ConnectionError:
            logger.debug("Connection already reset while closing")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
