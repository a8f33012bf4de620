"""
Synchronous Connection Module

Runs request/response exchanges against a memcached-compatible server over
an already established byte stream.

Exchange discipline:
- One lock per connection, held for the full write + read of a frame pair
- Exactly one stream write per request
- Exactly header + body_length bytes read per response
- Any failure while the frame is in flight leaves the stream misaligned,
  so the connection refuses further use

Usage:
    sock = socket.create_connection(("127.0.0.1", 11211))
    with Connection.from_socket(sock) as conn:
        conn.set("foo", "bar")
        value, cas = conn.get("foo")
"""

import logging
import socket
import threading
from typing import BinaryIO, Optional, Tuple

from ..config.settings import settings
from ..protocol import commands
from ..protocol.commands import Text
from ..protocol.errors import ConnectionUnusableError, ShortReadError, UnsupportedAuthMechanismError
from ..protocol.frame import Request, Response, encode_request, read_response
from ..protocol.opcodes import Opcode, response_extras

logger = logging.getLogger(__name__)


class Connection:
    """
    Blocking client connection for the binary protocol.

    Safe to share between threads: concurrent callers are serialized, one
    exchange at a time.

    Attributes:
        stream: Binary file-like object with read(n), write(b) and flush()
    """

    def __init__(self, stream: BinaryIO, sock: Optional[socket.socket] = None):
        """
        Initialize the connection.

        Args:
            stream: Connected bidirectional byte stream
            sock: Socket backing the stream, closed together with it
        """
        self.stream = stream
        self._sock = sock
        self._lock = threading.Lock()
        self._buf = bytearray()
        self._usable = True

    @classmethod
    def from_socket(cls, sock: socket.socket, buffer_size: int = None) -> "Connection":
        """
        Wrap a connected socket in a buffered binary stream.

        Raises:
            ValueError: buffer_size is below 1; an unbuffered socket file may
                        accept only part of a frame per write
        """
        buffer_size = buffer_size if buffer_size is not None else settings.READ_BUFFER_SIZE
        if buffer_size < 1:
            raise ValueError(f"buffer_size must be at least 1, got {buffer_size}")
        return cls(sock.makefile("rwb", buffering=buffer_size), sock=sock)

    @property
    def usable(self) -> bool:
        return self._usable

    def execute(self, request: Request) -> Response:
        """
        Perform one complete exchange.

        Args:
            request: The command to send

        Returns:
            The decoded response on success status.

        Raises:
            ProtocolStatusError: The server reported a non-zero status
            ShortReadError: The stream closed mid-frame
            FramingError: The request or response breaks the frame layout
            ConnectionUnusableError: An earlier exchange failed mid-frame
        """
        shape = response_extras(request.opcode)

        with self._lock:
            if not self._usable:
                raise ConnectionUnusableError("mc: connection is unusable after an earlier I/O failure")

            del self._buf[:]
            encode_request(request, self._buf)

            try:
                self.stream.write(self._buf)
                self.stream.flush()
                response = read_response(self._read_exactly, shape)
            except BaseException as exc:
                self._usable = False
                logger.error(f"Exchange for opcode 0x{request.opcode:02x} failed, connection unusable: {exc}")
                raise

        logger.debug(
            f"opcode=0x{request.opcode:02x} key={request.key!r} "
            f"status=0x{response.status:02x} cas={response.cas}"
        )
        return response.raise_for_status()

    def _read_exactly(self, size: int) -> bytes:
        data = bytearray()
        while len(data) < size:
            chunk = self.stream.read(size - len(data))
            if not chunk:
                raise ShortReadError(size, len(data))
            data += chunk
        return bytes(data)

    def get(self, key: Text) -> Tuple[bytes, int]:
        """
        Fetch an item.

        Returns:
            (value, cas)

        Raises:
            NotFoundError: The key does not exist
        """
        response = self.execute(commands.get(key))
        return response.value, response.cas

    def set(self, key: Text, value: Text, cas: int = 0, flags: int = None, expiration: int = None) -> int:
        """
        Store an item, conditionally when cas is non-zero.

        Returns:
            The CAS of the stored item.

        Raises:
            CasConflictError: cas was given and no longer matches
        """
        return self._store(Opcode.SET, key, value, cas, flags, expiration)

    def add(self, key: Text, value: Text, flags: int = None, expiration: int = None) -> int:
        """Store an item only if the key is absent."""
        return self._store(Opcode.ADD, key, value, 0, flags, expiration)

    def replace(self, key: Text, value: Text, cas: int = 0, flags: int = None, expiration: int = None) -> int:
        """Store an item only if the key already exists."""
        return self._store(Opcode.REPLACE, key, value, cas, flags, expiration)

    def _store(self, opcode, key, value, cas, flags, expiration) -> int:
        request = commands.store(
            opcode,
            key,
            value,
            cas=cas,
            flags=flags if flags is not None else settings.DEFAULT_FLAGS,
            expiration=expiration if expiration is not None else settings.DEFAULT_EXPIRATION,
        )
        return self.execute(request).cas

    def append(self, key: Text, value: Text, cas: int = 0) -> int:
        return self.execute(commands.concat(Opcode.APPEND, key, value, cas)).cas

    def prepend(self, key: Text, value: Text, cas: int = 0) -> int:
        return self.execute(commands.concat(Opcode.PREPEND, key, value, cas)).cas

    def delete(self, key: Text, cas: int = 0) -> None:
        self.execute(commands.delete(key, cas))

    def increment(self, key: Text, delta: int = 1, initial: int = 0, expiration: int = 0) -> Tuple[int, int]:
        """
        Add delta to a counter, creating it as initial when absent.

        Returns:
            (new value, cas)

        Raises:
            NonNumericValueError: The stored value is not a number
        """
        response = self.execute(commands.counter(Opcode.INCREMENT, key, delta, initial, expiration))
        return commands.counter_value(response)

    def decrement(self, key: Text, delta: int = 1, initial: int = 0, expiration: int = 0) -> Tuple[int, int]:
        """Subtract delta from a counter; see increment()."""
        response = self.execute(commands.counter(Opcode.DECREMENT, key, delta, initial, expiration))
        return commands.counter_value(response)

    def flush(self, expiration: int = None) -> None:
        self.execute(commands.flush(expiration))

    def noop(self) -> None:
        self.execute(commands.noop())

    def version(self) -> str:
        return self.execute(commands.version()).value.decode("ascii", errors="replace")

    def authenticate(self, user: Text, password: Text) -> None:
        """
        Authenticate with SASL PLAIN.

        Lists the server's mechanisms first; credentials are only sent when
        PLAIN is among them.

        Raises:
            UnsupportedAuthMechanismError: PLAIN is not offered
            AuthRequiredError: The server rejected the credentials
        """
        mechanisms = self.execute(commands.auth_list()).value
        if not commands.supports_plain(mechanisms):
            raise UnsupportedAuthMechanismError(mechanisms.decode("ascii", errors="replace"))

        self.execute(commands.auth_plain(user, password))
        logger.debug(f"Authenticated as {user!r} with PLAIN")

    def close(self) -> None:
        """
        Close the stream (and its socket, when wrapped with from_socket).

        Does not wait for the lock, so it also unblocks an exchange stuck
        in I/O on another thread.
        """
        self._usable = False
        if self._sock is not None:
            try:
                # Wakes a reader blocked in recv before the buffered stream is closed
                self._sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                logger.debug("Socket already disconnected")
        try:
            self.stream.close()
        finally:
            if self._sock is not None:
                self._sock.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
