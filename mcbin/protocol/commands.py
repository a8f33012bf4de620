"""
Command Definitions

Builders that turn a high-level operation into a Request, plus the helpers
that interpret the matching Response. Connections stay free of wire details:
they only run the exchange.
"""

import struct
from typing import Optional, Tuple, Union

from ..config.settings import settings
from .errors import FramingError
from .frame import Request, Response
from .opcodes import COUNTER_VALUE_WIDTH, FLUSH_EXTRAS, Opcode

Text = Union[str, bytes]

PLAIN_MECHANISM = "PLAIN"


def to_bytes(data: Text) -> bytes:
    """Encode str with the configured encoding; pass bytes through."""
    if isinstance(data, str):
        return data.encode(settings.ENCODING)
    return bytes(data)


def get(key: Text) -> Request:
    return Request(Opcode.GET, key=to_bytes(key))


def store(
        opcode: Opcode,
        key: Text,
        value: Text,
        cas: int = 0,
        flags: int = 0,
        expiration: int = 0,
) -> Request:
    """
    Build a Set, Add or Replace request.

    Args:
        opcode: One of Opcode.SET, Opcode.ADD, Opcode.REPLACE
        key: Item key
        value: Item value
        cas: Expected CAS; 0 writes unconditionally
        flags: Opaque client flags stored with the item
        expiration: Expiration in seconds (0 = never)
    """
    if opcode not in (Opcode.SET, Opcode.ADD, Opcode.REPLACE):
        raise ValueError(f"{opcode!r} is not a storage opcode")
    return Request(
        opcode,
        key=to_bytes(key),
        value=to_bytes(value),
        extras=(flags, expiration),
        cas=cas,
    )


def concat(opcode: Opcode, key: Text, value: Text, cas: int = 0) -> Request:
    """Build an Append or Prepend request."""
    if opcode not in (Opcode.APPEND, Opcode.PREPEND):
        raise ValueError(f"{opcode!r} is not a concatenation opcode")
    return Request(opcode, key=to_bytes(key), value=to_bytes(value), cas=cas)


def delete(key: Text, cas: int = 0) -> Request:
    return Request(Opcode.DELETE, key=to_bytes(key), cas=cas)


def counter(opcode: Opcode, key: Text, delta: int, initial: int = 0, expiration: int = 0) -> Request:
    """
    Build an Increment or Decrement request.

    When the key is absent the server stores `initial` instead of applying
    `delta`.
    """
    if opcode not in (Opcode.INCREMENT, Opcode.DECREMENT):
        raise ValueError(f"{opcode!r} is not a counter opcode")
    return Request(
        opcode,
        key=to_bytes(key),
        extras=(delta, initial, expiration),
    )


def flush(expiration: Optional[int] = None) -> Request:
    if expiration is None:
        return Request(Opcode.FLUSH)
    return Request(Opcode.FLUSH, extras=(expiration,), shape=FLUSH_EXTRAS)


def noop() -> Request:
    return Request(Opcode.NOOP)


def version() -> Request:
    return Request(Opcode.VERSION)


def auth_list() -> Request:
    return Request(Opcode.AUTH_LIST)


def auth_plain(user: Text, password: Text) -> Request:
    """PLAIN credentials: authzid (empty), user and password, NUL separated."""
    blob = b"\x00" + to_bytes(user) + b"\x00" + to_bytes(password)
    return Request(Opcode.AUTH_START, key=PLAIN_MECHANISM.encode("ascii"), value=blob)


def counter_value(response: Response) -> Tuple[int, int]:
    """Decode the 64-bit counter carried in a counter response value."""
    width = COUNTER_VALUE_WIDTH
    if len(response.value) != width.size:
        raise FramingError(
            f"mc: counter value must be {width.size} bytes, got {len(response.value)}"
        )
    (value,) = struct.unpack(">" + width.value, response.value)
    return value, response.cas


def supports_plain(mechanisms: bytes) -> bool:
    """Whether a space separated mechanism list offers PLAIN."""
    return PLAIN_MECHANISM in mechanisms.decode("ascii", errors="replace").split()
