"""
mcbin: Binary Memcached Protocol Client

A client for the memcached binary protocol that runs one request/response
exchange at a time over a caller-supplied byte stream, in blocking or
asyncio flavour.
"""

from .network import AsyncConnection, Connection
from .protocol.errors import (
    AuthRequiredError,
    CasConflictError,
    ConnectionUnusableError,
    FramingError,
    InvalidArgumentsError,
    KeyExistsError,
    McError,
    NonNumericValueError,
    NotFoundError,
    OutOfMemoryError,
    ProtocolStatusError,
    ShortReadError,
    UnknownCommandError,
    UnknownStatusError,
    UnsupportedAuthMechanismError,
    UnsupportedExtrasError,
    ValueNotStoredError,
    ValueTooLargeError,
)

__version__ = "1.0.0"

__all__ = [
    "AsyncConnection",
    "AuthRequiredError",
    "CasConflictError",
    "Connection",
    "ConnectionUnusableError",
    "FramingError",
    "InvalidArgumentsError",
    "KeyExistsError",
    "McError",
    "NonNumericValueError",
    "NotFoundError",
    "OutOfMemoryError",
    "ProtocolStatusError",
    "ShortReadError",
    "UnknownCommandError",
    "UnknownStatusError",
    "UnsupportedAuthMechanismError",
    "UnsupportedExtrasError",
    "ValueNotStoredError",
    "ValueTooLargeError",
]
