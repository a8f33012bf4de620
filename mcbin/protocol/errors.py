"""
Protocol Errors and Status Mapping

Every failure raised by mcbin derives from McError. Server status codes are
translated into ProtocolStatusError subclasses through a static, read-only
table; anything the table does not know becomes UnknownStatusError.
"""

import logging
from enum import IntEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping, Optional, Type

if TYPE_CHECKING:
    from .frame import Response

logger = logging.getLogger(__name__)


class Status(IntEnum):
    """Response status codes understood by the client."""
    SUCCESS = 0x00
    KEY_NOT_FOUND = 0x01
    KEY_EXISTS = 0x02
    VALUE_TOO_LARGE = 0x03
    INVALID_ARGUMENTS = 0x04
    VALUE_NOT_STORED = 0x05
    NON_NUMERIC_VALUE = 0x06
    AUTH_REQUIRED = 0x20
    UNKNOWN_COMMAND = 0x81
    OUT_OF_MEMORY = 0x82


class McError(Exception):
    """Base class for all mcbin errors."""


class FramingError(McError):
    """A frame violates the binary layout (lengths, ranges, magic)."""


class UnsupportedExtrasError(FramingError):
    """An extras field declares a width the codec cannot write."""


class ShortReadError(McError, ConnectionError):
    """The stream ended before a complete frame was read."""

    def __init__(self, expected: int, received: int):
        super().__init__(f"mc: short read, expected {expected} bytes, got {received}")
        self.expected = expected
        self.received = received


class ConnectionUnusableError(McError):
    """The connection lost frame alignment in an earlier exchange."""


class UnsupportedAuthMechanismError(McError):
    """The server offers no authentication mechanism the client speaks."""

    def __init__(self, mechanisms: str):
        super().__init__(f"mc: unknown auth types {mechanisms!r}")
        self.mechanisms = mechanisms


class ProtocolStatusError(McError):
    """
    The server answered with a non-zero status.

    Attributes:
        status: The raw status code from the response header
        response: The parsed response frame (key, value and CAS as sent)
    """
    message = "mc: protocol error"

    def __init__(self, status: int, response: Optional["Response"] = None):
        super().__init__(self.message)
        self.status = status
        self.response = response


class NotFoundError(ProtocolStatusError):
    message = "mc: not found"


class CasConflictError(ProtocolStatusError):
    """A conditional write lost against a newer version of the item."""


class KeyExistsError(CasConflictError):
    message = "mc: key exists"


class ValueNotStoredError(CasConflictError):
    message = "mc: value not stored"


class ValueTooLargeError(ProtocolStatusError):
    message = "mc: value too large"


class InvalidArgumentsError(ProtocolStatusError):
    message = "mc: invalid arguments"


class NonNumericValueError(ProtocolStatusError):
    message = "mc: incr/decr called on non-numeric value"


class AuthRequiredError(ProtocolStatusError):
    message = "mc: authentication required"


class UnknownCommandError(ProtocolStatusError):
    message = "mc: unknown command"


class OutOfMemoryError(ProtocolStatusError):
    message = "mc: out of memory"


class UnknownStatusError(ProtocolStatusError):
    message = "mc: unknown error from server"

    def __init__(self, status: int, response: Optional["Response"] = None):
        super().__init__(status, response)
        self.args = (f"{self.message} (status 0x{status:02x})",)


STATUS_ERRORS: Mapping[int, Optional[Type[ProtocolStatusError]]] = MappingProxyType({
    Status.SUCCESS: None,
    Status.KEY_NOT_FOUND: NotFoundError,
    Status.KEY_EXISTS: KeyExistsError,
    Status.VALUE_TOO_LARGE: ValueTooLargeError,
    Status.INVALID_ARGUMENTS: InvalidArgumentsError,
    Status.VALUE_NOT_STORED: ValueNotStoredError,
    Status.NON_NUMERIC_VALUE: NonNumericValueError,
    Status.AUTH_REQUIRED: AuthRequiredError,
    Status.UNKNOWN_COMMAND: UnknownCommandError,
    Status.OUT_OF_MEMORY: OutOfMemoryError,
})


def error_for_status(status: int, response: Optional["Response"] = None) -> Optional[ProtocolStatusError]:
    """
    Translate a response status code into an exception instance.

    Args:
        status: Status field of a response header
        response: Parsed response to attach to the error

    Returns:
        None for success, otherwise an unraised ProtocolStatusError.
    """
    if status not in STATUS_ERRORS:
        logger.warning(f"Unknown status from server: 0x{status:02x}")
        return UnknownStatusError(status, response)

    error_class = STATUS_ERRORS[status]
    if error_class is None:
        return None
    return error_class(status, response)
