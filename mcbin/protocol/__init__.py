"""Protocol module for mcbin."""

from .errors import (
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
    Status,
    UnknownCommandError,
    UnknownStatusError,
    UnsupportedAuthMechanismError,
    UnsupportedExtrasError,
    ValueNotStoredError,
    ValueTooLargeError,
    error_for_status,
)
from .extras import ExtrasField, Width, decode_extras, encode_extras, size_of_extras
from .frame import Request, Response, decode_body, decode_header, encode_request, read_response
from .header import HEADER_SIZE, REQUEST_MAGIC, RESPONSE_MAGIC, Header
from .opcodes import Opcode

__all__ = [
    "AuthRequiredError",
    "CasConflictError",
    "ConnectionUnusableError",
    "ExtrasField",
    "FramingError",
    "HEADER_SIZE",
    "Header",
    "InvalidArgumentsError",
    "KeyExistsError",
    "McError",
    "NonNumericValueError",
    "NotFoundError",
    "Opcode",
    "OutOfMemoryError",
    "ProtocolStatusError",
    "REQUEST_MAGIC",
    "RESPONSE_MAGIC",
    "Request",
    "Response",
    "ShortReadError",
    "Status",
    "UnknownCommandError",
    "UnknownStatusError",
    "UnsupportedAuthMechanismError",
    "UnsupportedExtrasError",
    "ValueNotStoredError",
    "ValueTooLargeError",
    "Width",
    "decode_body",
    "decode_extras",
    "decode_header",
    "encode_extras",
    "encode_request",
    "error_for_status",
    "read_response",
    "size_of_extras",
]
