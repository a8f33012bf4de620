"""
Frame Codec

Builds request frames and parses response frames. A frame is a header
followed by a body made of three back-to-back segments:

    extras | key | value

The header's body_length is authoritative for how much to read; the extras
and key lengths say where to cut.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Sequence

from .errors import FramingError, ProtocolStatusError, error_for_status
from .extras import ExtrasShape, decode_extras, encode_extras, size_of_extras
from .header import HEADER_SIZE, REQUEST_MAGIC, RESPONSE_MAGIC, Header
from .opcodes import request_extras


@dataclass
class Request:
    """
    A single outgoing command.

    Attributes:
        opcode: Command selector
        key: Raw key bytes
        value: Raw value bytes
        extras: Extras values, one per field of the shape
        cas: Expected CAS for conditional writes (0 = unconditional)
        opaque: Correlation token echoed back by the server
        shape: Extras shape override; defaults to the opcode's request shape
    """
    opcode: int
    key: bytes = b""
    value: bytes = b""
    extras: Sequence[int] = ()
    cas: int = 0
    opaque: int = 0
    shape: Optional[ExtrasShape] = None

    def __post_init__(self):
        if self.shape is None:
            self.shape = request_extras(self.opcode)

    def header(self) -> Header:
        extras_length = size_of_extras(self.shape)
        key_length = len(self.key)
        return Header(
            magic=REQUEST_MAGIC,
            opcode=self.opcode,
            key_length=key_length,
            extras_length=extras_length,
            status=0,
            body_length=extras_length + key_length + len(self.value),
            opaque=self.opaque,
            cas=self.cas,
        )


@dataclass
class Response:
    """
    A decoded response frame.

    Attributes:
        header: The response header as received
        extras: Decoded extras by field name (empty when none were sent)
        key: Key segment
        value: Value segment
    """
    header: Header
    extras: Dict[str, int] = field(default_factory=dict)
    key: bytes = b""
    value: bytes = b""

    @property
    def opcode(self) -> int:
        return self.header.opcode

    @property
    def status(self) -> int:
        return self.header.status

    @property
    def cas(self) -> int:
        return self.header.cas

    @property
    def opaque(self) -> int:
        return self.header.opaque

    def error(self) -> Optional[ProtocolStatusError]:
        """The mapped status error, or None on success."""
        return error_for_status(self.header.status, self)

    def raise_for_status(self) -> "Response":
        error = self.error()
        if error is not None:
            raise error
        return self


def encode_request(request: Request, buf: Optional[bytearray] = None) -> bytearray:
    """
    Serialize a request as header, extras, key, then value.

    Args:
        request: The command to encode
        buf: Scratch buffer to append to; a new one is created if omitted

    Returns:
        The buffer holding exactly one complete frame after any prior content.
    """
    if buf is None:
        buf = bytearray()

    header = request.header()
    extras = encode_extras(request.shape, request.extras)

    buf += header.pack()
    buf += extras
    buf += request.key
    buf += request.value
    return buf


def decode_header(data: bytes) -> Header:
    """Parse and sanity-check a response header."""
    header = Header.unpack(data)
    if header.magic != RESPONSE_MAGIC:
        raise FramingError(f"mc: bad response magic 0x{header.magic:02x}")
    if header.value_length < 0:
        raise FramingError(
            f"mc: body length {header.body_length} shorter than "
            f"extras ({header.extras_length}) plus key ({header.key_length})"
        )
    return header


def decode_body(header: Header, body: bytes, shape: ExtrasShape) -> Response:
    """
    Slice a response body into extras, key and value.

    Args:
        header: The already decoded response header
        body: Exactly header.body_length bytes
        shape: Extras the caller expects for this opcode; only applied when
               the server actually sent extras

    Returns:
        The structurally decoded Response. Status is not checked here.
    """
    if len(body) != header.body_length:
        raise FramingError(f"mc: body must be {header.body_length} bytes, got {len(body)}")

    view = memoryview(body)
    extras_end = header.extras_length
    key_end = extras_end + header.key_length

    extras: Dict[str, int] = {}
    if header.extras_length:
        expected = size_of_extras(shape)
        if header.extras_length != expected:
            raise FramingError(
                f"mc: opcode 0x{header.opcode:02x} sent {header.extras_length} "
                f"extras bytes, expected {expected}"
            )
        extras = decode_extras(bytes(view[:extras_end]), shape)

    return Response(
        header=header,
        extras=extras,
        key=bytes(view[extras_end:key_end]),
        value=bytes(view[key_end:]),
    )


def read_response(read_exactly: Callable[[int], bytes], shape: ExtrasShape) -> Response:
    """
    Read one complete response frame.

    Args:
        read_exactly: Returns exactly n bytes from the stream or raises
        shape: Expected response extras for the request's opcode

    Returns:
        The decoded Response, status not yet checked.
    """
    header = decode_header(read_exactly(HEADER_SIZE))
    body = read_exactly(header.body_length) if header.body_length else b""
    return decode_body(header, body, shape)
