"""
Frame Header

Every request and response starts with the same 24-byte header, written in
network byte order:

    magic(1) opcode(1) key_length(2) extras_length(1) data_type(1)
    status(2) body_length(4) opaque(4) cas(8)

On requests the status field is reserved and always zero.
"""

import struct
from dataclasses import dataclass

from .errors import FramingError

HEADER_FORMAT = ">BBHBBHIIQ"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)

REQUEST_MAGIC = 0x80
RESPONSE_MAGIC = 0x81

MAX_KEY_LENGTH = 0xFFFF
MAX_EXTRAS_LENGTH = 0xFF
MAX_BODY_LENGTH = 0xFFFFFFFF
MAX_CAS = 0xFFFFFFFFFFFFFFFF

_HEADER = struct.Struct(HEADER_FORMAT)


@dataclass
class Header:
    """
    Fixed-size frame header.

    Attributes:
        magic: REQUEST_MAGIC on requests, RESPONSE_MAGIC on responses
        opcode: Command selector
        key_length: Byte length of the key segment
        extras_length: Byte length of the extras segment
        data_type: Reserved, always 0
        status: Server status on responses, 0 on requests
        body_length: extras_length + key_length + value length
        opaque: Correlation token echoed by the server
        cas: Version stamp (input on conditional writes, output on responses)
    """
    magic: int = REQUEST_MAGIC
    opcode: int = 0
    key_length: int = 0
    extras_length: int = 0
    data_type: int = 0
    status: int = 0
    body_length: int = 0
    opaque: int = 0
    cas: int = 0

    @property
    def value_length(self) -> int:
        """Bytes left for the value once extras and key are consumed."""
        return self.body_length - self.extras_length - self.key_length

    def validate(self) -> None:
        """Raise FramingError if a field cannot be represented on the wire."""
        if not 0 <= self.key_length <= MAX_KEY_LENGTH:
            raise FramingError(f"mc: key length {self.key_length} out of range")
        if not 0 <= self.extras_length <= MAX_EXTRAS_LENGTH:
            raise FramingError(f"mc: extras length {self.extras_length} out of range")
        if not 0 <= self.body_length <= MAX_BODY_LENGTH:
            raise FramingError(f"mc: body length {self.body_length} out of range")
        if not 0 <= self.cas <= MAX_CAS:
            raise FramingError(f"mc: cas {self.cas} out of range")
        if self.value_length < 0:
            raise FramingError(
                f"mc: body length {self.body_length} shorter than "
                f"extras ({self.extras_length}) plus key ({self.key_length})"
            )

    def pack(self) -> bytes:
        self.validate()
        try:
            return _HEADER.pack(
                self.magic,
                self.opcode,
                self.key_length,
                self.extras_length,
                self.data_type,
                self.status,
                self.body_length,
                self.opaque,
                self.cas,
            )
        except struct.error as exc:
            raise FramingError(f"mc: cannot pack header: {exc}") from exc

    @classmethod
    def unpack(cls, data: bytes) -> "Header":
        if len(data) != HEADER_SIZE:
            raise FramingError(f"mc: header must be {HEADER_SIZE} bytes, got {len(data)}")
        return cls(*_HEADER.unpack(data))
