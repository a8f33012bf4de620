"""
Opcode Definitions

Opcodes of the binary protocol together with the extras shape each one
carries on requests and on responses.
"""

from enum import IntEnum
from types import MappingProxyType
from typing import Mapping

from .extras import NO_EXTRAS, ExtrasField, ExtrasShape, Width


class Opcode(IntEnum):
    """Enumeration of command opcodes."""
    GET = 0x00
    SET = 0x01
    ADD = 0x02
    REPLACE = 0x03
    DELETE = 0x04
    INCREMENT = 0x05
    DECREMENT = 0x06
    QUIT = 0x07
    FLUSH = 0x08
    GETQ = 0x09
    NOOP = 0x0A
    VERSION = 0x0B
    GETK = 0x0C
    GETKQ = 0x0D
    APPEND = 0x0E
    PREPEND = 0x0F
    STAT = 0x10
    SETQ = 0x11
    ADDQ = 0x12
    REPLACEQ = 0x13
    DELETEQ = 0x14
    INCREMENTQ = 0x15
    DECREMENTQ = 0x16
    QUITQ = 0x17
    FLUSHQ = 0x18
    APPENDQ = 0x19
    PREPENDQ = 0x1A

    # SASL authentication
    AUTH_LIST = 0x20
    AUTH_START = 0x21
    AUTH_STEP = 0x22


STORE_EXTRAS: ExtrasShape = (
    ExtrasField("flags", Width.U32),
    ExtrasField("expiration", Width.U32),
)

COUNTER_EXTRAS: ExtrasShape = (
    ExtrasField("delta", Width.U64),
    ExtrasField("initial", Width.U64),
    ExtrasField("expiration", Width.U32),
)

FLUSH_EXTRAS: ExtrasShape = (
    ExtrasField("expiration", Width.U32),
)

GET_RESPONSE_EXTRAS: ExtrasShape = (
    ExtrasField("flags", Width.U32),
)

# Counter responses carry the new value in the value segment, 8 bytes wide.
COUNTER_VALUE_WIDTH = Width.U64

REQUEST_EXTRAS: Mapping[Opcode, ExtrasShape] = MappingProxyType({
    Opcode.SET: STORE_EXTRAS,
    Opcode.ADD: STORE_EXTRAS,
    Opcode.REPLACE: STORE_EXTRAS,
    Opcode.SETQ: STORE_EXTRAS,
    Opcode.ADDQ: STORE_EXTRAS,
    Opcode.REPLACEQ: STORE_EXTRAS,
    Opcode.INCREMENT: COUNTER_EXTRAS,
    Opcode.DECREMENT: COUNTER_EXTRAS,
    Opcode.INCREMENTQ: COUNTER_EXTRAS,
    Opcode.DECREMENTQ: COUNTER_EXTRAS,
})

RESPONSE_EXTRAS: Mapping[Opcode, ExtrasShape] = MappingProxyType({
    Opcode.GET: GET_RESPONSE_EXTRAS,
    Opcode.GETQ: GET_RESPONSE_EXTRAS,
    Opcode.GETK: GET_RESPONSE_EXTRAS,
    Opcode.GETKQ: GET_RESPONSE_EXTRAS,
})


def request_extras(opcode: int) -> ExtrasShape:
    """Extras shape a request with this opcode must carry."""
    return REQUEST_EXTRAS.get(opcode, NO_EXTRAS)


def response_extras(opcode: int) -> ExtrasShape:
    """Extras shape a successful response to this opcode carries."""
    return RESPONSE_EXTRAS.get(opcode, NO_EXTRAS)
