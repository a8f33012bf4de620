"""
Extras Codec

Extras are the command-specific integer fields that sit between the header
and the key. The wire carries no type tags, so both sides rely on a shape
declared per opcode: an ordered tuple of named, fixed-width unsigned fields.
"""

import struct
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Sequence, Tuple

from .errors import FramingError, UnsupportedExtrasError


class Width(Enum):
    """Supported field widths, valued by their struct format code."""
    U8 = "B"
    U16 = "H"
    U32 = "I"
    U64 = "Q"

    @property
    def size(self) -> int:
        return struct.calcsize(">" + self.value)

    @property
    def max_value(self) -> int:
        return (1 << (8 * self.size)) - 1


@dataclass(frozen=True)
class ExtrasField:
    """One named slot in an extras shape."""
    name: str
    width: Width


ExtrasShape = Tuple[ExtrasField, ...]

NO_EXTRAS: ExtrasShape = ()


def _checked_width(field: ExtrasField) -> Width:
    if not isinstance(field.width, Width):
        raise UnsupportedExtrasError(f"mc: unknown extra type ({field.width!r}) for {field.name!r}")
    return field.width


def _format(shape: ExtrasShape) -> str:
    return ">" + "".join(_checked_width(field).value for field in shape)


def size_of_extras(shape: ExtrasShape) -> int:
    """Total byte length of a shape: the sum of its field widths."""
    return sum(_checked_width(field).size for field in shape)


def encode_extras(shape: ExtrasShape, values: Sequence[int]) -> bytes:
    """
    Serialize values in declaration order.

    Args:
        shape: Field declarations for the opcode
        values: One integer per field, in the same order

    Returns:
        The packed extras, size_of_extras(shape) bytes long.

    Raises:
        UnsupportedExtrasError: A field has an unknown width
        FramingError: Wrong number of values, or a value outside its width
    """
    fmt = _format(shape)
    if len(values) != len(shape):
        raise FramingError(f"mc: extras expect {len(shape)} values, got {len(values)}")

    for field, value in zip(shape, values):
        if not 0 <= value <= field.width.max_value:
            raise FramingError(f"mc: extra {field.name!r}={value} does not fit {field.width.name}")

    return struct.pack(fmt, *values)


def decode_extras(data: bytes, shape: ExtrasShape) -> Dict[str, int]:
    """
    Read extras back into the slots declared by shape.

    Returns:
        Mapping of field name to value, in declaration order.
    """
    fmt = _format(shape)
    expected = struct.calcsize(fmt)
    if len(data) != expected:
        raise FramingError(f"mc: extras expect {expected} bytes, got {len(data)}")

    return {field.name: value for field, value in zip(shape, struct.unpack(fmt, data))}
