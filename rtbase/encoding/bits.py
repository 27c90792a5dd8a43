"""Conversions between unsigned byte values and bit strings."""
from __future__ import annotations

from typing import List

from ..errors import InvalidTypeError
from ..validation import check_bit_string, check_not_none, check_unsigned_byte_array, is_unsigned_byte
from .utf import ByteArray


def byte_to_bit_string(value: int) -> str:
    """Return the 8 character bit string of an unsigned byte, e.g. 5 -> '00000101'."""
    check_not_none("value", value)
    if not is_unsigned_byte(value):
        raise InvalidTypeError("value", value, "Argument 'value' must be an unsigned byte value.")
    return format(value, "08b")


def byte_array_to_bit_string(data: ByteArray) -> str:
    check_unsigned_byte_array("data", data)
    return "".join(format(value, "08b") for value in data)


def bit_string_to_byte_array(bit_string: str) -> List[int]:
    """Split a bit string into 8 bit groups, starting from the left.

    A trailing group shorter than 8 bits is read as a number on its own,
    so '100000001' gives [128, 1].
    """
    check_bit_string("bit_string", bit_string)
    return [int(bit_string[index:index + 8], 2) for index in range(0, len(bit_string), 8)]
