"""Text and binary codecs: UTF-8/UTF-16, Base64 and bit strings."""

from .utf import (
    utf16_string_to_utf8_array,
    utf8_array_to_utf16_string,
    remove_utf8_bom,
)
from .base64_codec import Base64
from .bits import (
    byte_to_bit_string,
    byte_array_to_bit_string,
    bit_string_to_byte_array,
)

__all__ = [
    "utf16_string_to_utf8_array",
    "utf8_array_to_utf16_string",
    "remove_utf8_bom",
    "Base64",
    "byte_to_bit_string",
    "byte_array_to_bit_string",
    "bit_string_to_byte_array",
]
