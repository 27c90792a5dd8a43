"""UTF-16 string <-> UTF-8 byte array conversion.

Python strings hold code points, but text that went through a UTF-16 round
trip (``surrogatepass``) may still carry surrogate pairs. The encoder joins
such pairs into one supplementary code point before emitting UTF-8.

Byte arrays are lists of ints in [0, 255] so they can be fed straight into a
byte stream. The decoder also accepts ``bytes`` and ``bytearray``.
"""
from __future__ import annotations

from typing import List, Sequence, Union

from ..errors import InvalidFormatError
from ..validation import check_string, check_unsigned_byte_array

HIGH_SURROGATE_MIN = 0xD800
HIGH_SURROGATE_MAX = 0xDBFF
LOW_SURROGATE_MIN = 0xDC00
LOW_SURROGATE_MAX = 0xDFFF

MAX_CODE_POINT = 0x10FFFF

UTF8_BOM = "\ufeff"
# UTF-8 BOM read back as Latin-1
UTF8_BOM_MOJIBAKE = "\u00ef\u00bb\u00bf"

ByteArray = Union[Sequence[int], bytes, bytearray]


def _is_high_surrogate(code_unit: int) -> bool:
    return HIGH_SURROGATE_MIN <= code_unit <= HIGH_SURROGATE_MAX


def _is_low_surrogate(code_unit: int) -> bool:
    return LOW_SURROGATE_MIN <= code_unit <= LOW_SURROGATE_MAX


def _iter_code_points(text: str):
    """Yield code points, joining surrogate pairs and skipping lone low surrogates."""
    index = 0
    length = len(text)
    while index < length:
        first = ord(text[index])
        index += 1
        if _is_high_surrogate(first) and index < length:
            second = ord(text[index])
            if _is_low_surrogate(second):
                index += 1
                yield (first - HIGH_SURROGATE_MIN) * 0x400 + (second - LOW_SURROGATE_MIN) + 0x10000
                continue
        if _is_low_surrogate(first):
            continue
        yield first


def utf16_string_to_utf8_array(text: str) -> List[int]:
    """Encode a string as a UTF-8 byte array.

    Args:
        text: String to encode (may be empty)

    Returns:
        List of unsigned byte values

    Raises:
        ArgumentNullOrUndefinedError: text is None
        InvalidTypeError: text is not a string

    Examples:
        >>> utf16_string_to_utf8_array("Aé")
        [65, 195, 169]
    """
    check_string("text", text)

    result: List[int] = []
    for code_point in _iter_code_points(text):
        # U+0000 - U+007F, 7 bits
        if code_point <= 0x7F:
            result.append(code_point)
        # U+0080 - U+07FF, 11 bits
        elif code_point <= 0x7FF:
            result.append(0xC0 | (code_point >> 6))
            result.append(0x80 | (code_point & 0x3F))
        # U+0800 - U+FFFF, 16 bits
        elif code_point <= 0xFFFF:
            result.append(0xE0 | (code_point >> 12))
            result.append(0x80 | ((code_point >> 6) & 0x3F))
            result.append(0x80 | (code_point & 0x3F))
        # U+10000 - U+1FFFFF, 21 bits
        else:
            result.append(0xF0 | (code_point >> 18))
            result.append(0x80 | ((code_point >> 12) & 0x3F))
            result.append(0x80 | ((code_point >> 6) & 0x3F))
            result.append(0x80 | (code_point & 0x3F))

    return result


def _sequence_length(lead: int) -> int:
    """Number of bytes in the sequence introduced by lead, or 0 if lead is invalid."""
    if lead < 0x80:
        return 1
    if (lead & 0xF8) == 0xF8:
        # 5 and 6 byte forms (and 0xFE / 0xFF)
        return 0
    if (lead & 0xF0) == 0xF0:
        return 4
    if (lead & 0xE0) == 0xE0:
        return 3
    if (lead & 0xC0) == 0xC0:
        return 2
    # stray continuation byte
    return 0


_LEAD_MASKS = {2: 0x1F, 3: 0x0F, 4: 0x07}
# Smallest code point each sequence length may carry; anything lower is overlong.
_MIN_CODE_POINTS = {2: 0x80, 3: 0x800, 4: 0x10000}


def utf8_array_to_utf16_string(data: ByteArray) -> str:
    """Decode a UTF-8 byte array into a string.

    Overlong forms are rejected. Encoded surrogates (0xED 0xA0-0xBF ...) decode
    to the lone surrogate code point, so strings with unpaired surrogates
    round-trip through utf16_string_to_utf8_array.

    Args:
        data: List/tuple of unsigned byte values, bytes or bytearray

    Returns:
        Decoded string

    Raises:
        ArgumentNullOrUndefinedError: data is None
        InvalidTypeError: data is not a byte array
        InvalidFormatError: data is not valid UTF-8
    """
    check_unsigned_byte_array("data", data)

    chars: List[str] = []
    index = 0
    length = len(data)
    while index < length:
        lead = data[index]
        size = _sequence_length(lead)
        if size == 0:
            raise InvalidFormatError(
                "data", data, f"Invalid UTF-8 lead byte 0x{lead:02X} at position {index}."
            )
        if size == 1:
            chars.append(chr(lead))
            index += 1
            continue
        if index + size > length:
            raise InvalidFormatError(
                "data", data, f"Truncated UTF-8 sequence at position {index}."
            )

        code_point = lead & _LEAD_MASKS[size]
        for offset in range(1, size):
            continuation = data[index + offset]
            if (continuation & 0xC0) != 0x80:
                raise InvalidFormatError(
                    "data", data,
                    f"Invalid UTF-8 continuation byte 0x{continuation:02X} at position {index + offset}."
                )
            code_point = (code_point << 6) | (continuation & 0x3F)

        if code_point < _MIN_CODE_POINTS[size]:
            raise InvalidFormatError(
                "data", data, f"Overlong UTF-8 sequence at position {index}."
            )
        if code_point > MAX_CODE_POINT:
            raise InvalidFormatError(
                "data", data, f"Code point U+{code_point:X} at position {index} is out of range."
            )
        chars.append(chr(code_point))
        index += size

    return "".join(chars)


def remove_utf8_bom(text: str) -> str:
    """Strip a leading UTF-8 byte order mark.

    Handles both a decoded BOM (U+FEFF) and one that was read as Latin-1.
    """
    check_string("text", text)
    if text.startswith(UTF8_BOM):
        return text[len(UTF8_BOM):]
    if text.startswith(UTF8_BOM_MOJIBAKE):
        return text[len(UTF8_BOM_MOJIBAKE):]
    return text
