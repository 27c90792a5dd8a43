"""Base64 codec operating on the UTF-8 representation of strings.

``encode`` turns a string into its UTF-8 bytes first, so any string
round-trips through ``decode``. The URL compliant variant swaps ``+``/``/``
for ``-``/``_`` and drops padding; ``decode`` accepts both forms.
"""
from __future__ import annotations

import re
from typing import List, Optional

from ..errors import InvalidFormatError, RuntimeSupportError
from ..validation import check_string, check_unsigned_byte_array
from .utf import ByteArray, utf16_string_to_utf8_array, utf8_array_to_utf16_string

BASE64_CHARACTER_SET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/="
PADDING_INDEX = 64

_CHARACTER_INDEX = {char: index for index, char in enumerate(BASE64_CHARACTER_SET)}
_WHITESPACE = re.compile(r"\s+")
_INVALID_CHARACTER = re.compile(r"[^A-Za-z0-9+/=]")


def _normalize(data: str) -> str:
    """Strip whitespace, undo the URL safe substitutions and restore padding."""
    result = _WHITESPACE.sub("", data)
    result = result.replace("-", "+").replace("_", "/")

    match = _INVALID_CHARACTER.search(result)
    if match:
        raise InvalidFormatError(
            "data", data,
            f"The given data string is not a valid base64 encoded string. "
            f"Found invalid character: '{match.group()}'."
        )

    while len(result) % 4 != 0:
        result += "="
    return result


def _make_url_compliant(data: str) -> str:
    return data.replace("+", "-").replace("/", "_").replace("=", "")


class Base64:
    """Base64 encoder/decoder.

    Examples:
        >>> Base64.encode("Man")
        'TWFu'
        >>> Base64.decode("TWE")
        'Ma'
    """

    @staticmethod
    def encode(data: str) -> str:
        """Encode the UTF-8 bytes of a string.

        Raises:
            ArgumentNullOrUndefinedError: data is None
            InvalidTypeError: data is not a string
        """
        check_string("data", data)
        return Base64.encode_byte_array(utf16_string_to_utf8_array(data))

    @staticmethod
    def encode_byte_array(data: ByteArray) -> str:
        """Encode raw unsigned byte values."""
        check_unsigned_byte_array("data", data)

        chars: List[str] = []
        for index in range(0, len(data), 3):
            block = data[index:index + 3]
            bytes_to_encode = len(block)
            octet0 = block[0]
            octet1 = block[1] if bytes_to_encode > 1 else 0
            octet2 = block[2] if bytes_to_encode > 2 else 0

            bits = (octet0 << 16) | (octet1 << 8) | octet2
            index0 = bits >> 18
            index1 = (bits >> 12) & 0x3F
            index2 = (bits >> 6) & 0x3F if bytes_to_encode > 1 else PADDING_INDEX
            index3 = bits & 0x3F if bytes_to_encode > 2 else PADDING_INDEX

            chars.append(BASE64_CHARACTER_SET[index0])
            chars.append(BASE64_CHARACTER_SET[index1])
            chars.append(BASE64_CHARACTER_SET[index2])
            chars.append(BASE64_CHARACTER_SET[index3])

        return "".join(chars)

    @staticmethod
    def encode_url_compliant(data: Optional[str]) -> str:
        """Encode and make the result safe for URLs and file names.

        None and the empty string both yield an empty string.
        """
        if data is None or data == "":
            return ""
        check_string("data", data)
        return _make_url_compliant(Base64.encode(data))

    @staticmethod
    def decode(data: str) -> str:
        """Decode Base64 (standard or URL compliant) into a string.

        Raises:
            ArgumentNullOrUndefinedError: data is None
            InvalidTypeError: data is not a string
            InvalidFormatError: data is not Base64 or not UTF-8 once decoded
        """
        check_string("data", data)

        byte_array = Base64.decode_to_byte_array(data)
        try:
            return utf8_array_to_utf16_string(byte_array)
        except RuntimeSupportError as e:
            raise InvalidFormatError(
                "data", data, "The decoded data is not a valid UTF-8 byte sequence."
            ) from e

    @staticmethod
    def decode_to_byte_array(data: str) -> List[int]:
        """Decode Base64 (standard or URL compliant) into unsigned byte values."""
        check_string("data", data)

        normalized = _normalize(data)
        result: List[int] = []
        last_block = len(normalized) - 4

        for index in range(0, len(normalized), 4):
            index0, index1, index2, index3 = (
                _CHARACTER_INDEX[char] for char in normalized[index:index + 4]
            )

            padded = index2 == PADDING_INDEX or index3 == PADDING_INDEX
            if (
                index0 == PADDING_INDEX
                or index1 == PADDING_INDEX
                or (index2 == PADDING_INDEX and index3 != PADDING_INDEX)
                or (padded and index != last_block)
            ):
                raise InvalidFormatError(
                    "data", data, f"Misplaced padding in base64 data at position {index}."
                )

            if index2 == PADDING_INDEX:
                bits = (index0 << 18) | (index1 << 12)
                result.append(bits >> 16)
            elif index3 == PADDING_INDEX:
                bits = (index0 << 18) | (index1 << 12) | (index2 << 6)
                result.append(bits >> 16)
                result.append((bits >> 8) & 0xFF)
            else:
                bits = (index0 << 18) | (index1 << 12) | (index2 << 6) | index3
                result.append(bits >> 16)
                result.append((bits >> 8) & 0xFF)
                result.append(bits & 0xFF)

        return result
