"""Parameter validation helpers.

Predicates (``is_*``) answer a question and never raise. Checks
(``check_*``) raise a typed fault from :mod:`rtbase.errors` and return
nothing. Both are pure functions with no side effects.
"""
from __future__ import annotations

from numbers import Real
from typing import Any, Iterable

from .errors import (
    ArgumentNullOrUndefinedError,
    ArgumentOutOfRangeError,
    InvalidTypeError,
)

BIT_CHARACTERS = frozenset("01")


def is_integer(value: Any) -> bool:
    """True for ints, excluding bool."""
    return isinstance(value, int) and not isinstance(value, bool)


def is_unsigned_byte(value: Any) -> bool:
    """True if value is an int in the range [0, 255]."""
    return is_integer(value) and 0 <= value <= 255


def is_unsigned_byte_array(value: Any) -> bool:
    """True for bytes, bytearray, or a list/tuple of unsigned byte values."""
    if isinstance(value, (bytes, bytearray)):
        return True
    if not isinstance(value, (list, tuple)):
        return False
    return all(is_unsigned_byte(item) for item in value)


def is_bit_string(value: Any) -> bool:
    """True if value is a non-empty string made of '0' and '1' only.

    Examples:
        >>> is_bit_string("0101")
        True
        >>> is_bit_string("0102")
        False
    """
    return isinstance(value, str) and len(value) > 0 and set(value) <= BIT_CHARACTERS


def is_dense(items: Iterable[Any]) -> bool:
    """True if no item is None."""
    return all(item is not None for item in items)


def check_not_none(name: str, value: Any) -> None:
    if value is None:
        raise ArgumentNullOrUndefinedError(name)


def check_string(name: str, value: Any) -> None:
    check_not_none(name, value)
    if not isinstance(value, str):
        raise InvalidTypeError(name, value, f"Argument '{name}' must be a string.")


def check_callable(name: str, value: Any) -> None:
    check_not_none(name, value)
    if not callable(value):
        raise InvalidTypeError(name, value, f"Argument '{name}' must be callable.")


def check_uint(name: str, value: Any, minimum: int = 0) -> None:
    """Check that value is an integer >= minimum.

    Raises:
        ArgumentNullOrUndefinedError: value is None
        InvalidTypeError: value is not an int (bool is rejected)
        ArgumentOutOfRangeError: value < minimum
    """
    check_not_none(name, value)
    if not is_integer(value):
        raise InvalidTypeError(name, value, f"Argument '{name}' must be an integer.")
    if value < minimum:
        raise ArgumentOutOfRangeError(
            name, value, f"Argument '{name}' must be an integer >= {minimum}, got {value}."
        )


def check_positive_number(name: str, value: Any) -> None:
    """Check that value is a real number > 0."""
    check_not_none(name, value)
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidTypeError(name, value, f"Argument '{name}' must be a number.")
    if not value > 0:
        raise ArgumentOutOfRangeError(
            name, value, f"Argument '{name}' must be greater than 0, got {value}."
        )


def check_unsigned_byte_array(name: str, value: Any) -> None:
    check_not_none(name, value)
    if not is_unsigned_byte_array(value):
        raise InvalidTypeError(
            name, value, f"Argument '{name}' must be an array of unsigned byte values."
        )


def check_bit_string(name: str, value: Any) -> None:
    check_not_none(name, value)
    if not is_bit_string(value):
        raise InvalidTypeError(name, value, f"Argument '{name}' must be a bit string.")


# Element validators for typed streams. They receive one element and raise
# InvalidTypeError when it does not belong in the stream.

def unsigned_byte_validator(item: Any) -> None:
    if not is_unsigned_byte(item):
        raise InvalidTypeError(
            "data", item, f"Stream element must be an unsigned byte value, got {item!r}."
        )


def bit_string_validator(item: Any) -> None:
    if not is_bit_string(item):
        raise InvalidTypeError(
            "data", item, f"Stream element must be a bit string, got {item!r}."
        )
