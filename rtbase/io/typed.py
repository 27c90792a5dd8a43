"""Streams restricted to one element type.

These are plain Streams with an element validator installed. A validator
already present in the given config still runs, after the type check.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional

from ..validation import bit_string_validator, unsigned_byte_validator
from .stream import ElementValidator, Stream, StreamConfig


def _chain(first: ElementValidator, second: Optional[ElementValidator]) -> ElementValidator:
    if second is None:
        return first

    def validate(item: Any) -> None:
        first(item)
        second(item)
    return validate


def typed_stream(validator: ElementValidator, config: Optional[StreamConfig] = None) -> Stream:
    """Create a stream which rejects elements the validator does not accept."""
    config = config or StreamConfig()
    return Stream(replace(config, validator=_chain(validator, config.validator)))


def byte_stream(config: Optional[StreamConfig] = None) -> Stream[int]:
    """Create a stream of unsigned byte values (ints in [0, 255]).

    Example:
        >>> from rtbase.io import ManualScheduler
        >>> stream = byte_stream(StreamConfig(scheduler=ManualScheduler()))
        >>> stream.write([0, 127, 255])
        >>> stream.write(256)
        Traceback (most recent call last):
        ...
        rtbase.errors.InvalidTypeError: Stream element must be an unsigned byte value, got 256.
    """
    return typed_stream(unsigned_byte_validator, config)


def bit_string_stream(config: Optional[StreamConfig] = None) -> Stream[str]:
    """Create a stream of bit strings such as '0110'."""
    return typed_stream(bit_string_validator, config)
