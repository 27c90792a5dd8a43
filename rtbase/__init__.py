"""rtbase - runtime support library: buffered streams, text codecs, typed errors."""

from .errors import (
    RuntimeSupportError,
    ArgumentError,
    ArgumentNullOrUndefinedError,
    ArgumentOutOfRangeError,
    InvalidTypeError,
    InvalidFormatError,
    InvalidOperationError,
    BufferOverrunError,
    StreamTimeoutError,
)
from .io import (
    Stream,
    StreamConfig,
    StreamState,
    Scheduler,
    ThreadingScheduler,
    ManualScheduler,
    byte_stream,
    bit_string_stream,
)
from .encoding import (
    Base64,
    utf16_string_to_utf8_array,
    utf8_array_to_utf16_string,
)

__all__ = [
    "RuntimeSupportError",
    "ArgumentError",
    "ArgumentNullOrUndefinedError",
    "ArgumentOutOfRangeError",
    "InvalidTypeError",
    "InvalidFormatError",
    "InvalidOperationError",
    "BufferOverrunError",
    "StreamTimeoutError",
    "Stream",
    "StreamConfig",
    "StreamState",
    "Scheduler",
    "ThreadingScheduler",
    "ManualScheduler",
    "byte_stream",
    "bit_string_stream",
    "Base64",
    "utf16_string_to_utf8_array",
    "utf8_array_to_utf16_string",
]
