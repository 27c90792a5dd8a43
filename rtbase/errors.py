"""Exception types raised by the runtime support library.

Each class derives from the library base class and from the closest
builtin, so callers can catch either ``RuntimeSupportError`` or the usual
``ValueError`` / ``TypeError`` / ``RuntimeError`` / ``TimeoutError``.
"""
from __future__ import annotations

from typing import Any, List, Optional


class RuntimeSupportError(Exception):
    """Base class for all library faults."""
    pass


class ArgumentError(RuntimeSupportError, ValueError):
    """Raised when an argument fails validation."""

    def __init__(self, name: str, value: Any, message: Optional[str] = None):
        super().__init__(message or f"Invalid value for argument '{name}': {value!r}")
        self.name = name
        self.value = value


class ArgumentNullOrUndefinedError(ArgumentError):
    """Raised when a required argument is None."""

    def __init__(self, name: str, message: Optional[str] = None):
        super().__init__(name, None, message or f"Argument '{name}' must not be None.")


class ArgumentOutOfRangeError(ArgumentError):
    """Raised when a numeric argument is outside its allowed range."""
    pass


class InvalidTypeError(RuntimeSupportError, TypeError):
    """Raised when an argument or element has the wrong type."""

    def __init__(self, name: str, value: Any, message: Optional[str] = None):
        super().__init__(message or f"Argument '{name}' has an invalid type: {type(value).__name__}")
        self.name = name
        self.value = value


class InvalidFormatError(RuntimeSupportError, ValueError):
    """Raised when codec input is malformed."""

    def __init__(self, name: str, value: Any, message: Optional[str] = None):
        super().__init__(message or f"Argument '{name}' is not in a valid format.")
        self.name = name
        self.value = value


class InvalidOperationError(RuntimeSupportError, RuntimeError):
    """Raised when an operation is not allowed in the current state."""
    pass


class BufferOverrunError(RuntimeSupportError, RuntimeError):
    """Raised when a synchronous write exceeds the stream buffer.

    Attributes:
        buffered: Items held by the buffer when the overrun happened
        accepted: Number of items of the failing write that were appended
    """

    def __init__(self, message: str, buffered: List[Any], accepted: int):
        super().__init__(message)
        self.buffered = buffered
        self.accepted = accepted


class StreamTimeoutError(RuntimeSupportError, TimeoutError):
    """Raised when an asynchronous write does not complete in time."""

    def __init__(self, message: str, timeout: float):
        super().__init__(message)
        self.timeout = timeout
