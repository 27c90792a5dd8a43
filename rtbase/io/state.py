"""Stream lifecycle states."""
from __future__ import annotations

from enum import Enum


class StreamState(Enum):
    """State of a Stream.

    READY -> REQUEST_FOR_CLOSE -> CLOSED, or any non-terminal state -> ERROR.
    """
    READY = "ready"
    """Further write operations are allowed."""
    REQUEST_FOR_CLOSE = "request_for_close"
    """Close requested; no more writes, remaining data still drains."""
    CLOSED = "closed"
    """Terminal. No further reads or writes."""
    ERROR = "error"
    """Terminal. The stream ran into a fault; no further reads or writes."""

    @property
    def is_terminal(self) -> bool:
        return self in (StreamState.CLOSED, StreamState.ERROR)
