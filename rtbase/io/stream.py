"""Buffered, one-time, unidirectional stream.

A Stream moves items of type T from one producer to one consumer through a
bounded FIFO buffer. "One-time" means the stream cannot be used any more
once it is closed or has run into an error. "Unidirectional" means items
flow from the writer to the reader only.

The consumer either polls (``has_data`` / ``read``) or registers callbacks
in the StreamConfig:

- ``on_data(stream)``: called on every announce tick while data is buffered,
  and when an asynchronous write finds the buffer full.
- ``on_closed(stream)``: called exactly once, when a requested close
  completes after the buffer drained.
- ``on_error(stream)``: called at most once, when a fault moves the stream
  to ERROR. ``stream.error`` holds the fault.

Callbacks fired by the announce and write loops run on the scheduler. With
the ThreadingScheduler that is a single dispatcher thread, so those
callbacks never overlap. ``on_error`` raised by ``write`` and ``on_closed``
reached through ``read`` run on the calling thread.

Items are passed by reference; a mutable object read from the stream is the
same object that was written.

Example:
    >>> from rtbase.io import ManualScheduler
    >>> scheduler = ManualScheduler()
    >>> stream = Stream(StreamConfig(max_buffer_size=10, scheduler=scheduler))
    >>> stream.write([1, 2, 3])
    >>> stream.close()
    >>> [stream.read(), stream.read(), stream.read()]
    [1, 2, 3]
    >>> stream.read() is None, stream.is_closed
    (True, True)
"""
from __future__ import annotations

import logging
import threading
from collections import deque
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Deque, Generic, List, Optional, TypeVar, Union

from ..errors import (
    ArgumentNullOrUndefinedError,
    BufferOverrunError,
    InvalidOperationError,
    InvalidTypeError,
    RuntimeSupportError,
    StreamTimeoutError,
)
from ..validation import check_callable, check_positive_number, check_uint, is_dense
from .scheduler import Scheduler, default_scheduler
from .state import StreamState

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BUFFER_SIZE = 1024  # items, not bytes
WRITE_LOOP_INTERVAL = 0.033  # seconds
DATA_ANNOUNCE_INTERVAL = WRITE_LOOP_INTERVAL * 5  # seconds

StreamCallback = Callable[["Stream[Any]"], None]
ElementValidator = Callable[[Any], None]


@dataclass(frozen=True)
class StreamConfig:
    """Construction parameters for a Stream.

    Attributes:
        max_buffer_size: Number of items the buffer holds, must be >= 1
        on_closed: Called once when the stream finally closed
        on_data: Called while the stream has data to read
        on_error: Called once when the stream ran into an error
        validator: Called with every written element, raises InvalidTypeError
            to reject it
        scheduler: Timer source, defaults to the shared ThreadingScheduler
        write_loop_interval: Seconds between asynchronous write attempts
        data_announce_interval: Seconds between on_data announcements and
            close checks, defaults to five write loop intervals
    """
    max_buffer_size: int = DEFAULT_BUFFER_SIZE
    on_closed: Optional[StreamCallback] = None
    on_data: Optional[StreamCallback] = None
    on_error: Optional[StreamCallback] = None
    validator: Optional[ElementValidator] = None
    scheduler: Optional[Scheduler] = None
    write_loop_interval: float = WRITE_LOOP_INTERVAL
    data_announce_interval: Optional[float] = None

    def __post_init__(self) -> None:
        check_uint("max_buffer_size", self.max_buffer_size, minimum=1)
        for name in ("on_closed", "on_data", "on_error", "validator"):
            value = getattr(self, name)
            if value is not None:
                check_callable(name, value)
        if self.scheduler is not None and not isinstance(self.scheduler, Scheduler):
            raise InvalidTypeError(
                "scheduler", self.scheduler, "Argument 'scheduler' must be a Scheduler."
            )
        check_positive_number("write_loop_interval", self.write_loop_interval)
        if self.data_announce_interval is not None:
            check_positive_number("data_announce_interval", self.data_announce_interval)


class _PendingWrite:
    """Bookkeeping for one write_async call."""

    def __init__(self, items: List[Any], timeout: Optional[float], future: Future, started: float):
        self.items: Deque[Any] = deque(items)
        self.timeout = timeout
        self.future = future
        self.last_progress = started
        self.handle: Any = None
        self.done = False


class Stream(Generic[T]):
    """Bounded FIFO channel between one writer and one reader."""

    DEFAULT_BUFFER_SIZE = DEFAULT_BUFFER_SIZE

    def __init__(self, config: Optional[StreamConfig] = None):
        """Create a READY stream with an empty buffer.

        Args:
            config: StreamConfig, or None for a polling stream with default
                buffer size on the shared ThreadingScheduler
        """
        if config is None:
            config = StreamConfig()
        elif not isinstance(config, StreamConfig):
            raise InvalidTypeError("config", config, "Argument 'config' must be a StreamConfig.")

        self._max_buffer_size = config.max_buffer_size
        self._validator = config.validator
        self._scheduler = config.scheduler or default_scheduler()
        self._write_loop_interval = config.write_loop_interval
        self._announce_interval = config.data_announce_interval or config.write_loop_interval * 5

        self._buffer: Deque[T] = deque()
        self._state = StreamState.READY
        self._error: Optional[RuntimeSupportError] = None

        # Callbacks
        self._on_closed = config.on_closed
        self._on_data = config.on_data
        self._on_error = config.on_error

        self._outstanding_writes = 0

        # Timer callbacks may run on other threads and may call back into
        # the stream from user callbacks.
        self._lock = threading.RLock()

        with self._lock:
            self._announce_handle: Any = self._scheduler.set_recurring(
                self._announce_tick, self._announce_interval
            )

    # --- Queries ---

    @property
    def can_read(self) -> bool:
        """True if the stream is open and has data to read."""
        with self._lock:
            return not self._state.is_terminal and len(self._buffer) > 0

    @property
    def can_write(self) -> bool:
        """True if the stream accepts write operations."""
        return self._state is StreamState.READY

    @property
    def has_data(self) -> bool:
        return len(self._buffer) > 0

    @property
    def has_error(self) -> bool:
        return self._error is not None

    @property
    def is_closed(self) -> bool:
        return self._state is StreamState.CLOSED

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def error(self) -> Optional[RuntimeSupportError]:
        """The fault which locked the stream, or None."""
        return self._error

    @property
    def max_buffer_size(self) -> int:
        return self._max_buffer_size

    @property
    def free_buffer_size(self) -> int:
        with self._lock:
            return self._max_buffer_size - len(self._buffer)

    @property
    def size(self) -> int:
        """Current number of buffered items."""
        return len(self._buffer)

    @property
    def on_closed(self) -> Optional[StreamCallback]:
        return self._on_closed

    @property
    def on_data(self) -> Optional[StreamCallback]:
        return self._on_data

    @property
    def on_error(self) -> Optional[StreamCallback]:
        return self._on_error

    # --- Writer interface ---

    def write(self, data: Union[T, List[T]]) -> None:
        """Append a single item or a list of items synchronously.

        Items are appended one by one. If the buffer fills up before all
        items are in, the stream moves to ERROR with a BufferOverrunError
        that records what was buffered at that point. The fault goes to
        ``on_error`` if registered, otherwise it is raised here. Either way
        the stream is finished afterwards.

        Raises:
            InvalidOperationError: stream is not READY
            ArgumentNullOrUndefinedError: data is None
            InvalidTypeError: data contains None or an element the stream
                validator rejects
            BufferOverrunError: buffer overrun without an on_error callback
        """
        with self._lock:
            self._check_writable("write")
            items = self._prepare(data)

            accepted = 0
            for item in items:
                if len(self._buffer) >= self._max_buffer_size:
                    error = BufferOverrunError(
                        "The current write operation caused a buffer overrun.",
                        buffered=list(self._buffer),
                        accepted=accepted,
                    )
                    on_error = self._fail(error)
                    break
                self._buffer.append(item)
                accepted += 1
            else:
                return

        if on_error is not None:
            self._invoke(on_error)
            return
        raise error

    def write_async(self, data: Union[T, List[T]], timeout: Optional[float] = None) -> Future:
        """Append items as buffer space becomes available.

        Returns a Future which resolves with None once every item is in the
        buffer. Items are moved in on every write loop tick, as many as fit.
        While the buffer is full, ``on_data`` is nudged. The stall time is
        measured on the scheduler clock since the last item got in, so a
        slow consumer does not stretch it. When it exceeds ``timeout`` the
        future fails with StreamTimeoutError and the stream moves to ERROR.
        If the stream enters ERROR for another reason, the future fails with
        that error on its next tick.

        Concurrent asynchronous writes, and asynchronous writes mixed with
        synchronous ones, are not ordered relative to each other. Serialize
        the calls yourself if order matters.

        Args:
            data: A single item or a list of items
            timeout: Stall timeout in seconds (> 0), or None to wait forever

        Raises:
            InvalidOperationError: stream is not READY
            ArgumentNullOrUndefinedError: data is None
            InvalidTypeError: data contains None or a rejected element
            ArgumentOutOfRangeError: timeout <= 0
        """
        with self._lock:
            self._check_writable("write_async")
            items = self._prepare(data)
            if timeout is not None:
                check_positive_number("timeout", timeout)

            future: Future = Future()
            future.set_running_or_notify_cancel()

            if not items:
                future.set_result(None)
                return future

            pending = _PendingWrite(items, timeout, future, self._scheduler.now())
            self._outstanding_writes += 1
            pending.handle = self._scheduler.set_recurring(
                lambda: self._write_tick(pending), self._write_loop_interval
            )
            logger.debug(f"Asynchronous write of {len(items)} items scheduled")
            return future

    def close(self) -> None:
        """Request the stream to close.

        No further writes are accepted. The stream reaches CLOSED once the
        buffer is empty and no asynchronous write is outstanding. Does nothing
        if the stream is already closed or in an error state.
        """
        with self._lock:
            if self._state is StreamState.READY:
                self._state = StreamState.REQUEST_FOR_CLOSE
                logger.debug("Stream close requested")

    # --- Reader interface ---

    def read(self) -> Optional[T]:
        """Pop the oldest item, or return None if the buffer is empty.

        Reading from an empty stream after a close request completes the
        close and fires ``on_closed``.

        Raises:
            InvalidOperationError: stream is closed or in an error state
        """
        with self._lock:
            self._check_readable("read")
            if self._buffer:
                return self._buffer.popleft()
            on_closed = self._try_finish_close()

        if on_closed is not None:
            self._invoke(on_closed)
        return None

    def read_buffer(self) -> List[T]:
        """Return and clear everything currently buffered (may be empty).

        Raises:
            InvalidOperationError: stream is closed or in an error state
        """
        with self._lock:
            self._check_readable("read_buffer")
            result = list(self._buffer)
            self._buffer.clear()
            return result

    # Internal methods

    def _check_writable(self, operation: str) -> None:
        if self._state in (StreamState.REQUEST_FOR_CLOSE, StreamState.CLOSED):
            raise InvalidOperationError(
                f"There are no more write operations allowed after the close function "
                f"has been called. The error occurred in '{operation}'."
            )
        if self._state is StreamState.ERROR:
            raise InvalidOperationError(
                f"The stream is in an error state. No further operations allowed. "
                f"The error occurred in '{operation}'."
            )

    def _check_readable(self, operation: str) -> None:
        if self._state is StreamState.CLOSED:
            raise InvalidOperationError(
                f"There are no more read operations allowed once the stream has been "
                f"closed. The error occurred in '{operation}'."
            )
        if self._state is StreamState.ERROR:
            raise InvalidOperationError(
                f"The stream is in an error state. No further operations allowed. "
                f"The error occurred in '{operation}'."
            )

    def _prepare(self, data: Union[T, List[T]]) -> List[T]:
        """Validate a payload and return it as a list of items."""
        if data is None:
            raise ArgumentNullOrUndefinedError("data")

        if isinstance(data, (list, tuple)):
            items = list(data)
            if not is_dense(items):
                raise InvalidTypeError(
                    "data", data, "The list in argument 'data' must not contain None values."
                )
        else:
            items = [data]

        if self._validator is not None:
            for item in items:
                self._validator(item)
        return items

    def _fail(self, error: RuntimeSupportError) -> Optional[StreamCallback]:
        """Move to ERROR and close internally.

        Returns the on_error callback to invoke once the lock is released.
        The callback is detached first so that it fires only once even when
        several pending writes observe the failure.
        """
        logger.warning(f"Stream error: {error}")
        self._error = error
        self._state = StreamState.ERROR
        on_error = self._on_error
        self._internal_close()
        return on_error

    def _internal_close(self) -> None:
        """Clear the buffer, release callbacks and stop the announce loop."""
        if self._state is not StreamState.ERROR:
            self._state = StreamState.CLOSED
        self._buffer.clear()
        self._on_data = None
        self._on_error = None
        if self._announce_handle is not None:
            self._scheduler.clear_recurring(self._announce_handle)
            self._announce_handle = None
        logger.debug(f"Stream finished in state {self._state.name}")

    def _try_finish_close(self) -> Optional[StreamCallback]:
        """Complete a requested close if nothing is left to drain.

        Returns the on_closed callback to invoke once the lock is released.
        """
        if (
            self._state is not StreamState.REQUEST_FOR_CLOSE
            or self._buffer
            or self._outstanding_writes > 0
        ):
            return None
        self._internal_close()
        on_closed = self._on_closed
        self._on_closed = None
        return on_closed

    def _announce_tick(self) -> None:
        with self._lock:
            if self._state.is_terminal:
                return
            if self._buffer:
                callback = self._on_data
            else:
                callback = self._try_finish_close()

        if callback is not None:
            self._invoke(callback)

    def _write_tick(self, pending: _PendingWrite) -> None:
        nudge: Optional[StreamCallback] = None
        on_error: Optional[StreamCallback] = None
        error: Optional[BaseException] = None

        now = self._scheduler.now()

        with self._lock:
            if pending.done:
                return

            if self._state is StreamState.ERROR:
                error = self._error
            else:
                free = self._max_buffer_size - len(self._buffer)
                if free > 0:
                    for _ in range(min(free, len(pending.items))):
                        self._buffer.append(pending.items.popleft())
                    pending.last_progress = now
                else:
                    nudge = self._on_data
                    stalled = now - pending.last_progress
                    if pending.timeout is not None and stalled > pending.timeout:
                        error = StreamTimeoutError(
                            "The current operation did not complete in a timely manner.",
                            timeout=pending.timeout,
                        )
                        on_error = self._fail(error)
                        nudge = None

            if error is None and pending.items:
                # Still waiting for buffer space.
                finished = False
            else:
                finished = True
                pending.done = True
                self._outstanding_writes -= 1
                self._scheduler.clear_recurring(pending.handle)

        if finished:
            if error is None:
                pending.future.set_result(None)
            else:
                pending.future.set_exception(error)
        if on_error is not None:
            self._invoke(on_error)
        if nudge is not None:
            self._invoke(nudge)

    def _invoke(self, callback: StreamCallback) -> None:
        try:
            callback(self)
        except Exception as e:
            logger.error(f"Error in stream callback: {e}")

    def __repr__(self) -> str:
        return (
            f"Stream(state={self._state.name}, buffered={len(self._buffer)}, "
            f"max_buffer_size={self._max_buffer_size})"
        )
