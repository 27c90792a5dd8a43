"""Stream layer.

This module provides:
- Buffered one-time streams (Stream, StreamConfig)
- Stream lifecycle states (StreamState)
- Timer sources the streams run on (ThreadingScheduler, ManualScheduler)
- Element-typed stream factories (byte_stream, bit_string_stream)
"""

from .state import StreamState
from .scheduler import Scheduler, ThreadingScheduler, ManualScheduler, default_scheduler
from .stream import (
    Stream,
    StreamConfig,
    DEFAULT_BUFFER_SIZE,
    WRITE_LOOP_INTERVAL,
    DATA_ANNOUNCE_INTERVAL,
)
from .typed import typed_stream, byte_stream, bit_string_stream

__all__ = [
    # Streams
    'Stream',
    'StreamConfig',
    'StreamState',
    'DEFAULT_BUFFER_SIZE',
    'WRITE_LOOP_INTERVAL',
    'DATA_ANNOUNCE_INTERVAL',

    # Schedulers
    'Scheduler',
    'ThreadingScheduler',
    'ManualScheduler',
    'default_scheduler',

    # Typed streams
    'typed_stream',
    'byte_stream',
    'bit_string_stream',
]
