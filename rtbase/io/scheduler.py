"""Timer abstraction used by streams.

A Scheduler hands out one-shot and recurring timers and tells the time.
Streams never touch threads or clocks directly; they are given a scheduler
at construction.

- ThreadingScheduler: real time. All callbacks run one after another on a
  single daemon dispatcher thread, so callbacks never overlap.
- ManualScheduler: virtual time, callbacks run on the caller's thread when
  ``advance`` is called. Used for deterministic tests.
"""
from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)

TimerCallback = Callable[[], None]


class Scheduler(ABC):
    """Abstract timer source.

    Handles returned by ``set_timer`` / ``set_recurring`` are opaque and only
    meaningful to the scheduler that created them. Clearing a handle twice,
    or clearing a one-shot timer that already fired, is a no-op.
    """

    @abstractmethod
    def now(self) -> float:
        """Current time in seconds on this scheduler's clock."""
        pass

    @abstractmethod
    def set_timer(self, callback: TimerCallback, delay: float) -> Any:
        """Call callback once after delay seconds."""
        pass

    @abstractmethod
    def clear_timer(self, handle: Any) -> None:
        pass

    @abstractmethod
    def set_recurring(self, callback: TimerCallback, interval: float) -> Any:
        """Call callback every interval seconds until cleared."""
        pass

    @abstractmethod
    def clear_recurring(self, handle: Any) -> None:
        pass


@dataclass(order=True)
class _Timer:
    due: float
    sequence: int
    callback: TimerCallback = field(compare=False)
    interval: Optional[float] = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)


class ThreadingScheduler(Scheduler):
    """Real time scheduler backed by one daemon dispatcher thread.

    Timers are kept in a heap ordered by due time. The dispatcher sleeps on a
    condition until the earliest timer falls due, then runs it. A slow
    callback delays every later timer of the same scheduler; a recurring
    timer that fell behind fires once and is re-armed one interval from now.

    Clearing a timer only marks it cancelled, so it is safe to clear a timer
    from inside its own callback.
    """

    def __init__(self):
        self._queue: List[_Timer] = []
        self._sequence = itertools.count()
        self._condition = threading.Condition()
        self._thread: Optional[threading.Thread] = None

    def now(self) -> float:
        return time.monotonic()

    def set_timer(self, callback: TimerCallback, delay: float) -> _Timer:
        return self._push(callback, delay, None)

    def clear_timer(self, handle: _Timer) -> None:
        self._cancel(handle)

    def set_recurring(self, callback: TimerCallback, interval: float) -> _Timer:
        logger.debug(f"Recurring timer started (interval={interval}s)")
        return self._push(callback, interval, interval)

    def clear_recurring(self, handle: _Timer) -> None:
        self._cancel(handle)

    def _push(self, callback: TimerCallback, delay: float, interval: Optional[float]) -> _Timer:
        with self._condition:
            timer = _Timer(
                due=self.now() + delay,
                sequence=next(self._sequence),
                callback=callback,
                interval=interval,
            )
            heapq.heappush(self._queue, timer)
            if self._thread is None:
                self._thread = threading.Thread(
                    target=self._dispatch_loop,
                    daemon=True,
                    name="SchedulerDispatcher",
                )
                self._thread.start()
            self._condition.notify()
        return timer

    def _cancel(self, handle: Optional[_Timer]) -> None:
        if handle is None:
            return
        with self._condition:
            handle.cancelled = True
            self._condition.notify()

    def _next_due(self) -> _Timer:
        """Block until a timer falls due and return it (caller holds the condition)."""
        while True:
            while self._queue and self._queue[0].cancelled:
                heapq.heappop(self._queue)
            if not self._queue:
                self._condition.wait()
                continue
            delay = self._queue[0].due - self.now()
            if delay <= 0:
                return heapq.heappop(self._queue)
            self._condition.wait(delay)

    def _dispatch_loop(self) -> None:
        while True:
            with self._condition:
                timer = self._next_due()
                if timer.interval is not None:
                    # Re-arm before calling so the callback can clear it.
                    timer.due = max(timer.due + timer.interval, self.now())
                    timer.sequence = next(self._sequence)
                    heapq.heappush(self._queue, timer)

            try:
                timer.callback()
            except Exception as e:
                logger.error(f"Error in timer callback: {e}")


_default_scheduler: Optional[ThreadingScheduler] = None
_default_lock = threading.Lock()


def default_scheduler() -> ThreadingScheduler:
    """Return the process wide ThreadingScheduler, creating it on first use."""
    global _default_scheduler
    with _default_lock:
        if _default_scheduler is None:
            _default_scheduler = ThreadingScheduler()
        return _default_scheduler


class ManualScheduler(Scheduler):
    """Scheduler driven by explicit calls to ``advance``.

    Timers fire in due-time order (creation order for ties), each with
    ``now()`` returning its due time. Exceptions raised by callbacks
    propagate to the caller of ``advance``.

    Example:
        >>> scheduler = ManualScheduler()
        >>> calls = []
        >>> _ = scheduler.set_recurring(lambda: calls.append(scheduler.now()), 0.5)
        >>> scheduler.advance(1.2)
        >>> calls
        [0.5, 1.0]
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[_Timer] = []
        self._sequence = itertools.count()

    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        """Number of timers that are scheduled and not cancelled."""
        return sum(1 for timer in self._queue if not timer.cancelled)

    def set_timer(self, callback: TimerCallback, delay: float) -> _Timer:
        return self._push(callback, delay, None)

    def clear_timer(self, handle: _Timer) -> None:
        if handle is not None:
            handle.cancelled = True

    def set_recurring(self, callback: TimerCallback, interval: float) -> _Timer:
        return self._push(callback, interval, interval)

    def clear_recurring(self, handle: _Timer) -> None:
        if handle is not None:
            handle.cancelled = True

    def advance(self, seconds: float) -> None:
        """Move virtual time forward, firing every timer that falls due."""
        target = self._now + seconds
        while self._queue and self._queue[0].due <= target:
            timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = timer.due
            if timer.interval is not None:
                timer.due += timer.interval
                timer.sequence = next(self._sequence)
                heapq.heappush(self._queue, timer)
            timer.callback()
        self._now = target

    def _push(self, callback: TimerCallback, delay: float, interval: Optional[float]) -> _Timer:
        timer = _Timer(
            due=self._now + delay,
            sequence=next(self._sequence),
            callback=callback,
            interval=interval,
        )
        heapq.heappush(self._queue, timer)
        return timer
