"""
One-shot timers driven by an external tick.

The front end calls Scheduler.advance_to(pygame.time.get_ticks()) once per
frame; tests advance the same scheduler by hand. All callbacks run on the
caller's thread, one at a time.
"""
import heapq
import itertools
import logging
from typing import Callable, List, Set

logger = logging.getLogger(__name__)


class TimerHandle:
    """A scheduled callback that can be cancelled before it fires."""

    __slots__ = ("when", "seq", "callback", "cancelled")

    def __init__(self, when: int, seq: int, callback: Callable[[], None]):
        self.when = when
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __lt__(self, other):
        return (self.when, self.seq) < (other.when, other.seq)

    def __repr__(self):
        state = "cancelled" if self.cancelled else "pending"
        return f"TimerHandle(when={self.when}, seq={self.seq}, {state})"


class Scheduler:
    """
    Millisecond timer queue.

    Callbacks fire in order of due time, and in registration order for equal
    due times. While a callback runs, now() reports that callback's due time.
    """

    def __init__(self, start_ms: int = 0):
        self._now = start_ms
        self._queue: List[TimerHandle] = []
        self._counter = itertools.count()

    def now(self) -> int:
        return self._now

    def call_at(self, when: int, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(max(when, self._now), next(self._counter), callback)
        heapq.heappush(self._queue, handle)
        return handle

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        return self.call_at(self._now + max(0, delay_ms), callback)

    def advance_to(self, now_ms: int) -> int:
        """
        Run every callback due at or before now_ms.

        Callbacks scheduled by a running callback also fire in this call if
        they are due.

        Returns:
            Number of callbacks that ran
        """
        ran = 0
        while self._queue and self._queue[0].when <= now_ms:
            handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = handle.when
            handle.callback()
            ran += 1
        self._now = max(self._now, now_ms)
        return ran

    def advance(self, delta_ms: int) -> int:
        return self.advance_to(self._now + delta_ms)

    @property
    def pending(self) -> int:
        """Number of callbacks still waiting to fire."""
        return sum(1 for handle in self._queue if not handle.cancelled)


class CancellableTaskGroup:
    """
    A set of timers that are revoked together.

    Fired handles drop out of the group on their own, so the group only ever
    holds work that is still outstanding.
    """

    def __init__(self, scheduler: Scheduler):
        self.scheduler = scheduler
        self._handles: Set[TimerHandle] = set()

    def call_at(self, when: int, callback: Callable[[], None]) -> TimerHandle:
        handle = None

        def run():
            self._handles.discard(handle)
            callback()

        handle = self.scheduler.call_at(when, run)
        self._handles.add(handle)
        return handle

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        return self.call_at(self.scheduler.now() + max(0, delay_ms), callback)

    def cancel(self, handle: TimerHandle) -> None:
        handle.cancel()
        self._handles.discard(handle)

    def cancel_all(self) -> int:
        """Cancel every outstanding timer in the group and return how many there were."""
        count = len(self._handles)
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()
        if count:
            logger.debug("Cancelled %d pending timers", count)
        return count

    def __len__(self):
        return len(self._handles)
