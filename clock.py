from typing import Callable, Optional

from scheduler import CancellableTaskGroup, TimerHandle


class Clock:
    """
    Samples elapsed play time at a fixed interval.

    The clock knows nothing about the game: it reports whole seconds since
    its start instant to a callback until it is stopped.
    """

    def __init__(self, tasks: CancellableTaskGroup, interval_ms: int = 250):
        self.tasks = tasks
        self.interval_ms = interval_ms
        self.start_instant: Optional[int] = None
        self._on_sample: Optional[Callable[[int], None]] = None
        self._handle: Optional[TimerHandle] = None
        self._active = False

    @property
    def running(self) -> bool:
        return self._active

    def elapsed_seconds(self) -> int:
        if self.start_instant is None:
            return 0
        return (self.tasks.scheduler.now() - self.start_instant) // 1000

    def start(self, start_instant: int, on_sample: Callable[[int], None]) -> None:
        self.stop()
        self.start_instant = start_instant
        self._on_sample = on_sample
        self._active = True
        self._schedule_next()

    def stop(self) -> None:
        self._active = False
        if self._handle is not None:
            self.tasks.cancel(self._handle)
            self._handle = None

    def _schedule_next(self):
        self._handle = self.tasks.call_later(self.interval_ms, self._tick)

    def _tick(self):
        self._handle = None
        self._on_sample(self.elapsed_seconds())
        # on_sample may stop the clock (round won) or restart it
        if self._active and self._handle is None:
            self._schedule_next()
