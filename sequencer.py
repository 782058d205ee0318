"""
Timed choreography of a round: preview reveal, countdown, then play.
"""
import logging
from typing import Callable

from scheduler import CancellableTaskGroup, Scheduler, TimerHandle

logger = logging.getLogger(__name__)

COUNTDOWN_STEP_MS = 1000


class RoundSequencer:
    """
    Schedules every stage of a round up front, as offsets from its launch.

    All timers, including the round-scoped ones other components register
    through schedule(), belong to one CancellableTaskGroup. cancel_all()
    guarantees nothing from an abandoned round fires later.
    """

    def __init__(self, scheduler: Scheduler, stagger_ms: int = 80, settle_ms: int = 300,
                 countdown_seconds: int = 3):
        self.scheduler = scheduler
        self.tasks = CancellableTaskGroup(scheduler)
        self.stagger_ms = stagger_ms
        self.settle_ms = settle_ms
        self.countdown_seconds = countdown_seconds

    def reveal_duration(self, card_count: int) -> int:
        """Milliseconds from launch until the countdown begins."""
        return card_count * self.stagger_ms + self.settle_ms

    def launch(self,
               card_count: int,
               on_reveal: Callable[[int], None],
               on_countdown_start: Callable[[int], None],
               on_countdown_tick: Callable[[int], None],
               on_round_start: Callable[[], None]) -> None:
        """
        Cancel anything pending and schedule a new round.

        Args:
            card_count: Number of cards in the new deck
            on_reveal: Called with each card index during the preview, in order
            on_countdown_start: Called with the starting countdown value
            on_countdown_tick: Called with each later countdown value (down to 1)
            on_round_start: Called when play begins
        """
        self.cancel_all()
        launched_at = self.scheduler.now()

        for index in range(card_count):
            self.tasks.call_at(launched_at + index * self.stagger_ms,
                               lambda index=index: on_reveal(index))

        countdown_at = launched_at + self.reveal_duration(card_count)
        self.tasks.call_at(countdown_at, lambda: on_countdown_start(self.countdown_seconds))
        for step in range(1, self.countdown_seconds):
            self.tasks.call_at(countdown_at + step * COUNTDOWN_STEP_MS,
                               lambda step=step: on_countdown_tick(self.countdown_seconds - step))
        self.tasks.call_at(countdown_at + self.countdown_seconds * COUNTDOWN_STEP_MS, on_round_start)

        logger.debug("Round sequence scheduled: %d cards, play starts at %d ms",
                     card_count, countdown_at + self.countdown_seconds * COUNTDOWN_STEP_MS)

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Register extra round-scoped work that dies with the round."""
        return self.tasks.call_later(delay_ms, callback)

    def cancel_all(self) -> int:
        return self.tasks.cancel_all()

    @property
    def pending(self) -> int:
        return len(self.tasks)
