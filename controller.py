"""
Game controller for the memory match game.

The controller is the only owner of round state. Player input arrives
through flip() and start_round(); everything else happens in scheduler
callbacks registered with the round sequencer.
"""
import logging

from cards import DEFAULT_MODE, DeckFactory, TurnResolver
from clock import Clock
from database import MOVES, TIME, BestScoreStore, best_key, load_best_record
from errors import InvariantViolation
from models import (COUNTDOWN, IDLE, PLAYING, PREVIEW, WON, Mode, RoundSnapshot,
                    RoundState)
from scheduler import Scheduler
from sequencer import RoundSequencer
from settings import GameSettings

logger = logging.getLogger(__name__)

# Phase events
START = "start"
REVEAL_DONE = "reveal_done"
COUNTDOWN_DONE = "countdown_done"
ALL_MATCHED = "all_matched"

TRANSITIONS = {
    (PREVIEW, REVEAL_DONE): COUNTDOWN,
    (COUNTDOWN, COUNTDOWN_DONE): PLAYING,
    (PLAYING, ALL_MATCHED): WON,
}


def next_phase(phase: str, event: str) -> str:
    """
    Work out the phase that follows an event.

    A new round may start from any phase; every other event is only legal
    in the phase listed in TRANSITIONS.

    Raises:
        InvariantViolation: If the event is not allowed in this phase
    """
    if event == START:
        return PREVIEW
    try:
        return TRANSITIONS[(phase, event)]
    except KeyError:
        raise InvariantViolation(f"Event {event!r} is not allowed in phase {phase!r}") from None


class GameController:
    """
    Top-level state machine of the memory match game.

    Composes the deck factory, turn resolver, round sequencer, clock and the
    best score store.
    """

    def __init__(self, store: BestScoreStore, mode: Mode = DEFAULT_MODE,
                 settings: GameSettings = None, scheduler: Scheduler = None,
                 deck_factory: DeckFactory = None, resolver: TurnResolver = None):
        """
        Initialize the controller and load the stored bests for the mode.

        Args:
            store: Key-value store holding best scores
            mode: Board configuration to play
            settings: Timing settings (defaults to GameSettings())
            scheduler: Timer queue shared with the front end
            deck_factory: Source of shuffled decks
            resolver: Turn resolver

        Raises:
            ConfigError: If the settings are invalid or the mode needs more
                symbols than the catalog holds
        """
        self.settings = (settings or GameSettings()).validate()
        self.mode = mode
        self.store = store
        self.scheduler = scheduler or Scheduler()
        self.deck_factory = deck_factory or DeckFactory()
        self.resolver = resolver or TurnResolver()
        self.sequencer = RoundSequencer(
            self.scheduler,
            stagger_ms=self.settings.stagger_ms,
            settle_ms=self.settings.settle_ms,
            countdown_seconds=self.settings.countdown_seconds,
        )
        self.clock = Clock(self.sequencer.tasks, self.settings.clock_interval_ms)
        self.best = load_best_record(store, mode.pair_count)
        self.rounds_won = 0

        # The idle board shows a face-down deck until the first round starts
        self.state = RoundState(phase=IDLE, deck=self.deck_factory.build(mode.pair_count))

    @property
    def phase(self) -> str:
        return self.state.phase

    @property
    def matched_pairs(self) -> int:
        return self.state.matched_count // 2

    def start_round(self) -> None:
        """Throw away the current round and start a new one, whatever its phase."""
        self.sequencer.cancel_all()
        self.clock.stop()

        deck = self.deck_factory.build(self.mode.pair_count)
        self.state = RoundState(
            phase=next_phase(self.state.phase, START),
            deck=deck,
            countdown_value=self.settings.countdown_seconds,
            input_locked=True,
        )
        self.sequencer.launch(
            len(deck),
            on_reveal=self._reveal_card,
            on_countdown_start=self._begin_countdown,
            on_countdown_tick=self._countdown_tick,
            on_round_start=self._begin_play,
        )
        logger.info("New round started (%s)", self.mode.label)

    def flip(self, card_id: str) -> bool:
        """
        Turn a card face up on behalf of the player.

        Args:
            card_id: Id of the card that was clicked

        Returns:
            True if the card was flipped, False if the input was ignored
        """
        state = self.state
        if state.phase != PLAYING or state.input_locked:
            return False

        card = state.find(card_id)
        if card is None or card.is_flipped or card.is_matched:
            return False

        card = card.face_up()
        state.replace_card(card)

        if state.first_pick is None:
            state.first_pick = card
        elif state.second_pick is None:
            state.second_pick = card
            state.input_locked = True
            self._schedule_resolution()
        return True

    def teardown(self) -> None:
        """Cancel everything still scheduled; the last state stays readable."""
        self.sequencer.cancel_all()
        self.clock.stop()
        self.state.input_locked = True

    def snapshot(self) -> RoundSnapshot:
        """Build the view the render surface draws from."""
        state = self.state
        cards = list(state.deck)
        if state.phase in (PREVIEW, COUNTDOWN):
            for index in range(min(state.revealed_count, len(cards))):
                cards[index] = cards[index].face_up()

        return RoundSnapshot(
            phase=state.phase,
            cards=tuple(cards),
            move_count=state.move_count,
            elapsed_seconds=state.elapsed_seconds,
            best_moves=self.best.best_moves,
            best_time_seconds=self.best.best_time_seconds,
            countdown_value=state.countdown_value,
            matched_pairs=self.matched_pairs,
            total_pairs=self.mode.pair_count,
            columns=self.mode.columns,
        )

    # Sequencer callbacks

    def _reveal_card(self, index: int):
        self.state.revealed_count = max(self.state.revealed_count, index + 1)

    def _begin_countdown(self, value: int):
        self.state.phase = next_phase(self.state.phase, REVEAL_DONE)
        self.state.countdown_value = value

    def _countdown_tick(self, value: int):
        self.state.countdown_value = value

    def _begin_play(self):
        state = self.state
        state.deck = [card.face_down() for card in state.deck]
        state.revealed_count = 0
        state.phase = next_phase(state.phase, COUNTDOWN_DONE)
        state.input_locked = False
        state.start_instant = self.scheduler.now()
        state.elapsed_seconds = 0
        state.countdown_value = 0
        self.clock.start(state.start_instant, self._on_clock_sample)

    def _on_clock_sample(self, seconds: int):
        if self.state.phase == PLAYING:
            self.state.elapsed_seconds = seconds

    # Turn handling

    def _schedule_resolution(self):
        state = self.state
        if state.first_pick.symbol_id == state.second_pick.symbol_id:
            delay = self.settings.match_delay_ms
        else:
            delay = self.settings.mismatch_delay_ms
        self.sequencer.schedule(delay, self._resolve_turn)

    def _resolve_turn(self):
        state = self.state
        if state.first_pick is None or state.second_pick is None:
            raise InvariantViolation("Turn resolution needs two picks")

        first = state.find(state.first_pick.card_id)
        second = state.find(state.second_pick.card_id)
        if first is None or second is None:
            raise InvariantViolation("Picked cards are not part of the current deck")

        result = self.resolver.resolve(first, second)
        state.replace_card(result.updated_first)
        state.replace_card(result.updated_second)
        state.first_pick = None
        state.second_pick = None
        state.input_locked = False
        state.move_count += 1

        if state.matched_count == self.mode.card_count:
            self._win()

    def _win(self):
        state = self.state
        state.phase = next_phase(state.phase, ALL_MATCHED)
        state.input_locked = True
        self.clock.stop()
        self.rounds_won += 1
        logger.info("Round won in %d moves and %d seconds", state.move_count, state.elapsed_seconds)
        self._record_bests(state.move_count, state.elapsed_seconds)

    def _record_bests(self, moves: int, seconds: int):
        """Keep each metric only if it strictly beats the stored best."""
        if self.best.best_moves is None or moves < self.best.best_moves:
            self.best.best_moves = moves
            self._persist(MOVES, moves)
        if self.best.best_time_seconds is None or seconds < self.best.best_time_seconds:
            self.best.best_time_seconds = seconds
            self._persist(TIME, seconds)

    def _persist(self, metric: str, value: int):
        key = best_key(self.mode.pair_count, metric)
        try:
            self.store.set(key, str(value))
        except Exception as e:
            # Losing a best score must never block the win
            logger.warning("Could not save %s=%s: %s", key, value, e)
        else:
            logger.info("New best %s: %s", metric, value)
