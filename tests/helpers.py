import itertools
from collections import defaultdict

from controller import GameController
from models import PLAYING, Mode
from settings import GameSettings

SMALL_MODE = Mode(label="2 pairs", pair_count=2, columns=2)


def make_controller(store, scheduler, deck_factory, mode=SMALL_MODE, settings=None):
    return GameController(store, mode=mode, settings=settings or GameSettings(),
                          scheduler=scheduler, deck_factory=deck_factory)


def play_until_ready(controller):
    """Start a round and run the preview and countdown to completion."""
    controller.start_round()
    sequencer = controller.sequencer
    card_count = len(controller.state.deck)
    controller.scheduler.advance(
        sequencer.reveal_duration(card_count) + sequencer.countdown_seconds * 1000)
    assert controller.phase == PLAYING


def pairs_by_symbol(controller):
    pairs = defaultdict(list)
    for card in controller.state.deck:
        pairs[card.symbol_id].append(card.card_id)
    return dict(pairs)


def resolve_pending(controller):
    """Advance far enough for any pending turn resolution to apply."""
    controller.scheduler.advance(controller.settings.mismatch_delay_ms)


def counting_ids(prefix="c"):
    """Id generator yielding c1, c2, ... for reproducible decks."""
    counter = itertools.count(1)
    return lambda: f"{prefix}{next(counter)}"


def match_pair(controller, first_id, second_id):
    assert controller.flip(first_id)
    assert controller.flip(second_id)
    resolve_pending(controller)


def match_all(controller):
    """Flip every pair in turn, resolving each before the next."""
    for first_id, second_id in pairs_by_symbol(controller).values():
        match_pair(controller, first_id, second_id)
