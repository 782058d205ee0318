import random
import uuid
from dataclasses import dataclass
from typing import Callable, List

from errors import ConfigError, InvariantViolation
from models import Card, Mode


@dataclass(frozen=True)
class Symbol:
    """One entry of the symbol catalog; image is a reference for the renderer."""
    symbol_id: str
    label: str
    image: str


SYMBOLS = [
    Symbol(f"ink-{n}", f"Ink {n}", f"assets/cards/ink-{n}.png")
    for n in range(1, 9)
]

MODES = [Mode(label="4×4 (8 pairs)", pair_count=8, columns=4)]
DEFAULT_MODE = MODES[0]


def default_id_generator() -> str:
    """Return a fresh unique token for a card id."""
    return uuid.uuid4().hex


class DeckFactory:
    """
    Builds a shuffled deck of card pairs for a round.

    Randomness comes from the injected id generator and random source, so a
    seeded random.Random and a counting id generator make decks reproducible.
    """

    def __init__(self, symbols: List[Symbol] = None,
                 id_generator: Callable[[], str] = None,
                 rng: random.Random = None):
        """
        Initialize a deck factory.

        Args:
            symbols: Symbol catalog to draw pairs from (defaults to SYMBOLS)
            id_generator: Zero-argument callable returning a unique token
            rng: Random source used for shuffling
        """
        self.symbols = list(SYMBOLS if symbols is None else symbols)
        self.id_generator = id_generator or default_id_generator
        self.rng = rng or random.Random()

    def build(self, pair_count: int) -> List[Card]:
        """
        Build a new deck with two cards per symbol in uniform random order.

        Args:
            pair_count: Number of distinct symbols in the round

        Returns:
            List of 2 * pair_count face-down cards

        Raises:
            ConfigError: If pair_count is not between 1 and the catalog size
        """
        if pair_count < 1 or pair_count > len(self.symbols):
            raise ConfigError(
                f"Cannot build {pair_count} pairs from a catalog of {len(self.symbols)} symbols")

        picks = self.symbols[:pair_count]
        cards = [
            Card(
                card_id=f"{symbol.symbol_id}-{index}-{self.id_generator()}",
                symbol_id=symbol.symbol_id,
                label=symbol.label,
                image=symbol.image,
            )
            for index, symbol in enumerate(picks + picks)
        ]

        # random.shuffle is a Fisher-Yates shuffle over the whole list
        self.rng.shuffle(cards)
        return cards


@dataclass(frozen=True)
class TurnResult:
    is_match: bool
    updated_first: Card
    updated_second: Card


class TurnResolver:
    """Decides whether two picked cards form a pair."""

    def resolve(self, first: Card, second: Card) -> TurnResult:
        """
        Resolve a turn.

        On a match both cards become matched and stay face up; otherwise both
        go face down again. Neither input card is modified.

        Raises:
            InvariantViolation: If the picks are the same card or are not
                both face up and unmatched
        """
        if first.card_id == second.card_id:
            raise InvariantViolation(f"Card {first.card_id} picked twice in one turn")
        for card in (first, second):
            if not card.is_open:
                raise InvariantViolation(f"{card} cannot take part in a turn")

        if first.symbol_id == second.symbol_id:
            return TurnResult(True, first.match(), second.match())
        return TurnResult(False, first.face_down(), second.face_down())
