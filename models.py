"""
Data models for the memory match game.
The controller owns and mutates RoundState; everything handed to the
render surface is an immutable snapshot.
"""
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

# Round phases
IDLE = "idle"
PREVIEW = "preview"
COUNTDOWN = "countdown"
PLAYING = "playing"
WON = "won"

# Shown wherever a best score has not been recorded yet
NO_BEST_PLACEHOLDER = "—"


@dataclass(frozen=True)
class Card:
    """
    A single memory card.

    Cards are values: the id and symbol never change, and flipping or
    matching a card produces a new Card rather than mutating this one.
    """
    card_id: str
    symbol_id: str
    label: str = ""
    image: str = ""
    is_flipped: bool = False
    is_matched: bool = False

    def face_up(self) -> "Card":
        """Return this card turned face up."""
        return replace(self, is_flipped=True)

    def face_down(self) -> "Card":
        """Return this card turned face down (matched cards stay visible)."""
        if self.is_matched:
            return self
        return replace(self, is_flipped=False)

    def match(self) -> "Card":
        """Return this card marked as matched; matched cards stay face up."""
        return replace(self, is_matched=True, is_flipped=True)

    @property
    def is_open(self) -> bool:
        """True while the card is face up but not yet part of a matched pair."""
        return self.is_flipped and not self.is_matched

    def __str__(self):
        status = "matched" if self.is_matched else "face up" if self.is_flipped else "face down"
        return f"Card({self.symbol_id}, {status})"


@dataclass(frozen=True)
class Mode:
    """Static board configuration: how many pairs and how many grid columns."""
    label: str
    pair_count: int
    columns: int

    @property
    def card_count(self) -> int:
        return self.pair_count * 2


@dataclass
class BestRecord:
    """Best move count and best time (whole seconds) for one mode."""
    best_moves: Optional[int] = None
    best_time_seconds: Optional[int] = None


@dataclass
class RoundState:
    """Mutable state of the current round, owned by the GameController."""
    phase: str = IDLE
    deck: List[Card] = field(default_factory=list)
    first_pick: Optional[Card] = None
    second_pick: Optional[Card] = None
    move_count: int = 0
    start_instant: Optional[int] = None
    elapsed_seconds: int = 0
    countdown_value: int = 0
    input_locked: bool = True
    # Number of cards shown so far by the preview reveal (display only)
    revealed_count: int = 0

    def index_of(self, card_id: str) -> int:
        """Position of a card in the deck, or -1 if it is not in this round."""
        for i, card in enumerate(self.deck):
            if card.card_id == card_id:
                return i
        return -1

    def find(self, card_id: str) -> Optional[Card]:
        index = self.index_of(card_id)
        return self.deck[index] if index >= 0 else None

    def replace_card(self, card: Card) -> None:
        index = self.index_of(card.card_id)
        if index >= 0:
            self.deck[index] = card

    @property
    def matched_count(self) -> int:
        return sum(1 for card in self.deck if card.is_matched)

    @property
    def open_count(self) -> int:
        return sum(1 for card in self.deck if card.is_open)


@dataclass(frozen=True)
class RoundSnapshot:
    """Everything the render surface needs to draw one frame."""
    phase: str
    cards: Tuple[Card, ...]
    move_count: int
    elapsed_seconds: int
    best_moves: Optional[int]
    best_time_seconds: Optional[int]
    countdown_value: int
    matched_pairs: int
    total_pairs: int
    columns: int

    @property
    def elapsed_text(self) -> str:
        return format_time(self.elapsed_seconds)

    @property
    def best_time_text(self) -> str:
        return format_best_time(self.best_time_seconds)

    @property
    def best_moves_text(self) -> str:
        return NO_BEST_PLACEHOLDER if self.best_moves is None else str(self.best_moves)

    def to_dict(self):
        """Convert the snapshot to a plain dictionary."""
        return {
            'phase': self.phase,
            'cards': [
                {
                    'id': card.card_id,
                    'symbol_id': card.symbol_id,
                    'label': card.label,
                    'image': card.image,
                    'is_flipped': card.is_flipped,
                    'is_matched': card.is_matched,
                }
                for card in self.cards
            ],
            'move_count': self.move_count,
            'elapsed_seconds': self.elapsed_seconds,
            'best_moves': self.best_moves,
            'best_time_seconds': self.best_time_seconds,
            'countdown_value': self.countdown_value,
            'matched_pairs': self.matched_pairs,
            'total_pairs': self.total_pairs,
            'columns': self.columns,
        }


def format_time(total_seconds: int) -> str:
    """Format whole seconds as minutes:seconds, e.g. 125 -> '2:05'."""
    minutes, seconds = divmod(int(total_seconds), 60)
    return f"{minutes}:{seconds:02d}"


def format_best_time(seconds: Optional[int]) -> str:
    if seconds is None:
        return NO_BEST_PLACEHOLDER
    return format_time(seconds)
