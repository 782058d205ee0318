import random
from collections import Counter

import pytest

from cards import DEFAULT_MODE, SYMBOLS, DeckFactory, TurnResolver
from errors import ConfigError, InvariantViolation
from models import Card
from tests.helpers import counting_ids


@pytest.mark.parametrize("pair_count", range(1, len(SYMBOLS) + 1))
def test_deck_has_two_cards_per_symbol(deck_factory, pair_count):
    deck = deck_factory.build(pair_count)
    assert len(deck) == 2 * pair_count
    counts = Counter(card.symbol_id for card in deck)
    assert len(counts) == pair_count
    assert set(counts.values()) == {2}


def test_deck_cards_start_face_down_with_unique_ids(deck_factory):
    deck = deck_factory.build(DEFAULT_MODE.pair_count)
    assert len({card.card_id for card in deck}) == len(deck)
    assert not any(card.is_flipped or card.is_matched for card in deck)


def test_card_id_embeds_symbol_and_generated_token():
    factory = DeckFactory(id_generator=counting_ids("t"), rng=random.Random(0))
    deck = factory.build(1)
    assert sorted(card.card_id for card in deck) == ["ink-1-0-t1", "ink-1-1-t2"]


def test_build_rejects_pair_count_outside_catalog(deck_factory):
    with pytest.raises(ConfigError):
        deck_factory.build(len(SYMBOLS) + 1)
    with pytest.raises(ConfigError):
        deck_factory.build(0)


def test_seeded_factories_build_identical_decks():
    first = DeckFactory(id_generator=counting_ids(), rng=random.Random(42)).build(8)
    second = DeckFactory(id_generator=counting_ids(), rng=random.Random(42)).build(8)
    assert first == second


def test_shuffle_positions_are_roughly_uniform():
    factory = DeckFactory(id_generator=counting_ids(), rng=random.Random(7))
    samples = 4000
    positions = Counter()
    for _ in range(samples):
        deck = factory.build(2)
        # Track the card created first (symbol ink-1, creation index 0)
        position = next(i for i, card in enumerate(deck) if card.card_id.startswith("ink-1-0-"))
        positions[position] += 1

    expected = samples / 4
    for position in range(4):
        assert abs(positions[position] - expected) < expected * 0.15, positions


def _open(card_id, symbol_id):
    return Card(card_id=card_id, symbol_id=symbol_id, is_flipped=True)


def test_resolve_match_marks_both_matched_and_visible():
    result = TurnResolver().resolve(_open("a1", "A"), _open("a2", "A"))
    assert result.is_match
    for card in (result.updated_first, result.updated_second):
        assert card.is_matched and card.is_flipped


def test_resolve_mismatch_turns_both_face_down():
    result = TurnResolver().resolve(_open("a1", "A"), _open("b1", "B"))
    assert not result.is_match
    for card in (result.updated_first, result.updated_second):
        assert not card.is_matched and not card.is_flipped


def test_resolve_leaves_inputs_untouched_and_gives_stable_verdict():
    resolver = TurnResolver()
    first, second = _open("a1", "A"), _open("a2", "A")
    verdicts = {resolver.resolve(first, second).is_match for _ in range(3)}
    assert verdicts == {True}
    assert first.is_flipped and not first.is_matched


def test_resolve_rejects_same_card_twice():
    card = _open("a1", "A")
    with pytest.raises(InvariantViolation):
        TurnResolver().resolve(card, card)


def test_resolve_rejects_matched_or_face_down_cards():
    resolver = TurnResolver()
    matched = _open("a1", "A").match()
    with pytest.raises(InvariantViolation):
        resolver.resolve(matched, _open("a2", "A"))
    face_down = Card(card_id="b1", symbol_id="B")
    with pytest.raises(InvariantViolation):
        resolver.resolve(_open("b2", "B"), face_down)


def test_matched_card_never_goes_face_down():
    card = _open("a1", "A").match()
    assert card.face_down() is card
    assert card.is_flipped
