from models import PLAYING, Card, RoundSnapshot, format_best_time, format_time


def test_format_time_pads_seconds():
    assert format_time(125) == "2:05"
    assert format_time(0) == "0:00"
    assert format_time(59) == "0:59"
    assert format_time(600) == "10:00"


def test_missing_best_renders_placeholder():
    assert format_best_time(None) == "—"
    assert format_best_time(61) == "1:01"


def test_card_transitions_return_new_cards():
    card = Card(card_id="c1", symbol_id="ink-1")
    up = card.face_up()
    assert up.is_open and not card.is_flipped
    assert up.face_down() == card
    matched = up.match()
    assert matched.is_matched and matched.is_flipped and not matched.is_open


def test_snapshot_to_dict_exposes_render_fields():
    card = Card(card_id="c1", symbol_id="ink-1", label="Ink 1",
                image="assets/cards/ink-1.png", is_flipped=True)
    snapshot = RoundSnapshot(
        phase=PLAYING, cards=(card,), move_count=4, elapsed_seconds=65,
        best_moves=None, best_time_seconds=30, countdown_value=0,
        matched_pairs=0, total_pairs=8, columns=4,
    )
    data = snapshot.to_dict()
    assert data["cards"][0] == {
        'id': "c1", 'symbol_id': "ink-1", 'label': "Ink 1",
        'image': "assets/cards/ink-1.png", 'is_flipped': True, 'is_matched': False,
    }
    assert data["phase"] == PLAYING
    assert snapshot.elapsed_text == "1:05"
    assert snapshot.best_time_text == "0:30"
    assert snapshot.best_moves_text == "—"
