import os

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
pygame = pytest.importorskip("pygame")

from database import GameDatabase, MemoryBestScoreStore  # noqa: E402
from main import card_at_pos, card_rects, open_store  # noqa: E402


def test_card_rects_form_a_grid_inside_the_window():
    rects = card_rects(16, 4, 800, 700)
    assert len(rects) == 16
    assert rects[0].top == rects[3].top
    assert rects[4].top > rects[0].bottom
    assert rects[1].left > rects[0].right
    for rect in rects:
        assert rect.left >= 0 and rect.right <= 800 and rect.bottom <= 700
    assert len({(rect.x, rect.y) for rect in rects}) == 16


def test_card_at_pos_hits_and_misses():
    rects = card_rects(4, 2, 400, 500)
    assert card_at_pos(rects, rects[3].center) == 3
    assert card_at_pos(rects, (0, 0)) == -1


def test_open_store_falls_back_to_memory(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")
    store = open_store(str(blocker / "memory_game.db"))
    assert isinstance(store, MemoryBestScoreStore)

    db = open_store(str(tmp_path / "memory_game.db"))
    assert isinstance(db, GameDatabase)
    db.close()


def _gui():
    from controller import GameController
    from main import GameGUI
    from scheduler import Scheduler

    pygame.display.init()
    pygame.font.init()
    controller = GameController(MemoryBestScoreStore(), scheduler=Scheduler())
    return GameGUI(controller)


def test_click_on_play_button_starts_round():
    gui = _gui()
    gui.handle_click(gui.button_rect.center)
    assert gui.controller.phase == "preview"


def test_click_on_card_flips_it_once_playing():
    gui = _gui()
    controller = gui.controller
    gui.handle_click(gui.button_rect.center)
    gui.handle_click(gui.rects[0].center)
    assert controller.state.first_pick is None

    controller.scheduler.advance(10000)
    assert controller.phase == "playing"
    gui.handle_click(gui.rects[0].center)
    assert controller.state.first_pick.card_id == controller.state.deck[0].card_id
    gui.handle_click((5, 690))
    assert controller.state.second_pick is None
