import logging
import sqlite3
from typing import List

import pygame

from controller import GameController
from database import MemoryBestScoreStore, get_database
from models import COUNTDOWN, PLAYING, WON, Card, RoundSnapshot
from scheduler import Scheduler
from settings import load_settings

logger = logging.getLogger(__name__)

# Colors
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
BLUE = (0, 100, 255)
GREEN = (0, 200, 0)
CARD_BACK_COLOR = (50, 50, 200)
CARD_FRONT_COLOR = (220, 220, 255)
CARD_MATCHED_COLOR = (200, 255, 200)

CARD_MARGIN = 10
BOARD_TOP = 120


def card_rects(count, columns, width, height, top=BOARD_TOP, margin=CARD_MARGIN) -> List[pygame.Rect]:
    """
    Lay the cards out as a centered grid below the stats bar.

    Args:
        count: Number of cards
        columns: Cards per row
        width: Window width
        height: Window height
        top: Space reserved above the board
        margin: Gap between cards

    Returns:
        One rect per card, in deck order
    """
    rows = (count + columns - 1) // columns
    card_width = min((width - margin * (columns + 1)) // columns,
                     int(((height - top - margin * (rows + 1)) // rows) / 1.25))
    card_height = int(card_width * 1.25)
    board_width = columns * card_width + (columns - 1) * margin
    left = (width - board_width) // 2

    rects = []
    for index in range(count):
        row, col = divmod(index, columns)
        rects.append(pygame.Rect(left + col * (card_width + margin),
                                 top + row * (card_height + margin),
                                 card_width, card_height))
    return rects


def card_at_pos(rects, pos) -> int:
    """Index of the card under a point, or -1."""
    for index, rect in enumerate(rects):
        if rect.collidepoint(pos):
            return index
    return -1


def open_store(db_file):
    """Open the best score database, falling back to memory if that fails."""
    try:
        return get_database(db_file)
    except (sqlite3.Error, OSError) as e:
        logger.error("Error opening %s: %s", db_file, e)
        logger.warning("Falling back to in-memory best scores for this session")
        return MemoryBestScoreStore()


class GameGUI:
    """Graphical front end: draws controller snapshots and forwards clicks."""

    def __init__(self, controller: GameController, fps=60):
        self.controller = controller
        self.fps = fps
        self.clock = pygame.time.Clock()
        self.screen = None
        self.width = 800
        self.height = 700
        self.font_small = pygame.font.SysFont('Arial', 20)
        self.font_medium = pygame.font.SysFont('Arial', 30)
        self.font_large = pygame.font.SysFont('Arial', 96, bold=True)
        self.button_rect = pygame.Rect(20, 20, 120, 40)
        self.rects = card_rects(controller.mode.card_count, controller.mode.columns,
                                self.width, self.height)

    def setup_window(self):
        """Set up the game window."""
        self.screen = pygame.display.set_mode((self.width, self.height))
        pygame.display.set_caption("Memory Match")

    def draw_card(self, card: Card, rect):
        if card.is_matched:
            pygame.draw.rect(self.screen, CARD_MATCHED_COLOR, rect, 0, 8)
        elif card.is_flipped:
            pygame.draw.rect(self.screen, CARD_FRONT_COLOR, rect, 0, 8)
        else:
            pygame.draw.rect(self.screen, CARD_BACK_COLOR, rect, 0, 8)
        pygame.draw.rect(self.screen, BLACK, rect, 2, 8)

        if card.is_flipped or card.is_matched:
            text = self.font_small.render(card.label, True, BLACK)
            self.screen.blit(text, (rect.centerx - text.get_width() // 2,
                                    rect.centery - text.get_height() // 2))

    def draw_ui(self, snapshot: RoundSnapshot):
        pygame.draw.rect(self.screen, BLUE, self.button_rect, 0, 5)
        label = "Restart" if snapshot.phase == PLAYING else "Play"
        text = self.font_medium.render(label, True, WHITE)
        self.screen.blit(text, (self.button_rect.centerx - text.get_width() // 2,
                                self.button_rect.centery - text.get_height() // 2))

        stats = (f"Time {snapshot.elapsed_text}   Moves {snapshot.move_count}   "
                 f"Matched {snapshot.matched_pairs}/{snapshot.total_pairs}")
        self.screen.blit(self.font_small.render(stats, True, BLACK), (170, 20))
        best = f"Best time {snapshot.best_time_text}   Best moves {snapshot.best_moves_text}"
        self.screen.blit(self.font_small.render(best, True, GREEN), (170, 50))

        if snapshot.phase == WON:
            won = self.font_medium.render("All pairs found!", True, GREEN)
            self.screen.blit(won, (self.width // 2 - won.get_width() // 2, 80))

    def draw(self, snapshot: RoundSnapshot):
        self.screen.fill(WHITE)
        self.draw_ui(snapshot)
        for card, rect in zip(snapshot.cards, self.rects):
            self.draw_card(card, rect)

        if snapshot.phase == COUNTDOWN:
            text = self.font_large.render(str(snapshot.countdown_value), True, BLUE)
            self.screen.blit(text, (self.width // 2 - text.get_width() // 2,
                                    self.height // 2 - text.get_height() // 2))
        pygame.display.flip()

    def handle_click(self, pos):
        if self.button_rect.collidepoint(pos):
            self.controller.start_round()
            return
        index = card_at_pos(self.rects, pos)
        if index >= 0:
            card = self.controller.state.deck[index]
            self.controller.flip(card.card_id)

    def run(self):
        """Run the game loop until the window is closed."""
        running = True
        while running:
            self.controller.scheduler.advance_to(pygame.time.get_ticks())

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    self.handle_click(event.pos)
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_SPACE:
                        self.controller.start_round()
                    elif event.key == pygame.K_ESCAPE:
                        running = False

            self.draw(self.controller.snapshot())
            self.clock.tick(self.fps)

        self.controller.teardown()


def main():
    """Main function to run the game."""
    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    settings = load_settings()

    pygame.display.init()
    pygame.font.init()

    store = open_store(settings.db_file)
    controller = GameController(store, settings=settings,
                                scheduler=Scheduler(pygame.time.get_ticks()))
    gui = GameGUI(controller, fps=settings.fps)
    gui.setup_window()
    try:
        gui.run()
    finally:
        if hasattr(store, "close"):
            store.close()
        pygame.quit()


if __name__ == "__main__":
    main()
