from __future__ import annotations

from typing import Optional, Tuple

import pygame

from falling_block_rl.game import FallingBlockGame


BACKGROUND = (20, 20, 26)


class Renderer:
    """Draws a game from its read-only views; never mutates it."""

    def __init__(self, cell_size: int = 30, margin: int = 20) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self._font: Optional[pygame.font.Font] = None

    def window_size(self, game: FallingBlockGame) -> Tuple[int, int]:
        return (
            game.grid.width * self.cell_size + self.margin * 2,
            game.grid.height * self.cell_size + self.margin * 2,
        )

    def _cell_rect(self, x: int, y: int) -> pygame.Rect:
        return pygame.Rect(
            x * self.cell_size,
            y * self.cell_size,
            self.cell_size - 1,
            self.cell_size - 1,
        )

    def _grid_surface(self, game: FallingBlockGame) -> pygame.Surface:
        width = game.grid.width * self.cell_size
        height = game.grid.height * self.cell_size
        surf = pygame.Surface((width, height))
        surf.fill((30, 30, 36))
        for y, row in enumerate(game.board_cells()):
            for x, cell in enumerate(row):
                color = BACKGROUND if cell.is_empty else cell.color
                pygame.draw.rect(surf, color, self._cell_rect(x, y))
        color = game.active_color()
        for x, y in game.active_cells():
            # Cells still above the board are not drawn
            if 0 <= y < game.grid.height and 0 <= x < game.grid.width:
                pygame.draw.rect(surf, color, self._cell_rect(x, y))
        return surf

    def draw(self, screen: pygame.Surface, game: FallingBlockGame, status: Optional[str] = None) -> None:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 24)
        screen.fill((10, 10, 14))
        screen.blit(self._grid_surface(game), (self.margin, self.margin))
        text = status if status is not None else f"Score: {game.score}"
        screen.blit(self._font.render(text, True, (230, 230, 230)), (self.margin, 2))
        if game.game_over:
            over = self._font.render("Game Over!", True, (255, 100, 100))
            rect = over.get_rect(center=(screen.get_width() // 2, screen.get_height() // 2))
            screen.blit(over, rect)
        pygame.display.flip()
