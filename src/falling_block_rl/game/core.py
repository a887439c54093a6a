from __future__ import annotations

import random
import time
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import numpy as np

from .grid import Cell, Coordinate, GameGrid
from .pieces import Color, Piece, random_piece
from .rules import ScoringRules
from .timing import GravityTimer


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE = 2
    SOFT_DROP = 3
    NONE = 4


class GamePhase(Enum):
    FALLING = "falling"
    GAME_OVER = "game_over"


@dataclass
class GameConfig:
    width: int = 10
    height: int = 20
    random_seed: Optional[int] = None
    spawn_x: Optional[int] = None  # None -> width // 2 - 2
    spawn_y: int = -1
    fall_interval: float = 1.0  # seconds between automatic one-row falls

    def __post_init__(self) -> None:
        if self.width < 4:
            raise ValueError(f"width must be at least 4, got {self.width}")
        if self.height < 2:
            raise ValueError(f"height must be at least 2, got {self.height}")
        if self.fall_interval <= 0:
            raise ValueError(f"fall_interval must be positive, got {self.fall_interval}")

    @property
    def spawn_column(self) -> int:
        if self.spawn_x is None:
            return self.width // 2 - 2
        return self.spawn_x


class FallingBlockGame:
    """Board engine: one falling piece over a grid of locked cells.

    The driver calls `update()` once per frame with the commands received
    since the previous frame; gravity is applied from the injected clock.
    Illegal moves and rotations leave the state untouched. Once a freshly
    spawned piece collides the game is over and every mutator is a no-op.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.rng = rng if rng is not None else random.Random(self.config.random_seed)
        self.clock = clock
        self.grid = GameGrid(self.config.width, self.config.height)
        self.timer = GravityTimer(self.config.fall_interval, self.clock())
        self.score = 0
        self.lines_cleared_total = 0
        self.pieces_locked = 0
        self.game_over = False
        self.current_piece: Optional[Piece] = None
        self.current_x = 0
        self.current_y = 0
        self.reset()

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.rng.seed(seed)
        self.grid.reset()
        self.score = 0
        self.lines_cleared_total = 0
        self.pieces_locked = 0
        self.game_over = False
        self.current_piece = None
        self.timer.mark(self.clock())
        self.spawn_piece()

    @property
    def phase(self) -> GamePhase:
        return GamePhase.GAME_OVER if self.game_over else GamePhase.FALLING

    # Placement rules

    def collides(self) -> bool:
        if self.current_piece is None:
            return False
        return self.grid.collides(self.current_piece.cells_at(self.current_x, self.current_y))

    def spawn_piece(self) -> bool:
        if self.game_over:
            return False
        piece = random_piece(self.rng)
        x = self.config.spawn_column
        y = self.config.spawn_y
        if self.grid.collides(piece.cells_at(x, y)):
            # Terminal: no piece is left overlapping the board.
            self.current_piece = None
            self.game_over = True
            return False
        self.current_piece = piece
        self.current_x = x
        self.current_y = y
        return True

    def move_left(self) -> bool:
        return self._shift(-1)

    def move_right(self) -> bool:
        return self._shift(1)

    def _shift(self, dx: int) -> bool:
        if self.game_over or self.current_piece is None:
            return False
        self.current_x += dx
        if self.collides():
            self.current_x -= dx
            return False
        return True

    def move_down(self) -> bool:
        """Drop the piece one row, or lock it where it is.

        Returns True when the piece moved, False when it locked instead.
        """
        if self.game_over or self.current_piece is None:
            return False
        self.current_y += 1
        if self.collides():
            self.current_y -= 1
            self.lock_piece()
            return False
        return True

    def rotate(self) -> bool:
        if self.game_over or self.current_piece is None:
            return False
        original = self.current_piece
        self.current_piece = original.transposed()
        if self.collides():
            self.current_piece = original
            return False
        return True

    def lock_piece(self) -> None:
        assert self.current_piece is not None
        cells = self.current_piece.cells_at(self.current_x, self.current_y)
        self.grid.write(cells, self.current_piece.kind)
        self.pieces_locked += 1
        self.current_piece = None
        self.clear_lines()
        self.spawn_piece()

    def clear_lines(self) -> int:
        lines = self.grid.clear_full_lines()
        self.lines_cleared_total += lines
        self.score += self.rules.score_for_lines(lines)
        return lines

    # Driver entry points

    def apply(self, action: Action) -> bool:
        if action == Action.LEFT:
            return self.move_left()
        if action == Action.RIGHT:
            return self.move_right()
        if action == Action.ROTATE:
            return self.rotate()
        if action == Action.SOFT_DROP:
            return self.move_down()
        return False

    def update(self, actions: Iterable[Action] = (), now: Optional[float] = None) -> None:
        """One frame tick: forward queued commands, then apply gravity if due."""
        if self.game_over:
            return
        for action in actions:
            self.apply(action)
            if self.game_over:
                return
        if now is None:
            now = self.clock()
        if self.timer.due(now):
            self.move_down()
            self.timer.mark(now)

    def step(self, action: Action) -> Tuple[np.ndarray, int, bool, Dict[str, Any]]:
        if self.game_over:
            return self.get_state(), 0, True, self._info(moved=False)

        score_before = self.score
        moved = self.apply(Action(action))
        reward = self.score - score_before
        return self.get_state(), reward, self.game_over, self._info(moved=moved)

    def _info(self, moved: bool) -> Dict[str, Any]:
        return {
            "score": self.score,
            "lines_cleared_total": self.lines_cleared_total,
            "pieces_locked": self.pieces_locked,
            "moved": moved,
        }

    # Read-only views for renderers

    def active_cells(self) -> List[Coordinate]:
        if self.current_piece is None:
            return []
        return self.current_piece.cells_at(self.current_x, self.current_y)

    def active_color(self) -> Optional[Color]:
        if self.current_piece is None:
            return None
        return self.current_piece.color

    def board_cells(self) -> List[List[Cell]]:
        return self.grid.rows()

    def get_state(self) -> np.ndarray:
        # Overlay current piece on a copy of the grid for observation
        state = self.grid.clone_state()
        if self.current_piece is not None and not self.game_over:
            for x, y in self.active_cells():
                if 0 <= y < self.grid.height and 0 <= x < self.grid.width:
                    # Use negative to indicate falling piece overlay
                    state[y, x] = -int(self.current_piece.kind)
        return state
