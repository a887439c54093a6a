from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .pieces import Color, TetrominoType, color_for


Coordinate = Tuple[int, int]

EMPTY = 0


@dataclass(frozen=True)
class Cell:
    """One board position: empty, or occupied by a locked piece kind."""

    kind: Optional[TetrominoType] = None

    @classmethod
    def from_value(cls, value: int) -> "Cell":
        if value == EMPTY:
            return EMPTY_CELL
        return cls(TetrominoType(int(value)))

    @property
    def is_empty(self) -> bool:
        return self.kind is None

    @property
    def color(self) -> Optional[Color]:
        return None if self.kind is None else color_for(self.kind)


EMPTY_CELL = Cell()


class GameGrid:
    """Fixed-size board of locked cells.

    Storage is an int8 array indexed `[row, column]`; `EMPTY` (0) marks an
    empty cell and any other value is the `TetrominoType` that locked
    there. Row 0 is the top of the board.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def reset(self) -> None:
        self.grid.fill(EMPTY)

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell(self, x: int, y: int) -> Cell:
        return Cell.from_value(int(self.grid[y, x]))

    def rows(self) -> List[List[Cell]]:
        return [[Cell.from_value(int(v)) for v in row] for row in self.grid]

    def collides(self, cells: Iterable[Coordinate]) -> bool:
        # Rows above the top edge are open space for a piece that is entering.
        for x, y in cells:
            if x < 0 or x >= self.width or y >= self.height:
                return True
            if y >= 0 and self.grid[y, x] != EMPTY:
                return True
        return False

    def write(self, cells: Iterable[Coordinate], kind: TetrominoType) -> int:
        """Store `kind` in every cell on the board; returns how many landed.

        Cells above the top edge are dropped.
        """
        written = 0
        for x, y in cells:
            if self.is_inside(x, y):
                self.grid[y, x] = int(kind)
                written += 1
        return written

    def is_row_full(self, y: int) -> bool:
        return bool(np.all(self.grid[y] != EMPTY))

    def clear_full_lines(self) -> int:
        cleared = 0
        y = self.height - 1
        while y >= 0:
            if self.is_row_full(y):
                cleared += 1
                # Rows 0..y-1 slide down one; the same index is checked again.
                self.grid[1 : y + 1] = self.grid[0:y].copy()
                self.grid[0] = EMPTY
            else:
                y -= 1
        return cleared

    def get_max_height(self) -> int:
        # y=0 is top; find first non-empty from top
        non_empty_rows = np.where(np.any(self.grid != EMPTY, axis=1))[0]
        if non_empty_rows.size == 0:
            return 0
        top_index = int(non_empty_rows[0])
        return self.height - top_index

    def count_holes(self) -> int:
        holes = 0
        for x in range(self.width):
            column = self.grid[:, x]
            seen_block = False
            for cell in column:
                if cell != EMPTY:
                    seen_block = True
                elif seen_block:
                    holes += 1
        return holes

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
