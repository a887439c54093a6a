from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Tuple


class TetrominoType(IntEnum):
    I = 1
    O = 2
    T = 3
    L = 4
    J = 5
    S = 6
    Z = 7


Offset = Tuple[int, int]  # (column, row)
Color = Tuple[int, int, int]


@dataclass(frozen=True)
class PieceShape:
    kind: TetrominoType
    offsets: Tuple[Offset, Offset, Offset, Offset]
    color: Color


CATALOG: Dict[TetrominoType, PieceShape] = {
    TetrominoType.I: PieceShape(TetrominoType.I, ((0, 0), (1, 0), (2, 0), (3, 0)), (255, 0, 0)),
    TetrominoType.O: PieceShape(TetrominoType.O, ((0, 0), (1, 0), (0, 1), (1, 1)), (0, 255, 0)),
    TetrominoType.T: PieceShape(TetrominoType.T, ((0, 0), (1, 0), (2, 0), (1, 1)), (0, 0, 255)),
    TetrominoType.L: PieceShape(TetrominoType.L, ((0, 0), (1, 0), (2, 0), (2, 1)), (255, 255, 0)),
    TetrominoType.J: PieceShape(TetrominoType.J, ((0, 0), (1, 0), (2, 0), (0, 1)), (255, 0, 255)),
    TetrominoType.S: PieceShape(TetrominoType.S, ((0, 0), (1, 0), (1, 1), (2, 1)), (0, 255, 255)),
    TetrominoType.Z: PieceShape(TetrominoType.Z, ((1, 0), (2, 0), (0, 1), (1, 1)), (255, 127, 0)),
}


def color_for(kind: TetrominoType) -> Color:
    return CATALOG[kind].color


@dataclass
class Piece:
    """Active piece: a private copy of a catalog entry's offsets.

    Rotating a piece never touches the catalog, since `offsets` is a fresh
    list built by `from_shape`.
    """

    kind: TetrominoType
    offsets: List[Offset] = field(default_factory=list)

    @classmethod
    def from_shape(cls, shape: PieceShape) -> "Piece":
        return cls(kind=shape.kind, offsets=list(shape.offsets))

    @property
    def color(self) -> Color:
        return color_for(self.kind)

    def transposed(self) -> "Piece":
        # Swaps column and row of every offset: a reflection across the
        # main diagonal, applied the same way to every shape.
        return Piece(self.kind, [(dy, dx) for dx, dy in self.offsets])

    def cells_at(self, origin_x: int, origin_y: int) -> List[Tuple[int, int]]:
        return [(origin_x + dx, origin_y + dy) for dx, dy in self.offsets]


def random_piece(rng: random.Random) -> Piece:
    kind = rng.choice(list(TetrominoType))
    return Piece.from_shape(CATALOG[kind])
