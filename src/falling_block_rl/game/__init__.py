"""Game module for Falling Block RL.

Exports the core game engine and supporting classes:
- GameGrid / Cell: Board storage, collision and line clearing
- Piece / TetrominoType / CATALOG: The seven piece shapes and their colors
- ScoringRules: Flat per-line bonus
- GravityTimer: Decides when the automatic fall is due
- FallingBlockGame: State machine over the active piece and the board
"""

from .grid import Cell, EMPTY_CELL, GameGrid
from .pieces import CATALOG, Piece, PieceShape, TetrominoType, random_piece
from .rules import ScoringRules
from .timing import GravityTimer
from .core import Action, FallingBlockGame, GameConfig, GamePhase

__all__ = [
    "Cell",
    "EMPTY_CELL",
    "GameGrid",
    "CATALOG",
    "Piece",
    "PieceShape",
    "TetrominoType",
    "random_piece",
    "ScoringRules",
    "GravityTimer",
    "Action",
    "FallingBlockGame",
    "GameConfig",
    "GamePhase",
]
