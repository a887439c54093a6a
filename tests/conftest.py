from __future__ import annotations

from typing import Iterable, List

import pytest

from falling_block_rl.game import FallingBlockGame, GameConfig, TetrominoType


class ScriptedRandom:
    """Stands in for `random.Random`: hands out piece kinds in a fixed order."""

    def __init__(self, kinds: Iterable[TetrominoType], fallback: TetrominoType = TetrominoType.O) -> None:
        self.kinds: List[TetrominoType] = list(kinds)
        self.fallback = fallback

    def choice(self, seq):
        if self.kinds:
            return self.kinds.pop(0)
        return self.fallback

    def seed(self, seed=None) -> None:
        pass


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_game(clock):
    def _make(*kinds: TetrominoType, **config) -> FallingBlockGame:
        return FallingBlockGame(GameConfig(**config), rng=ScriptedRandom(kinds), clock=clock)

    return _make


def fill_row(game: FallingBlockGame, y: int, kind: TetrominoType = TetrominoType.T, skip=()) -> None:
    for x in range(game.grid.width):
        if x not in skip:
            game.grid.grid[y, x] = int(kind)
