import random

import numpy as np
import pytest

from falling_block_rl.game import (
    CATALOG,
    Action,
    FallingBlockGame,
    GameConfig,
    GamePhase,
    Piece,
    TetrominoType,
)

from conftest import fill_row


def vertical_i() -> Piece:
    return Piece.from_shape(CATALOG[TetrominoType.I]).transposed()


def test_spawn_position_and_initial_phase(make_game):
    game = make_game(TetrominoType.T)
    assert game.phase is GamePhase.FALLING
    assert game.current_piece.kind == TetrominoType.T
    assert (game.current_x, game.current_y) == (3, -1)
    assert game.active_cells() == [(3, -1), (4, -1), (5, -1), (4, 0)]
    assert game.active_color() == CATALOG[TetrominoType.T].color


def test_spawn_column_is_configurable(make_game):
    game = make_game(TetrominoType.O, spawn_x=0)
    assert game.current_x == 0


@pytest.mark.parametrize("kwargs", [{"width": 3}, {"height": 1}, {"fall_interval": 0}])
def test_invalid_config_raises(kwargs):
    with pytest.raises(ValueError):
        GameConfig(**kwargs)


def test_move_left_against_wall_is_rejected_repeatedly(make_game):
    game = make_game(TetrominoType.O)
    for _ in range(3):
        assert game.move_left()
    assert game.current_x == 0
    for _ in range(5):
        assert not game.move_left()
        assert game.current_x == 0


def test_move_right_stops_at_wall(make_game):
    game = make_game(TetrominoType.I)
    while game.move_right():
        pass
    assert max(x for x, _ in game.active_cells()) == game.grid.width - 1


def test_move_blocked_by_locked_cell(make_game):
    game = make_game(TetrominoType.O)
    game.current_y = 5
    game.grid.grid[5, 2] = int(TetrominoType.Z)
    assert not game.move_left()
    assert game.current_x == 3


def test_rotate_applies_transpose(make_game):
    game = make_game(TetrominoType.L)
    game.current_y = 5
    assert game.rotate()
    assert game.current_piece.offsets == [(0, 0), (0, 1), (0, 2), (1, 2)]


def test_rejected_rotation_restores_offsets_exactly(make_game):
    game = make_game(TetrominoType.I)
    game.current_x = 6
    game.current_y = 5
    game.grid.grid[7, 6] = int(TetrominoType.S)
    before = list(game.current_piece.offsets)

    assert not game.rotate()
    assert game.current_piece.offsets == before
    assert (game.current_x, game.current_y) == (6, 5)


def test_rotation_rejected_at_floor(make_game):
    game = make_game(TetrominoType.I)
    game.current_y = game.grid.height - 1
    assert not game.rotate()
    assert game.current_piece.offsets == [(0, 0), (1, 0), (2, 0), (3, 0)]


def test_rotation_does_not_touch_catalog(make_game):
    game = make_game(TetrominoType.T)
    game.current_y = 5
    game.rotate()
    assert CATALOG[TetrominoType.T].offsets == ((0, 0), (1, 0), (2, 0), (1, 1))


def test_move_down_moves_then_locks_and_spawns(make_game):
    game = make_game(TetrominoType.O, TetrominoType.T)
    moves = 0
    while game.move_down():
        moves += 1
    # Anchor -1 to 18 for a two-row piece on a 20-row board
    assert moves == 19
    assert game.pieces_locked == 1
    assert game.grid.grid[18:, 3:5].tolist() == [[2, 2], [2, 2]]
    assert game.current_piece.kind == TetrominoType.T
    assert (game.current_x, game.current_y) == (3, -1)


def test_soft_drop_action_matches_move_down(make_game):
    game = make_game(TetrominoType.O)
    _, reward, done, info = game.step(Action.SOFT_DROP)
    assert game.current_y == 0
    assert reward == 0
    assert not done
    assert info["moved"]


def test_single_line_clear(make_game):
    game = make_game(TetrominoType.O, TetrominoType.O)
    h = game.grid.height
    fill_row(game, h - 1, skip=(3,))
    game.grid.grid[h - 2, 0] = int(TetrominoType.J)
    game.current_piece = vertical_i()
    game.current_x = 3
    game.current_y = h - 4

    assert not game.move_down()

    assert game.score == 100
    assert game.lines_cleared_total == 1
    # Rows above the cleared one moved down by one
    assert game.grid.grid[h - 1, 0] == int(TetrominoType.J)
    assert [int(game.grid.grid[y, 3]) for y in range(h - 3, h)] == [1, 1, 1]
    assert int(np.count_nonzero(game.grid.grid)) == 4
    assert not game.grid.grid[0].any()


def test_double_line_clear_scores_flat_bonus(make_game):
    game = make_game(TetrominoType.O, TetrominoType.O)
    h = game.grid.height
    fill_row(game, h - 1, skip=(0,))
    fill_row(game, h - 2, skip=(0,))
    game.grid.grid[h - 3, 5] = int(TetrominoType.Z)
    game.current_piece = vertical_i()
    game.current_x = 0
    game.current_y = h - 4

    game.move_down()

    assert game.score == 200
    assert game.lines_cleared_total == 2
    assert game.grid.grid[h - 1].tolist() == [1, 0, 0, 0, 0, 7, 0, 0, 0, 0]
    assert game.grid.grid[h - 2].tolist() == [1] + [0] * 9
    assert not game.grid.grid[: h - 2].any()


def test_lock_above_board_drops_cells(make_game):
    game = make_game(TetrominoType.O, TetrominoType.O)
    game.grid.grid[1, 3] = int(TetrominoType.T)
    game.current_piece = vertical_i()
    game.current_x = 3
    game.current_y = -3

    game.lock_piece()

    assert int(game.grid.grid[0, 3]) == int(TetrominoType.I)
    assert int(np.count_nonzero(game.grid.grid)) == 2


def test_spawn_into_occupied_cells_is_game_over(make_game):
    game = make_game(TetrominoType.O, TetrominoType.T)
    fill_row(game, 0, skip=(9,))
    before = game.grid.clone_state()

    assert not game.spawn_piece()

    assert game.game_over
    assert game.phase is GamePhase.GAME_OVER
    assert game.current_piece is None
    assert game.active_cells() == []
    np.testing.assert_array_equal(game.grid.grid, before)


def test_game_over_is_terminal(make_game, clock):
    game = make_game(TetrominoType.O, TetrominoType.T)
    fill_row(game, 0, skip=(9,))
    game.spawn_piece()
    before = game.grid.clone_state()

    for action in Action:
        assert not game.apply(action)
    clock.now = 10.0
    game.update([Action.SOFT_DROP])
    _, reward, done, _ = game.step(Action.LEFT)

    assert done and reward == 0
    assert game.game_over
    np.testing.assert_array_equal(game.grid.grid, before)


def test_reset_starts_a_new_session(make_game):
    game = make_game(TetrominoType.O, TetrominoType.T, TetrominoType.L)
    fill_row(game, 0, skip=(9,))
    game.spawn_piece()
    game.score = 300

    game.reset()

    assert not game.game_over
    assert game.score == 0
    assert not game.grid.grid.any()
    assert game.current_piece.kind == TetrominoType.L


def test_gravity_waits_for_interval(make_game, clock):
    game = make_game(TetrominoType.T)
    for t in (0.1, 0.5, 0.99):
        clock.now = t
        game.update()
        assert game.current_y == -1

    clock.now = 1.0
    game.update()
    assert game.current_y == 0

    clock.now = 1.5
    game.update()
    assert game.current_y == 0

    clock.now = 2.2
    game.update()
    assert game.current_y == 1


def test_gravity_timer_resets_after_lock(make_game, clock):
    game = make_game(TetrominoType.O, TetrominoType.T)
    game.current_y = game.grid.height - 2
    clock.now = 1.0
    game.update()
    assert game.pieces_locked == 1
    assert game.current_piece.kind == TetrominoType.T
    assert game.timer.last_step == 1.0

    clock.now = 1.5
    game.update()
    assert game.current_y == -1


def test_update_forwards_commands_before_gravity(make_game, clock):
    game = make_game(TetrominoType.O)
    game.update([Action.LEFT, Action.LEFT, Action.ROTATE], now=1.0)
    assert game.current_x == 1
    assert game.current_y == 0


def test_get_state_overlays_falling_piece(make_game):
    game = make_game(TetrominoType.S)
    game.current_y = 0
    state = game.get_state()
    assert state[0, 3:5].tolist() == [-6, -6]
    assert state[1, 4:6].tolist() == [-6, -6]
    assert not game.grid.grid.any()


def test_board_cells_view(make_game):
    game = make_game(TetrominoType.S)
    game.grid.grid[19, 0] = int(TetrominoType.Z)
    rows = game.board_cells()
    assert len(rows) == 20 and len(rows[0]) == 10
    assert rows[19][0].kind == TetrominoType.Z
    assert rows[0][0].is_empty


def test_random_play_keeps_invariants():
    game = FallingBlockGame(GameConfig(random_seed=7), clock=lambda: 0.0)
    rng = random.Random(11)
    actions = list(Action)
    for _ in range(3000):
        if game.game_over:
            game.reset()
        before_score = game.score
        game.apply(rng.choice(actions))
        assert game.score >= before_score
        for x, y in game.active_cells():
            assert 0 <= x < game.grid.width
            assert y < game.grid.height
            if y >= 0:
                assert game.grid.grid[y, x] == 0
